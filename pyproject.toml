[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "femesh"
version = "0.1.0"
description = "P1 finite element solver for the 2D Poisson problem on Gmsh triangle meshes"
requires-python = ">=3.10"
keywords = ["finite elements", "fem", "mesh", "gmsh", "poisson", "quadrature", "vtk"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
femesh = "femesh.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["femesh"]

[tool.pytest.ini_options]
addopts = "-ra"

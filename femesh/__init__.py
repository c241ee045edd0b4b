"""P1 finite element tools for 2D Poisson problems on Gmsh triangle meshes."""

__version__ = "0.1.0"
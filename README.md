# femesh

A small finite element toolkit for the Poisson problem

    -Δu = f  in Ω,    u = g  on ∂Ω

It uses P1 Lagrange elements on two-dimensional triangle meshes. Meshes are
read from Gmsh `.msh` files in ASCII format 2, and the file must contain a
`$PhysicalNames` section. Solutions are written as legacy VTK files that
ParaView can open.

## Installation

    pip install .

numpy and scipy are installed along with the package.

## Running the solver

    femesh config_file.txt

The command does the following steps in order:

1. It reads the configuration.
2. It loads the mesh and builds the mesh connectivity.
3. It prints a domain summary.
4. It assembles and solves the system with preconditioned conjugate gradient.
5. It writes the solution to `test.vtk` in the current directory.

If the configuration names an exact solution, the L2 and H1 errors are
printed as well.

Mesh files are looked up in `../meshes/`, relative to the current directory.

If you give no configuration file, a warning is printed and the default
problem is solved:

- constant source `1`
- zero boundary condition
- first-order quadrature
- the mesh `../meshes/square2d_4elt.msh`

If the configuration file cannot be opened, the same defaults are used.

A configuration file holds `key = value` lines. Empty lines and lines that
start with `#` are skipped:

    # Integration order
    integration_order = 1

    # Mesh file (in the mesh directory)
    mesh_file = square2d_4elt.msh

    # Problem parameters
    source = quadratic_f
    boundary = quadratic_g

    # Solution (optional)
    sol = quadratic_g
    dx_sol = quadratic_dx
    dy_sol = quadratic_dy

    # Plot label
    label = quadratic

The following function names are available:

| Name | Value |
| --- | --- |
| `constant` | `1` |
| `zero` | `0` |
| `quadratic_f` | `-4` |
| `quadratic_g` | `x² + y²` |
| `linear_g` | `x + y` |
| `quadratic_dx` | `2x` |
| `quadratic_dy` | `2y` |

If `source` or `boundary` names an unknown function, the default stays in
place. An unknown `sol` name means no errors are computed.

## Using the library

```python
from femesh.config import load_config
from femesh.fem import FEMSolver
from femesh.mesh import Mesh

config = load_config("config_file.txt", "meshes/")

mesh = Mesh(config.mesh_path)
mesh.build_connectivity()          # required before solving
print(mesh.domain_summary())

solver = FEMSolver(mesh, config.source, config.boundary, config.integration_order)
solver.assemble()
report = solver.solve_cg()         # SolveReport(iterations, error, converged)
solver.export_solution("solution.vtk", config.label)

if config.solution is not None:
    print(solver.norm_l2(config.solution, config.integration_order))
    print(solver.norm_h1(config.solution, config.dx_solution,
                         config.dy_solution, config.integration_order))
```

`solver.solve_lu()` solves the system with a sparse LU factorisation
instead of conjugate gradient. After assembly, the global system is
available as `solver.matrix` and `solver.rhs`. The discrete solution is
`solver.solution`.

### Modules

- `femesh.mesh` provides `Mesh`, `Node`, `TriangleElement` and `Facet`. `Mesh` offers:
  - element and facet access: `node`, `element`, `facet`, `element_nodes`
  - counts: `nb_nodes`, `nb_elements`, `nb_facets`, `nb_segments`
  - connectivity queries, available after `build_connectivity`: `elements_for_node`, `facets_for_node`, `elements_for_facet`, `neighbor_triangles`, `is_node_on_boundary`, `boundary`
  - physical markers: `marked_elements`, `marked_facets`
  - measures: `area`, `perimeter`, `triangle_area`, `triangle_perimeter`, `facet_length`
  - `export_vtk`, which writes a VTK file of the mesh. If a function is given, it is sampled at the nodes.
- `femesh.quadrature` provides `QuadratureRule` and `MeshIntegration`.
  - `QuadratureRule` covers orders 1 to 3. Any other order gives the one-point rule.
  - `MeshIntegration` integrates over the reference triangle, a single element or the whole mesh.
- `femesh.transformation` provides `GeometricTransformation`, the affine map from the reference triangle to a mesh element, together with its jacobian.
- `femesh.functionspace` provides `FunctionSpace` and `FunctionElement`, which hold one value per mesh node.
- `femesh.fem` provides `P1LagrangeBasis`, `FEMSolver` and `SolveReport`.
- `femesh.config` provides `Config`, `load_config`, `parse_line` and the `FUNCTIONS` table of named functions.
- `femesh.bimap` provides `BiMap`, a two-way dictionary. It maps physical names to marker ids and back.

## Limitations

- The package does not generate meshes. Meshes must be produced beforehand as Gmsh format 2 ASCII files.
- Source terms, boundary data and exact solutions can only come from the built-in named functions when you use the configuration file. In library use, any Python callable `f(x, y)` can be passed.
- Only Dirichlet boundary conditions and P1 elements are supported.
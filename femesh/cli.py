"""Command that solves the configured problem and writes the solution."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from femesh.config import Config, load_config
from femesh.fem import FEMSolver
from femesh.mesh import Mesh


def main(argv: Sequence[str] | None = None) -> int:
    """Run the solver with the configuration file given as the only argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) == 1:
        config = load_config(args[0])
    else:
        print("WARNING : No config file provided, resorting to default parameters (see doc)")
        config = Config()

    mesh = Mesh(config.mesh_path)
    mesh.build_connectivity()
    print(mesh.domain_summary(), end="")

    solver = FEMSolver(mesh, config.source, config.boundary, config.integration_order)
    solver.assemble()
    solver.solve_cg()
    solver.export_solution("test.vtk", config.label)

    if config.solution is not None:
        order = config.integration_order
        print(f"L2 err: {solver.norm_l2(config.solution, order):g}")
        print(
            "H1 err: "
            f"{solver.norm_h1(config.solution, config.dx_solution, config.dy_solution, order):g}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
"""P1 finite element solver for the Poisson problem with Dirichlet boundary data."""

from __future__ import annotations

import math
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np
from scipy.sparse import coo_matrix, csr_matrix
from scipy.sparse.linalg import spsolve

from femesh.functionspace import FunctionElement, FunctionSpace
from femesh.mesh import Mesh
from femesh.quadrature import MeshIntegration, QuadratureRule
from femesh.transformation import GeometricTransformation

ScalarFunction = Callable[[float, float], float]

_REFERENCE_GRADIENT = np.array([[-1.0, 1.0, 0.0], [-1.0, 0.0, 1.0]])


class P1LagrangeBasis:
    """Linear Lagrange shape functions on the reference triangle."""

    def evaluate(self, coord: Sequence[float]) -> np.ndarray:
        """Values of the three shape functions at ``coord``, as a 1x3 array."""
        s, t = float(coord[0]), float(coord[1])
        return np.array([[1.0 - s - t, s, t]])

    def gradient(self, coord: Sequence[float]) -> np.ndarray:
        """Gradients of the three shape functions (columns), as a 2x3 array."""
        return _REFERENCE_GRADIENT.copy()


@dataclass(frozen=True)
class SolveReport:
    """Outcome of an iterative solve."""

    iterations: int
    error: float
    converged: bool


def _conjugate_gradient(
    matrix: csr_matrix, rhs: np.ndarray, tolerance: float, max_iterations: int
) -> tuple[np.ndarray, int, float]:
    """Jacobi-preconditioned conjugate gradient starting from zero."""
    x = np.zeros_like(rhs)
    rhs_norm2 = float(rhs @ rhs)
    if rhs_norm2 == 0.0:
        return x, 0, 0.0

    diagonal = matrix.diagonal()
    inverse_diagonal = np.ones_like(diagonal)
    nonzero = diagonal != 0.0
    inverse_diagonal[nonzero] = 1.0 / diagonal[nonzero]

    threshold = max(tolerance * tolerance * rhs_norm2, np.finfo(float).tiny)
    residual = rhs - matrix @ x
    residual_norm2 = float(residual @ residual)
    if residual_norm2 < threshold:
        return x, 0, math.sqrt(residual_norm2 / rhs_norm2)

    direction = inverse_diagonal * residual
    abs_new = float(residual @ direction)
    iterations = 0
    while iterations < max_iterations:
        product = matrix @ direction
        alpha = abs_new / float(direction @ product)
        x += alpha * direction
        residual -= alpha * product
        residual_norm2 = float(residual @ residual)
        if residual_norm2 < threshold:
            break
        preconditioned = inverse_diagonal * residual
        abs_old = abs_new
        abs_new = float(residual @ preconditioned)
        direction = preconditioned + (abs_new / abs_old) * direction
        iterations += 1
    return x, iterations, math.sqrt(residual_norm2 / rhs_norm2)


class FEMSolver:
    """Assembles and solves ``-Δu = f`` on a mesh with ``u = g`` on its boundary.

    The mesh must have had its connectivity built.
    """

    def __init__(self, mesh: Mesh, source: ScalarFunction, boundary: ScalarFunction, order: int) -> None:
        self.mesh = mesh
        self.source = source
        self.boundary = boundary
        self.integration_order = order
        self.space = FunctionSpace(mesh)
        self.dimension = mesh.nb_nodes()
        self._solution = self.space.element()
        self._matrix = csr_matrix((self.dimension, self.dimension))
        self._rhs = np.zeros(self.dimension)
        self._assembled = False

    @property
    def matrix(self) -> csr_matrix:
        """The global stiffness matrix."""
        return self._matrix

    @property
    def rhs(self) -> np.ndarray:
        """The global load vector."""
        return self._rhs

    @property
    def solution(self) -> FunctionElement:
        """The discrete solution."""
        return self._solution

    def element_system(self, triangle_id: int) -> tuple[np.ndarray, np.ndarray]:
        """Element stiffness matrix (3x3) and load vector (3) of a triangle."""
        basis = P1LagrangeBasis()
        quadrature = MeshIntegration(self.mesh)
        transform = GeometricTransformation(self.mesh, triangle_id)
        det = abs(transform.jacobian_determinant())

        grad = transform.jacobian_inverse().T @ basis.gradient((0.0, 0.0))
        stiffness = grad.T @ grad * det / 2.0

        shapes: tuple[ScalarFunction, ...] = (
            lambda x, y: 1.0 - x - y,
            lambda x, y: x,
            lambda x, y: y,
        )

        def weighted(shape: ScalarFunction) -> ScalarFunction:
            def integrand(x: float, y: float) -> float:
                px, py = transform.map((x, y))
                return self.source(px, py) * shape(x, y) * det

            return integrand

        load = np.array(
            [quadrature.integrate_over_ref(weighted(shape), self.integration_order) for shape in shapes]
        )
        return stiffness, load

    def assemble(self) -> None:
        """Assemble the global system and impose the Dirichlet boundary condition."""
        if self._assembled:
            return
        mesh = self.mesh
        n = self.dimension
        on_boundary = np.array([mesh.is_node_on_boundary(i) for i in range(n)], dtype=bool)

        rows: list[int] = []
        cols: list[int] = []
        values: list[float] = []
        for elem_index in range(mesh.nb_elements()):
            stiffness, load = self.element_system(elem_index)
            nodes = mesh.element_nodes(elem_index)
            for s, i in enumerate(nodes):
                if not on_boundary[i]:
                    rows.extend([i] * 3)
                    cols.extend(nodes)
                    values.extend(stiffness[s])
                self._rhs[i] += load[s]

        for i in mesh.boundary():
            rows.append(i)
            cols.append(i)
            values.append(1.0)
            node = mesh.node(i)
            self._rhs[i] = self.boundary(node.x, node.y)

        matrix = coo_matrix(
            (np.asarray(values, dtype=float), (np.asarray(rows, dtype=int), np.asarray(cols, dtype=int))),
            shape=(n, n),
        ).tocsr()
        matrix.sum_duplicates()

        entry_rows = np.repeat(np.arange(n), np.diff(matrix.indptr))
        entry_cols = matrix.indices
        lifted = ~on_boundary[entry_rows] & on_boundary[entry_cols]
        self._rhs -= np.bincount(
            entry_rows[lifted],
            weights=matrix.data[lifted] * self._rhs[entry_cols[lifted]],
            minlength=n,
        )
        matrix.data[lifted] = 0.0
        matrix.eliminate_zeros()

        self._matrix = matrix
        self._assembled = True

    def solve_cg(self) -> SolveReport:
        """Solve the system with preconditioned conjugate gradient."""
        print()
        tolerance = float(np.finfo(float).eps)
        values, iterations, error = _conjugate_gradient(
            self._matrix, self._rhs, tolerance, 2 * self.dimension
        )
        self._solution.initialize(values)
        converged = error <= tolerance
        if not converged:
            print("Failed to converge")
        print(f"#iterations:     {iterations}")
        print(f"estimated error: {error:g}")
        return SolveReport(iterations, error, converged)

    def solve_lu(self) -> None:
        """Solve the system with a sparse LU factorisation."""
        values = spsolve(self._matrix.tocsc(), self._rhs)
        self._solution.initialize(np.atleast_1d(values))

    def norm_l2(self, exact: ScalarFunction, order: int) -> float:
        """L2 distance between the discrete solution and ``exact``."""
        quadrature = MeshIntegration(self.mesh)
        rule = QuadratureRule(order)
        total = 0.0
        for elem_index in range(self.mesh.nb_elements()):
            u0, u1, u2 = (self._solution.get_local_value(elem_index, local) for local in range(3))
            transform = GeometricTransformation(self.mesh, elem_index)
            det = abs(transform.jacobian_determinant())

            def local_square(x: float, y: float) -> float:
                px, py = transform.map((x, y))
                z = exact(px, py) - (1.0 - x - y) * u0 - x * u1 - y * u2
                return z * z * det

            total += quadrature.integrate_over_ref(local_square, rule)
        return math.sqrt(total)

    def norm_h1(
        self,
        exact: ScalarFunction,
        grad_x: ScalarFunction,
        grad_y: ScalarFunction,
        order: int,
    ) -> float:
        """H1 distance between the discrete solution and ``exact`` with gradient ``(grad_x, grad_y)``."""
        basis = P1LagrangeBasis()
        quadrature = MeshIntegration(self.mesh)
        rule = QuadratureRule(order)
        total = 0.0
        for elem_index in range(self.mesh.nb_elements()):
            local_values = np.array(
                [self._solution.get_local_value(elem_index, local) for local in range(3)]
            )
            transform = GeometricTransformation(self.mesh, elem_index)
            det = abs(transform.jacobian_determinant())
            grad = transform.jacobian_inverse().T @ basis.gradient((0.0, 0.0)) @ local_values

            def local_square(x: float, y: float) -> float:
                px, py = transform.map((x, y))
                diff = grad - np.array([grad_x(px, py), grad_y(px, py)])
                return float(diff @ diff) * det

            total += quadrature.integrate_over_ref(local_square, rule)

        l2 = self.norm_l2(exact, order)
        return math.sqrt(total + l2 * l2)

    def export_solution(self, path: str | os.PathLike[str], plot_name: str) -> None:
        """Write the mesh and the nodal solution as a legacy VTK file."""
        mesh = self.mesh
        nb_nodes = mesh.nb_nodes()
        nb_triangles = mesh.nb_elements()
        parts = [
            "# vtk DataFile Version 2.0\n",
            "plotToVTK in meshclass\n",
            "ASCII\n",
            "DATASET UNSTRUCTURED_GRID\n",
            f"POINTS {nb_nodes} float\n",
        ]
        parts += [f"{node.x:g} {node.y:g} 0\n" for node in map(mesh.node, range(nb_nodes))]
        parts.append(f"CELLS {nb_triangles} {4 * nb_triangles}\n")
        parts += [
            "3 {} {} {}\n".format(*mesh.element_nodes(elem)) for elem in range(nb_triangles)
        ]
        parts.append(f"CELL_TYPES {nb_triangles}")
        parts += ["\n5"] * nb_triangles
        parts.append(f"\nPOINT_DATA {nb_nodes}\nSCALARS {plot_name} float 1\nLOOKUP_TABLE default\n")
        parts += [f"{value:g}\n" for value in self._solution.values]
        with open(path, "w", encoding="utf-8") as handle:
            handle.write("".join(parts))

    def reset(self) -> None:
        """Clear the global matrix and load vector."""
        self._matrix = csr_matrix((self.dimension, self.dimension))
        self._rhs = np.zeros(self.dimension)
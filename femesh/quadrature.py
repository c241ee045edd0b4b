"""Quadrature rules on triangles and integration over meshes."""

from __future__ import annotations

from collections.abc import Callable

from femesh.mesh import Mesh

ScalarFunction = Callable[[float, float], float]
Barycentric = tuple[float, float, float]

_RULES: dict[int, tuple[tuple[Barycentric, float], ...]] = {
    1: (((1 / 3, 1 / 3, 1 / 3), 1.0),),
    2: (
        ((2 / 3, 1 / 6, 1 / 6), 1 / 3),
        ((1 / 6, 2 / 3, 1 / 6), 1 / 3),
        ((1 / 6, 1 / 6, 2 / 3), 1 / 3),
    ),
    3: (
        ((1 / 3, 1 / 3, 1 / 3), -9 / 16),
        ((3 / 5, 1 / 5, 1 / 5), 25 / 48),
        ((1 / 5, 3 / 5, 1 / 5), 25 / 48),
        ((1 / 5, 1 / 5, 3 / 5), 25 / 48),
    ),
}


class QuadratureRule:
    """Integration points (barycentric) and weights for orders 1 to 3.

    Any order other than 2 or 3 gives the one-point centroid rule.
    """

    def __init__(self, order: int) -> None:
        self.order = order
        self.points: tuple[tuple[Barycentric, float], ...] = _RULES.get(order, _RULES[1])

    def __iter__(self):
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.points)


def _as_rule(rule: QuadratureRule | int) -> QuadratureRule:
    return rule if isinstance(rule, QuadratureRule) else QuadratureRule(rule)


class MeshIntegration:
    """Integrates functions over the reference triangle, mesh triangles or a whole mesh."""

    def __init__(self, mesh: Mesh) -> None:
        self.mesh = mesh

    def integrate_over_ref(self, f: ScalarFunction, rule: QuadratureRule | int) -> float:
        """Integral of ``f`` over the reference triangle."""
        total = sum(weight * f(bary[1], bary[2]) for bary, weight in _as_rule(rule))
        return total / 2.0

    def integrate_over_triangle(
        self, f: ScalarFunction, rule: QuadratureRule | int, triangle_id: int
    ) -> float:
        """Integral of ``f`` over the triangle ``triangle_id`` (scaled by its signed area)."""
        surface = self.mesh.triangle_area(triangle_id)
        a, b, c = (self.mesh.element_node(triangle_id, local) for local in range(3))
        total = 0.0
        for (l0, l1, l2), weight in _as_rule(rule):
            x = l0 * a.x + l1 * b.x + l2 * c.x
            y = l0 * a.y + l1 * b.y + l2 * c.y
            total += weight * f(x, y)
        return total * surface

    def integrate_constant_over_triangle(self, value: float, triangle_id: int) -> float:
        """Integral of a constant over the triangle ``triangle_id``."""
        return self.mesh.triangle_area(triangle_id) * value

    def integrate_over_mesh(self, f: ScalarFunction, order: QuadratureRule | int) -> float:
        """Integral of ``f`` over every triangle of the mesh."""
        rule = _as_rule(order)
        return sum(
            self.integrate_over_triangle(f, rule, index) for index in range(self.mesh.nb_elements())
        )
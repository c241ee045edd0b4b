import pytest

from femesh.mesh import Mesh
from femesh.quadrature import MeshIntegration, QuadratureRule

MSH = """$MeshFormat
2.2 0 8
$EndMeshFormat
$PhysicalNames
2
1 1 boundary
2 2 domain
$EndPhysicalNames
$Nodes
5
1 0 0 0
2 1 0 0
3 1 1 0
4 0 1 0
5 0.5 0.5 0
$EndNodes
$Elements
8
1 1 2 1 1 1 2
2 1 2 1 2 2 3
3 1 2 1 3 3 4
4 1 2 1 4 4 1
5 2 2 2 1 1 2 5
6 2 2 2 1 2 3 5
7 2 2 2 1 3 4 5
8 2 2 2 1 4 1 5
$EndElements
"""


@pytest.fixture
def mesh(tmp_path):
    path = tmp_path / "square.msh"
    path.write_text(MSH)
    return Mesh(path)


@pytest.fixture
def integration(mesh):
    return MeshIntegration(mesh)


@pytest.mark.parametrize("order", [0, 1, 2, 3, 7])
def test_weights_sum_to_one(order):
    rule = QuadratureRule(order)
    assert sum(w for _, w in rule) == pytest.approx(1.0)


@pytest.mark.parametrize("order", [1, 2, 3])
def test_barycentric_points_sum_to_one(order):
    for bary, _ in QuadratureRule(order):
        assert sum(bary) == pytest.approx(1.0)


@pytest.mark.parametrize("order, count", [(1, 1), (2, 3), (3, 4), (5, 1)])
def test_rule_sizes(order, count):
    assert len(QuadratureRule(order)) == count


def test_unknown_order_falls_back_to_centroid():
    assert QuadratureRule(9).points == QuadratureRule(1).points


@pytest.mark.parametrize("order", [1, 2, 3])
def test_constant_over_reference(integration, order):
    assert integration.integrate_over_ref(lambda x, y: 1.0, QuadratureRule(order)) == pytest.approx(0.5)


@pytest.mark.parametrize("order", [1, 2, 3])
def test_linear_over_reference(integration, order):
    assert integration.integrate_over_ref(lambda x, y: x, order) == pytest.approx(1 / 6)


def test_quadratic_exact_for_orders_two_and_three(integration):
    f = lambda x, y: x * x + x * y  # noqa: E731
    assert integration.integrate_over_ref(f, 2) == pytest.approx(integration.integrate_over_ref(f, 3))


def test_order_accepted_instead_of_rule(integration):
    f = lambda x, y: x * y + 1  # noqa: E731
    assert integration.integrate_over_triangle(f, 2, 1) == pytest.approx(
        integration.integrate_over_triangle(f, QuadratureRule(2), 1)
    )


@pytest.mark.parametrize("triangle", range(4))
def test_constant_over_triangle(integration, mesh, triangle):
    assert integration.integrate_constant_over_triangle(3.0, triangle) == pytest.approx(
        3.0 * mesh.triangle_area(triangle)
    )
    assert integration.integrate_over_triangle(lambda x, y: 3.0, 1, triangle) == pytest.approx(
        integration.integrate_constant_over_triangle(3.0, triangle)
    )


def test_mesh_integral_of_one_is_area(integration, mesh):
    assert integration.integrate_over_mesh(lambda x, y: 1.0, 2) == pytest.approx(mesh.area())


def test_mesh_integral_is_sum_of_triangles(integration, mesh):
    f = lambda x, y: x + 2 * y  # noqa: E731
    expected = sum(integration.integrate_over_triangle(f, 3, t) for t in range(mesh.nb_elements()))
    assert integration.integrate_over_mesh(f, 3) == pytest.approx(expected)


def test_linear_mesh_integral_independent_of_order(integration):
    f = lambda x, y: 2 * x - y  # noqa: E731
    values = [integration.integrate_over_mesh(f, order) for order in (1, 2, 3)]
    assert values[0] == pytest.approx(values[1])
    assert values[1] == pytest.approx(values[2])
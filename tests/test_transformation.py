import numpy as np
import pytest

from femesh.mesh import Mesh
from femesh.transformation import GeometricTransformation

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


def test_reference_transformation_is_identity(mesh):
    t = GeometricTransformation(mesh)
    assert np.allclose(t.map((0.25, 0.5)), [0.25, 0.5])
    assert np.allclose(t.jacobian(), np.eye(2))
    assert t.jacobian_determinant() == pytest.approx(1.0)


@pytest.mark.parametrize("element", range(4))
def test_vertices_are_mapped_to_element_nodes(mesh, element):
    t = GeometricTransformation(mesh, element)
    for local, ref in enumerate([(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)]):
        node = mesh.element_node(element, local)
        assert np.allclose(t.map(ref), [node.x, node.y])


@pytest.mark.parametrize("element", range(4))
def test_determinant_is_twice_the_area(mesh, element):
    t = GeometricTransformation(mesh, element)
    assert t.jacobian_determinant() == pytest.approx(2.0 * mesh.triangle_area(element))


@pytest.mark.parametrize("element", range(4))
def test_inverse_jacobian(mesh, element):
    t = GeometricTransformation(mesh, element)
    assert np.allclose(t.jacobian() @ t.jacobian_inverse(), np.eye(2))


def test_initialize_switches_element(mesh):
    t = GeometricTransformation(mesh, 0)
    t.initialize(2)
    other = GeometricTransformation(mesh, 2)
    assert np.allclose(t.jacobian(), other.jacobian())
    assert np.allclose(t.map((1 / 3, 1 / 3)), other.map((1 / 3, 1 / 3)))


def test_centroid_maps_to_centroid(mesh):
    t = GeometricTransformation(mesh, 1)
    nodes = [mesh.element_node(1, i) for i in range(3)]
    centroid = [sum(n.x for n in nodes) / 3, sum(n.y for n in nodes) / 3]
    assert np.allclose(t.map((1 / 3, 1 / 3)), centroid)
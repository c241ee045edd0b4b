"""Triangular meshes read from Gmsh ``.msh`` (format 2) files."""

from __future__ import annotations

import math
import os
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field

from femesh.bimap import BiMap

ScalarFunction = Callable[[float, float], float]

LOCAL_FACET_TO_LOCAL_NODE: tuple[tuple[int, int], ...] = ((1, 2), (2, 0), (0, 1))

_SEGMENT = 1
_TRIANGLE = 2


@dataclass(frozen=True)
class Node:
    """A point of the mesh."""

    x: float = 0.0
    y: float = 0.0

    def distance(self, other: Node) -> float:
        """Euclidean distance to ``other``."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y)[index]

    def __str__(self) -> str:
        return f"({self.x:g},{self.y:g})"


@dataclass(frozen=True)
class TriangleElement:
    """A triangle given by three global node indices."""

    nodes: tuple[int, int, int]

    def __getitem__(self, local_index: int) -> int:
        return self.nodes[local_index]


@dataclass
class Facet:
    """An edge of the mesh given by two global node indices."""

    nodes: tuple[int, int] = (-1, -1)
    is_segment: bool = False
    is_boundary: bool = False

    def __getitem__(self, local_index: int) -> int:
        return self.nodes[local_index]


def _next_line(lines: Iterator[str], what: str) -> str:
    try:
        return next(lines)
    except StopIteration:
        raise ValueError(f"unexpected end of mesh file while reading {what}") from None


def _advance_to(lines: Iterator[str], marker: str) -> None:
    for line in lines:
        if line.strip() == marker:
            return
    raise ValueError(f"mesh file has no {marker} section")


def _section(lines: Iterator[str], end: str) -> Iterator[list[str]]:
    for line in lines:
        if line.strip() == end:
            return
        tokens = line.split()
        if tokens:
            yield tokens
    raise ValueError(f"mesh file has no {end} marker")


class Mesh:
    """A 2D triangular mesh with connectivity and physical markers."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._nodes: list[Node] = []
        self._triangles: list[TriangleElement] = []
        self._facets: list[Facet] = []
        self._nb_nodes = 0
        self._nb_triangles = 0
        self._nb_facets = 0

        self._node_to_elements: dict[int, set[int]] = {}
        self._node_to_facets: dict[int, set[int]] = {}
        self._facet_to_elements: dict[int, tuple[int, int]] = {}
        self._element_to_facets: dict[int, tuple[int, int, int]] = {}

        self._physical_markers: BiMap[str, int] = BiMap()
        self._marker_dimension: dict[int, int] = {}
        self._marked_facets: dict[int, int] = {}
        self._marked_elements: dict[int, int] = {}
        self._boundary_nodes: set[int] = set()

        with open(path, encoding="utf-8") as handle:
            self._parse(iter(handle.read().splitlines()))

    def _parse(self, lines: Iterator[str]) -> None:
        _advance_to(lines, "$PhysicalNames")
        _next_line(lines, "physical names")
        for tokens in _section(lines, "$EndPhysicalNames"):
            if len(tokens) < 3:
                raise ValueError(f"malformed physical name line: {' '.join(tokens)}")
            dimension, physical_id, name = int(tokens[0]), int(tokens[1]), tokens[2]
            self._physical_markers.insert(name, physical_id)
            self._marker_dimension.setdefault(physical_id, dimension)

        _advance_to(lines, "$Nodes")
        self._nb_nodes = int(_next_line(lines, "nodes").split()[0])
        for tokens in _section(lines, "$EndNodes"):
            self._nodes.append(Node(float(tokens[1]), float(tokens[2])))

        _advance_to(lines, "$Elements")
        _next_line(lines, "elements")
        for tokens in _section(lines, "$EndElements"):
            kind, nb_tags = int(tokens[1]), int(tokens[2])
            physical = int(tokens[3])
            node_ids = [int(t) - 1 for t in tokens[3 + max(nb_tags, 1):]]
            if kind == _SEGMENT:
                self._marked_facets[len(self._facets)] = physical
                self._facets.append(Facet((node_ids[0], node_ids[1]), is_segment=True))
                self._nb_facets += 1
            elif kind == _TRIANGLE:
                self._marked_elements[len(self._triangles)] = physical
                self._triangles.append(TriangleElement((node_ids[0], node_ids[1], node_ids[2])))
                self._nb_triangles += 1

    # Element geometry

    def face_nodes(self, element: Sequence[int] | TriangleElement, local_facet_id: int) -> tuple[int, int]:
        """Global node indices of the local facet ``local_facet_id`` of ``element``."""
        first, second = LOCAL_FACET_TO_LOCAL_NODE[local_facet_id]
        return element[first], element[second]

    def facet_length(self, index: int) -> float:
        """Length of the facet ``index``."""
        facet = self.facet(index)
        return self._nodes[facet[0]].distance(self._nodes[facet[1]])

    def triangle_area(self, index: int) -> float:
        """Signed area of the triangle ``index`` (positive when counter-clockwise)."""
        a, b, c = (self._nodes[i] for i in self.element(index).nodes)
        return ((b.x - a.x) * (c.y - a.y) - (c.x - a.x) * (b.y - a.y)) / 2.0

    def triangle_perimeter(self, index: int) -> float:
        """Perimeter of the triangle ``index``."""
        a, b, c = (self._nodes[i] for i in self.element(index).nodes)
        return a.distance(b) + b.distance(c) + c.distance(a)

    def boundary(self) -> tuple[int, ...]:
        """Indices of the boundary nodes, in ascending order."""
        return tuple(sorted(self._boundary_nodes))

    def add_node(self, node: Node) -> None:
        """Append a node to the node table."""
        self._nodes.append(node)

    def add_element(self, element: TriangleElement) -> None:
        """Append a triangle to the element table."""
        self._triangles.append(element)

    def nb_nodes(self) -> int:
        return self._nb_nodes

    def nb_elements(self) -> int:
        return self._nb_triangles

    def nb_facets(self) -> int:
        return self._nb_facets

    def nb_segments(self) -> int:
        """Number of facets that were declared as segments in the file."""
        return sum(facet.is_segment for facet in self._facets)

    def node(self, index: int) -> Node:
        return self._nodes[index]

    def element(self, index: int) -> TriangleElement:
        return self._triangles[index]

    def facet(self, index: int) -> Facet:
        return self._facets[index]

    def element_nodes(self, index: int) -> tuple[int, int, int]:
        """Global node indices of the triangle ``index``."""
        return self.element(index).nodes

    def element_node(self, index: int, local_dof: int) -> Node:
        """The node at local position ``local_dof`` of the triangle ``index``."""
        return self._nodes[self.element(index)[local_dof]]

    # Connectivity

    def build_connectivity(self) -> None:
        """Build the facet table and the node, facet and element adjacency maps."""
        self._node_to_elements = {}
        self._node_to_facets = {}
        self._facet_to_elements = {}
        self._element_to_facets = {}

        facet_map: dict[tuple[int, int], tuple[Facet, int]] = {}
        facet_elements: dict[int, list[int]] = {}

        for index, facet in enumerate(self._facets[: self._nb_facets]):
            key = tuple(sorted(facet.nodes))
            facet_map[key] = (facet, index)
            facet_elements[index] = [-1, -1]

        next_index = self._nb_facets

        for t, triangle in enumerate(self._triangles[: self._nb_triangles]):
            element_facets = []
            for f in range(3):
                key = tuple(sorted(self.face_nodes(triangle, f)))
                known = key in facet_map
                facet_index = facet_map[key][1] if known else next_index
                element_facets.append(facet_index)

                for node_index in key:
                    self._node_to_elements.setdefault(node_index, set()).add(t)
                    self._node_to_facets.setdefault(node_index, set()).add(facet_index)

                if not known:
                    facet_map[key] = (Facet(key), facet_index)
                    facet_elements[facet_index] = [t, -1]
                    self._nb_facets += 1
                    next_index += 1
                elif facet_elements[facet_index][0] == -1:
                    facet_elements[facet_index][0] = t
                else:
                    facet_elements[facet_index][1] = t

            self._element_to_facets[t] = tuple(element_facets)

        for facet, index in facet_map.values():
            if -1 in facet_elements[index]:
                facet.is_boundary = True

        self._nb_facets = len(facet_map)
        size = max([self._nb_facets] + [index + 1 for _, index in facet_map.values()])
        facets = [Facet() for _ in range(size)]
        for facet, index in facet_map.values():
            facets[index] = facet
        self._facets = facets

        self._facet_to_elements = {index: (pair[0], pair[1]) for index, pair in facet_elements.items()}

        self._boundary_nodes.update(
            node_index for node_index in range(self._nb_nodes) if self.is_node_on_boundary(node_index)
        )

    def elements_for_node(self, node_index: int) -> list[int]:
        """Triangles that contain the node, in ascending order."""
        return sorted(self._node_to_elements[node_index])

    def facets_for_node(self, node_index: int) -> list[int]:
        """Facets that contain the node, in ascending order."""
        return sorted(self._node_to_facets[node_index])

    def elements_for_facet(self, facet_index: int) -> tuple[int, int]:
        """The (up to two) triangles sharing a facet; ``-1`` marks a missing one."""
        return self._facet_to_elements.get(facet_index, (-1, -1))

    def neighbor_triangles(self, triangle_index: int) -> tuple[int, int, int]:
        """Triangle across each local facet, or ``-1`` where there is none."""
        neighbors = [-1, -1, -1]
        for i, facet_index in enumerate(self._element_to_facets[triangle_index]):
            for candidate in self._facet_to_elements[facet_index]:
                if candidate not in (-1, triangle_index):
                    neighbors[i] = candidate
        return neighbors[0], neighbors[1], neighbors[2]

    def is_facet_on_boundary(self, facet_index: int) -> bool:
        return self._facets[facet_index].is_boundary

    def is_node_on_boundary(self, node_index: int) -> bool:
        """True when at least two boundary facets meet at the node."""
        count = sum(self.is_facet_on_boundary(f) for f in self._node_to_facets[node_index])
        return count >= 2

    def is_triangle_on_boundary(self, triangle_index: int) -> bool:
        """True unless every facet of the triangle lies on the boundary."""
        return not all(self.is_facet_on_boundary(f) for f in self._element_to_facets[triangle_index])

    # Physical names

    def domain_summary(self) -> str:
        """Text describing the physical names and the mesh composition."""
        lines = ["", "---Domain Summary---", "[Physical Names]"]
        markers: Iterable[int]
        for name, physical_id in self._physical_markers:
            markers = list(self._marked_elements.values()) + list(self._marked_facets.values())
            count = sum(marker == physical_id for marker in markers)
            lines.append(f"{name} - {physical_id}: {count}")
        lines += [
            "",
            "[Composition]",
            f" - Number of nodes: {self.nb_nodes()}",
            f" - Number of elements: {self.nb_elements()}",
            f" - Number of facets: {self.nb_facets()}",
            f" - Number of segments: {self.nb_segments()}",
            "--------------------",
        ]
        return "\n".join(lines) + "\n"

    def marked_elements(self, name: str) -> list[int]:
        """Triangles tagged with the physical name ``name`` (as written in the file)."""
        physical_id = self._physical_markers.at_left(name)
        return [index for index, marker in self._marked_elements.items() if marker == physical_id]

    def marked_facets(self, name: str) -> list[int]:
        """Segments tagged with the physical name ``name`` (as written in the file)."""
        physical_id = self._physical_markers.at_left(name)
        return [index for index, marker in self._marked_facets.items() if marker == physical_id]

    # Global measures

    def perimeter(self) -> float:
        """Total length of the boundary facets."""
        return sum(
            self.facet_length(index) for index in range(self._nb_facets) if self._facets[index].is_boundary
        )

    def area(self) -> float:
        """Sum of the signed triangle areas."""
        return sum(self.triangle_area(index) for index in range(self._nb_triangles))

    def export_vtk(
        self,
        path: str | os.PathLike[str],
        plot_name: str,
        function: ScalarFunction | None = None,
    ) -> None:
        """Write the mesh as a legacy VTK file, with ``function`` sampled at the nodes if given."""
        parts = [
            "# vtk DataFile Version 2.0\n",
            "plotToVTK in meshclass\n",
            "ASCII\n",
            "DATASET UNSTRUCTURED_GRID\n",
            f"POINTS {self._nb_nodes} float\n",
        ]
        parts += [f"{node.x:g} {node.y:g} 0\n" for node in self._nodes[: self._nb_nodes]]
        parts.append(f"CELLS {self._nb_triangles} {4 * self._nb_triangles}\n")
        parts += [f"3 {a} {b} {c}\n" for a, b, c in (t.nodes for t in self._triangles[: self._nb_triangles])]
        parts.append(f"CELL_TYPES {self._nb_triangles}")
        parts += ["\n5"] * self._nb_triangles
        if function is not None:
            parts.append(
                f"\nPOINT_DATA {self._nb_nodes}\nSCALARS {plot_name} float 1\nLOOKUP_TABLE default\n"
            )
            parts += [f"{function(node.x, node.y):g}\n" for node in self._nodes[: self._nb_nodes]]
        with open(path, "w", encoding="utf-8") as handle:
            handle.write("".join(parts))
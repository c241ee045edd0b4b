"""Nodal (P1) functions defined over a mesh."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import numpy as np

from femesh.mesh import Mesh

ScalarFunction = Callable[[float, float], float]


class FunctionSpace:
    """Space of functions with one degree of freedom per mesh node."""

    def __init__(self, mesh: Mesh) -> None:
        self.mesh = mesh
        self.global_dofs = mesh.nb_nodes()

    def connectivity(self, elem_index: int, local_dof: int) -> int:
        """Global node index of local dof ``local_dof`` of element ``elem_index``."""
        return self.mesh.element(elem_index)[local_dof]

    def element(self) -> FunctionElement:
        """A new function of this space, zero everywhere."""
        return FunctionElement(self)


class FunctionElement:
    """A function of a :class:`FunctionSpace`, stored as its nodal values."""

    def __init__(self, space: FunctionSpace) -> None:
        self.space = space
        self._data = np.zeros(space.global_dofs)

    @property
    def values(self) -> np.ndarray:
        """A copy of the nodal values."""
        return self._data.copy()

    def set_zero(self) -> None:
        """Set every nodal value to zero."""
        self._data[:] = 0.0

    def initialize(self, values: Sequence[float] | np.ndarray) -> None:
        """Replace the nodal values with ``values``."""
        array = np.asarray(values, dtype=float).ravel()
        if array.size != self.space.global_dofs:
            raise ValueError("Function dof does not match argument size.")
        self._data[:] = array

    def evaluate(self, expression: ScalarFunction) -> None:
        """Set each nodal value to ``expression`` at that node."""
        mesh = self.space.mesh
        for index in range(mesh.nb_nodes()):
            node = mesh.node(index)
            self._data[index] = expression(node.x, node.y)

    def set_value(self, node_index: int, value: float) -> None:
        self._data[node_index] = value

    def get_value(self, node_index: int) -> float:
        return float(self._data[node_index])

    def set_local_value(self, elem_index: int, local_dof: int, value: float) -> None:
        """Set the value at local dof ``local_dof`` of element ``elem_index``."""
        self._data[self.space.connectivity(elem_index, local_dof)] = value

    def get_local_value(self, elem_index: int, local_dof: int) -> float:
        """Value at local dof ``local_dof`` of element ``elem_index``."""
        return float(self._data[self.space.connectivity(elem_index, local_dof)])
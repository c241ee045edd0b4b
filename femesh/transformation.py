"""Affine map from the reference triangle to a triangle of a mesh."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from femesh.mesh import Mesh


class GeometricTransformation:
    """Affine map taking the reference triangle (0,0), (1,0), (0,1) onto a mesh element.

    Without an element the map is the identity on the reference triangle.
    """

    def __init__(self, mesh: Mesh, element: int | None = None) -> None:
        self._mesh = mesh
        self._x0 = np.array([0.0, 0.0])
        self._x1 = np.array([1.0, 0.0])
        self._x2 = np.array([0.0, 1.0])
        if element is not None:
            self.initialize(element)

    def initialize(self, element: int) -> None:
        """Point the transformation at the triangle ``element``."""
        vertices = [self._mesh.element_node(element, local) for local in range(3)]
        self._x0, self._x1, self._x2 = (np.array([v.x, v.y], dtype=float) for v in vertices)

    def map(self, coord: Sequence[float]) -> np.ndarray:
        """Image of the reference point ``coord`` in the real element."""
        s, t = float(coord[0]), float(coord[1])
        return self._x0 * (1.0 - s - t) + self._x1 * s + self._x2 * t

    def jacobian(self) -> np.ndarray:
        """Jacobian matrix of the map."""
        return np.column_stack((self._x1 - self._x0, self._x2 - self._x0))

    def jacobian_inverse(self) -> np.ndarray:
        """Inverse of the jacobian matrix."""
        return np.linalg.inv(self.jacobian())

    def jacobian_determinant(self) -> float:
        """Determinant of the jacobian matrix."""
        j = self.jacobian()
        return float(j[0, 0] * j[1, 1] - j[0, 1] * j[1, 0])
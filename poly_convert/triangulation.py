import numpy as np
from typing import Protocol
from scipy.spatial import Delaunay, QhullError


class TriangulationError(RuntimeError):
    """Raised when a point set cannot be triangulated."""


class Triangulator(Protocol):
    """Turns a point set into triangles given as index triples into it."""

    def triangulate(self, points: np.ndarray) -> np.ndarray:
        ...


class DelaunayTriangulator:
    """Delaunay triangulation backed by Qhull through scipy."""

    def triangulate(self, points: np.ndarray) -> np.ndarray:
        """
        Triangulate a point set.

        Args:
            points: Points (N, 2) as [x, y] rows

        Returns:
            Triangle indices (M, 3) into `points`
        """
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2:
            raise TriangulationError(f"expected an (N, 2) point array, got shape {points.shape}")
        if len(points) < 3:
            raise TriangulationError(f"need at least 3 points to triangulate, got {len(points)}")

        try:
            tri = Delaunay(points)
        except (QhullError, ValueError) as e:
            raise TriangulationError(f"triangulation of {len(points)} points failed: {e}") from e

        return tri.simplices.astype(np.intp, copy=False)

import numpy as np
from typing import Optional

from .sampler import sample_points
from .raster import rasterize
from .triangulation import DelaunayTriangulator, Triangulator


def apply_low_poly(image: np.ndarray, intensity: int,
                   density: int = 500, min_points: int = 10,
                   rng: Optional[np.random.Generator] = None,
                   triangulator: Optional[Triangulator] = None) -> np.ndarray:
    """
    Apply the low-poly effect to an image.

    Random points plus the image corners are triangulated and every triangle
    is filled with the average colour of the pixels it covers. Pixels no
    triangle covers keep their original colour.

    Args:
        image: Pixel buffer (H, W, 4), uint8 or uint16. Not modified.
        intensity: Triangulation point density (1-100)
        density: One point per `density` pixels at 100% intensity
        min_points: Lower bound on the number of random points
        rng: Random generator for point sampling
        triangulator: Triangulation capability, Delaunay if omitted

    Returns:
        New pixel buffer with the same shape and dtype as `image`

    Raises:
        TriangulationError: If the sampled points cannot be triangulated
    """
    if triangulator is None:
        triangulator = DelaunayTriangulator()

    height, width = image.shape[:2]
    points = sample_points(width, height, intensity, density, min_points, rng)
    triangles = triangulator.triangulate(points)

    out = image.copy()
    for ia, ib, ic in triangles:
        rasterize(image, out, points[[ia, ib, ic]])

    return out

import numpy as np
from typing import Optional


def point_count(width: int, height: int, intensity: int,
                density: int = 500, min_points: int = 10) -> int:
    """Number of random interior points for an image, corners excluded."""
    return max(min_points, (width * height // density) * intensity // 100)


def sample_points(width: int, height: int, intensity: int,
                  density: int = 500, min_points: int = 10,
                  rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """
    Sample triangulation vertices for an image.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        intensity: Point density percentage (1-100)
        density: One point per `density` pixels at 100% intensity
        min_points: Lower bound on the number of random points
        rng: Random generator, a fresh unseeded one if omitted

    Returns:
        Points (n + 4, 2) as [x, y] rows, the last four being the image corners
    """
    if rng is None:
        rng = np.random.default_rng()

    n = point_count(width, height, intensity, density, min_points)

    points = np.empty((n + 4, 2), dtype=np.float64)
    points[:n, 0] = rng.random(n) * width
    points[:n, 1] = rng.random(n) * height

    # Corners
    points[n] = (0, 0)
    points[n + 1] = (width - 1, 0)
    points[n + 2] = (0, height - 1)
    points[n + 3] = (width - 1, height - 1)

    return points

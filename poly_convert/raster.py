import math
import numpy as np
from typing import Sequence, Tuple


Vertex = Sequence[float]


def _channel_depth(dtype: np.dtype) -> Tuple[int, int]:
    """(expansion factor to 16-bit, right shift back to native depth) for a buffer dtype."""
    if dtype == np.uint8:
        return 0x101, 8
    if dtype == np.uint16:
        return 1, 0
    raise TypeError(f"unsupported pixel buffer dtype: {dtype}")


def _denominator(a: Vertex, b: Vertex, c: Vertex) -> Tuple[float, float, float, float]:
    acx, acy = c[0] - a[0], c[1] - a[1]
    abx, aby = b[0] - a[0], b[1] - a[1]
    dot0 = acx * acx + acy * acy
    dot1 = acx * abx + acy * aby
    dot3 = abx * abx + aby * aby
    return dot0, dot1, dot3, dot0 * dot3 - dot1 * dot1


def point_in_triangle(px: float, py: float, a: Vertex, b: Vertex, c: Vertex) -> bool:
    """
    Barycentric point-in-triangle test, inclusive of edges.

    Zero-area triangles contain no points.
    """
    dot0, dot1, dot3, denom = _denominator(a, b, c)
    if denom == 0:
        return False

    acx, acy = c[0] - a[0], c[1] - a[1]
    abx, aby = b[0] - a[0], b[1] - a[1]
    apx, apy = px - a[0], py - a[1]
    dot2 = acx * apx + acy * apy
    dot4 = abx * apx + aby * apy

    u = (dot3 * dot2 - dot1 * dot4) / denom
    v = (dot0 * dot4 - dot1 * dot2) / denom
    return u >= 0 and v >= 0 and u + v <= 1


def triangle_mask(xs: np.ndarray, ys: np.ndarray, a: Vertex, b: Vertex, c: Vertex) -> np.ndarray:
    """Vectorised `point_in_triangle` over coordinate arrays of equal shape."""
    dot0, dot1, dot3, denom = _denominator(a, b, c)
    if denom == 0:
        return np.zeros(np.shape(xs), dtype=bool)

    acx, acy = c[0] - a[0], c[1] - a[1]
    abx, aby = b[0] - a[0], b[1] - a[1]
    apx = xs - a[0]
    apy = ys - a[1]
    dot2 = acx * apx + acy * apy
    dot4 = abx * apx + aby * apy

    u = (dot3 * dot2 - dot1 * dot4) / denom
    v = (dot0 * dot4 - dot1 * dot2) / denom
    return (u >= 0) & (v >= 0) & (u + v <= 1)


def bounding_box(a: Vertex, b: Vertex, c: Vertex) -> Tuple[int, int, int, int]:
    """Inclusive integer bounding box (min_x, min_y, max_x, max_y) of a triangle."""
    min_x = math.floor(min(a[0], b[0], c[0]))
    min_y = math.floor(min(a[1], b[1], c[1]))
    max_x = math.ceil(max(a[0], b[0], c[0]))
    max_y = math.ceil(max(a[1], b[1], c[1]))
    return min_x, min_y, max_x, max_y


def covered_pixels(a: Vertex, b: Vertex, c: Vertex,
                   width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Integer pixel coordinates inside a triangle and inside a width x height buffer.

    Returns:
        (ys, xs) index arrays suitable for fancy indexing a (H, W, ...) buffer
    """
    min_x, min_y, max_x, max_y = bounding_box(a, b, c)
    min_x, min_y = max(min_x, 0), max(min_y, 0)
    max_x, max_y = min(max_x, width - 1), min(max_y, height - 1)

    if min_x > max_x or min_y > max_y:
        empty = np.empty(0, dtype=np.intp)
        return empty, empty

    ys, xs = np.mgrid[min_y:max_y + 1, min_x:max_x + 1]
    mask = triangle_mask(xs.astype(np.float64), ys.astype(np.float64), a, b, c)
    return ys[mask], xs[mask]


def average_color(source: np.ndarray, a: Vertex, b: Vertex, c: Vertex) -> np.ndarray:
    """
    Average RGBA colour of the source pixels covered by a triangle.

    Channels are accumulated at 16-bit precision, the mean is truncated and
    then shifted back to the source's native depth. A triangle covering no
    pixel yields opaque black.

    Args:
        source: Pixel buffer (H, W, 4), uint8 or uint16
        a, b, c: Triangle vertices as (x, y)

    Returns:
        Colour (4,) with the source's dtype
    """
    factor, shift = _channel_depth(source.dtype)
    height, width = source.shape[:2]

    ys, xs = covered_pixels(a, b, c, width, height)
    count = len(ys)
    if count == 0:
        black = np.zeros(source.shape[2], dtype=source.dtype)
        black[3] = np.iinfo(source.dtype).max
        return black

    totals = source[ys, xs].astype(np.uint64).sum(axis=0) * factor
    return ((totals // count) >> shift).astype(source.dtype)


def fill_triangle(dest: np.ndarray, a: Vertex, b: Vertex, c: Vertex, color: np.ndarray) -> None:
    """Write `color` to every pixel of `dest` covered by the triangle and inside its bounds."""
    height, width = dest.shape[:2]
    ys, xs = covered_pixels(a, b, c, width, height)
    dest[ys, xs] = color


def rasterize(source: np.ndarray, dest: np.ndarray, vertices: np.ndarray) -> None:
    """
    Fill one triangle of `dest` with the average colour it covers in `source`.

    `dest` may have different bounds than `source`; each is clipped to its
    own bounds. Zero-area triangles leave `dest` unchanged.

    Args:
        source: Pixel buffer read for the average colour
        dest: Pixel buffer written in place
        vertices: Triangle vertices (3, 2) as [x, y] rows
    """
    a, b, c = vertices
    if _denominator(a, b, c)[3] == 0:
        return

    color = average_color(source, a, b, c)
    fill_triangle(dest, a, b, c, color)

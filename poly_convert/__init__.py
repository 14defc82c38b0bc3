"""
poly-convert - low-poly stylization for images and animated GIFs.

Random points plus the image corners are triangulated and every triangle is
filled with the average colour of the pixels it covers.
"""

__version__ = "1.0.0"

from .sampler import sample_points, point_count
from .triangulation import Triangulator, DelaunayTriangulator, TriangulationError
from .raster import point_in_triangle, average_color, fill_triangle, rasterize
from .lowpoly import apply_low_poly
from .sequence import Frame, FrameSequence, quantize
from .pipeline import process_sequence, FrameProcessingError
from .config import PolyConfig, load_config, validate_config

__all__ = [
    'sample_points',
    'point_count',
    'Triangulator',
    'DelaunayTriangulator',
    'TriangulationError',
    'point_in_triangle',
    'average_color',
    'fill_triangle',
    'rasterize',
    'apply_low_poly',
    'Frame',
    'FrameSequence',
    'quantize',
    'process_sequence',
    'FrameProcessingError',
    'PolyConfig',
    'load_config',
    'validate_config'
]

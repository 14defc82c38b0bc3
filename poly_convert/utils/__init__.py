from .metrics import compute_metrics
from .visualization import create_comparison_grid

__all__ = [
    'compute_metrics',
    'create_comparison_grid'
]

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from pathlib import Path
from typing import Optional, Sequence, Union


def create_comparison_grid(original: np.ndarray,
                           rendered: np.ndarray,
                           path: Union[str, Path],
                           titles: Optional[Sequence[str]] = None) -> None:
    """
    Save a side-by-side comparison of an image and its stylization.

    Args:
        original: Source pixel buffer (H, W, 4)
        rendered: Stylized pixel buffer (H, W, 4)
        path: Output figure path, format taken from the extension
        titles: Optional titles for the two panels
    """
    if titles is None:
        titles = ['Original', 'Low-poly']

    fig, axes = plt.subplots(1, 2, figsize=(10, 5))

    for ax, img, title in zip(axes, (original, rendered), titles):
        ax.imshow(img)
        ax.set_title(title)
        ax.axis('off')

    plt.tight_layout()
    fig.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)

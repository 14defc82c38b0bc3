from dataclasses import dataclass, field
from typing import List, Optional
import numpy as np


# Pixels per chunk when matching against a palette, bounds the (N, K, 4) distance array
QUANTIZE_CHUNK = 1 << 16


def visible_colors(palette: np.ndarray) -> np.ndarray:
    """Palette as displayed: fully transparent entries become (0, 0, 0, 0)."""
    colors = palette.copy()
    colors[colors[:, 3] == 0] = 0
    return colors


@dataclass
class Frame:
    """One indexed image of an animation."""
    indices: np.ndarray   # (H, W) uint8 palette indices
    palette: np.ndarray   # (K, 4) uint8 RGBA, K <= 256

    @property
    def width(self) -> int:
        return self.indices.shape[1]

    @property
    def height(self) -> int:
        return self.indices.shape[0]

    def to_rgba(self) -> np.ndarray:
        """Decode to an (H, W, 4) uint8 RGBA buffer."""
        return np.take(visible_colors(self.palette), self.indices, axis=0, mode='clip')


@dataclass
class FrameSequence:
    """An animation: frames plus the metadata shared across them."""
    frames: List[Frame]
    width: int
    height: int
    delays: List[int] = field(default_factory=list)      # milliseconds per frame
    disposals: List[int] = field(default_factory=list)
    loop: Optional[int] = 0    # None writes no loop extension
    background: int = 0

    def __len__(self) -> int:
        return len(self.frames)


def nearest_palette_index(pixels: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """
    Index of the closest palette entry for each pixel.

    Distance is the squared difference summed over RGBA; ties go to the
    lowest index. Transparent entries match as (0, 0, 0, 0).

    Args:
        pixels: Colours (N, 4)
        palette: Palette (K, 4)

    Returns:
        Indices (N,) as uint8
    """
    pal = visible_colors(palette).astype(np.int32)
    out = np.empty(len(pixels), dtype=np.uint8)
    step = max(1, QUANTIZE_CHUNK // max(1, len(pal)))
    for start in range(0, len(pixels), step):
        chunk = pixels[start:start + step].astype(np.int32)
        diff = chunk[:, None, :] - pal[None, :, :]
        dist = np.einsum('nkc,nkc->nk', diff, diff)
        out[start:start + len(chunk)] = np.argmin(dist, axis=1)
    return out


def quantize(image: np.ndarray, palette: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Map a full-colour image onto a fixed palette in a buffer of the given bounds.

    Target pixels outside the image are left at index 0.

    Args:
        image: RGBA buffer (H, W, 4), uint8
        palette: Palette (K, 4) uint8 RGBA
        width: Target width
        height: Target height

    Returns:
        Palette indices (height, width) uint8
    """
    indices = np.zeros((height, width), dtype=np.uint8)
    h = min(height, image.shape[0])
    w = min(width, image.shape[1])
    if h == 0 or w == 0:
        return indices

    region = image[:h, :w].reshape(-1, image.shape[2])
    indices[:h, :w] = nearest_palette_index(region, palette).reshape(h, w)
    return indices

import threading
from pathlib import Path
from typing import Tuple, Union
import numpy as np
from PIL import Image, ImageSequence, GifImagePlugin

from .sequence import Frame, FrameSequence


STILL_FORMATS = {
    '.jpg': 'jpeg',
    '.jpeg': 'jpeg',
    '.png': 'png',
}


def output_path(input_path: Union[str, Path], suffix: str = '-low-poly') -> Path:
    """`dir/name.ext` -> `dir/name<suffix>.ext`."""
    path = Path(input_path)
    return path.with_name(f"{path.stem}{suffix}{path.suffix}")


def load_image(path: Union[str, Path], ext: str) -> Tuple[np.ndarray, str]:
    """
    Load a still image as an (H, W, 4) uint8 RGBA buffer.

    Returns:
        (pixels, format) where format is 'jpeg' or 'png'
    """
    fmt = STILL_FORMATS.get(ext.lower())
    if fmt is None:
        raise ValueError(f"unsupported image format: {ext}")

    with Image.open(path) as image:
        return np.array(image.convert('RGBA')), fmt


def save_image(image: np.ndarray, path: Union[str, Path], fmt: str, jpeg_quality: int = 95) -> None:
    """Save an RGBA buffer as 'jpeg' or 'png'."""
    img = Image.fromarray(image)
    if fmt == 'jpeg':
        img.convert('RGB').save(path, format='JPEG', quality=jpeg_quality)
    elif fmt == 'png':
        img.save(path, format='PNG')
    else:
        raise ValueError(f"unsupported image format for saving: {fmt}")


def resize_image(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resize an RGBA buffer with bicubic (Catmull-Rom) resampling."""
    img = Image.fromarray(image)
    return np.array(img.resize((width, height), Image.Resampling.BICUBIC))


def _frame_palette(frame: Image.Image) -> np.ndarray:
    rgb = np.array(frame.getpalette(rawmode='RGB') or [0, 0, 0], dtype=np.uint8).reshape(-1, 3)
    palette = np.full((len(rgb), 4), 255, dtype=np.uint8)
    palette[:, :3] = rgb

    # The transparent entry decodes to (0, 0, 0, 0) whatever colour it stores
    transparency = frame.info.get('transparency')
    if isinstance(transparency, int) and transparency < len(palette):
        palette[transparency] = 0
    return palette


def _quantize_frame(frame: Image.Image) -> Tuple[np.ndarray, np.ndarray]:
    """Indices and palette for a frame Pillow already expanded to RGB or RGBA."""
    rgba = frame.convert('RGBA')
    quantized = rgba.convert('RGB').quantize(255)
    indices = np.array(quantized, dtype=np.uint8)
    palette = _frame_palette(quantized)[:255]

    transparent = np.array(rgba)[..., 3] == 0
    if transparent.any():
        palette = np.vstack([palette, np.zeros((1, 4), dtype=np.uint8)])
        indices[transparent] = len(palette) - 1
    return indices, palette


# LOADING_STRATEGY is a module global of Pillow's GIF plugin
_gif_strategy_lock = threading.Lock()


def load_gif(path: Union[str, Path]) -> FrameSequence:
    """
    Load every frame of a GIF, each with its own palette.

    Frames that share the first frame's palette keep their stored indices.
    Pillow expands frames with a different palette to RGB(A); those are
    quantized again onto a palette of their own.
    """
    with _gif_strategy_lock:
        previous = GifImagePlugin.LOADING_STRATEGY
        GifImagePlugin.LOADING_STRATEGY = GifImagePlugin.LoadingStrategy.RGB_AFTER_DIFFERENT_PALETTE_ONLY
        try:
            with Image.open(path) as image:
                sequence = FrameSequence(
                    frames=[],
                    width=image.size[0],
                    height=image.size[1],
                    loop=image.info.get('loop'),
                    background=image.info.get('background', 0),
                )
                for frame in ImageSequence.Iterator(image):
                    sequence.delays.append(frame.info.get('duration', 0))
                    sequence.disposals.append(getattr(frame, 'disposal_method', 0))
                    if frame.mode == 'P':
                        indices = np.array(frame, dtype=np.uint8)
                        palette = _frame_palette(frame)
                    else:
                        indices, palette = _quantize_frame(frame)
                    sequence.frames.append(Frame(indices=indices, palette=palette))
        finally:
            GifImagePlugin.LOADING_STRATEGY = previous

    return sequence


def _to_pil(frame: Frame) -> Image.Image:
    img = Image.frombytes('P', (frame.width, frame.height), np.ascontiguousarray(frame.indices).tobytes())
    img.putpalette(frame.palette[:, :3].flatten().tolist())

    transparent = np.flatnonzero(frame.palette[:, 3] == 0)
    if len(transparent):
        img.info['transparency'] = int(transparent[0])
    return img


def save_gif(sequence: FrameSequence, path: Union[str, Path]) -> None:
    """Write a sequence as an animated GIF, keeping palettes and timing."""
    if not sequence.frames:
        raise ValueError("cannot save a GIF without frames")

    images = [_to_pil(frame) for frame in sequence.frames]
    options = {
        'save_all': True,
        'append_images': images[1:],
        'optimize': False,
        'background': sequence.background,
    }
    if sequence.delays:
        options['duration'] = list(sequence.delays)
    if sequence.disposals:
        options['disposal'] = list(sequence.disposals)
    if sequence.loop is not None:
        options['loop'] = sequence.loop

    images[0].save(path, format='GIF', **options)

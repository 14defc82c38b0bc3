import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Protocol
import numpy as np

from .codec import resize_image
from .lowpoly import apply_low_poly
from .sequence import Frame, FrameSequence, quantize
from .triangulation import Triangulator


class ProgressSink(Protocol):
    """Anything with a tqdm-style `update(n)`."""

    def update(self, n: int = 1) -> object:
        ...


class FrameProcessingError(RuntimeError):
    """Raised when a frame of a sequence fails to process."""

    def __init__(self, index: int):
        super().__init__(f"processing frame {index} failed")
        self.index = index


def process_frame(frame: Frame, width: int, height: int, intensity: int,
                  resize_to: bool = False,
                  rng: Optional[np.random.Generator] = None,
                  density: int = 500, min_points: int = 10,
                  triangulator: Optional[Triangulator] = None,
                  resize: Callable[[np.ndarray, int, int], np.ndarray] = resize_image) -> Frame:
    """
    Stylize one indexed frame and map the result back onto its palette.

    Args:
        frame: Source frame, not modified
        width: Width of the output frame
        height: Height of the output frame
        intensity: Triangulation point density (1-100)
        resize_to: Resize the frame to width x height before stylizing
        rng: Random generator for point sampling
        density: One point per `density` pixels at 100% intensity
        min_points: Lower bound on the number of random points
        triangulator: Triangulation capability, Delaunay if omitted
        resize: Resize service used when `resize_to` is set

    Returns:
        New frame sharing the source frame's palette object
    """
    rgba = frame.to_rgba()
    if resize_to:
        rgba = resize(rgba, width, height)

    processed = apply_low_poly(rgba, intensity, density, min_points, rng, triangulator)
    return Frame(indices=quantize(processed, frame.palette, width, height), palette=frame.palette)


def process_sequence(sequence: FrameSequence, width: int, height: int, intensity: int,
                     progress: Optional[ProgressSink] = None,
                     workers: Optional[int] = None,
                     seed: Optional[int] = None,
                     density: int = 500, min_points: int = 10,
                     triangulator: Optional[Triangulator] = None,
                     resize: Callable[[np.ndarray, int, int], np.ndarray] = resize_image) -> FrameSequence:
    """
    Apply the low-poly effect to every frame of a sequence, in place.

    Frames are resized to width x height first when both are positive,
    otherwise the sequence keeps its dimensions. Each task writes only its
    own slot of the result list and frames are installed in their original
    order once every task has finished.

    If any frame fails the whole call fails with FrameProcessingError for the
    lowest failing index, and the sequence is left untouched.

    Args:
        sequence: Sequence to process
        width: Target width, or 0 to keep the original size
        height: Target height, or 0 to keep the original size
        intensity: Triangulation point density (1-100)
        progress: Optional sink advanced by one per finished frame
        workers: Maximum concurrent frames, 1 for in-thread processing
        seed: Seed for reproducible output, independent of `workers`
        density: One point per `density` pixels at 100% intensity
        min_points: Lower bound on the number of random points
        triangulator: Triangulation capability, Delaunay if omitted
        resize: Resize service

    Returns:
        The same sequence object
    """
    resize_to = width > 0 and height > 0
    if not resize_to:
        width, height = sequence.width, sequence.height

    count = len(sequence.frames)
    seeds = np.random.SeedSequence(seed).spawn(count)
    results: List[Optional[Frame]] = [None] * count
    progress_lock = threading.Lock()

    def run(idx: int) -> None:
        results[idx] = process_frame(
            sequence.frames[idx], width, height, intensity,
            resize_to=resize_to,
            rng=np.random.default_rng(seeds[idx]),
            density=density,
            min_points=min_points,
            triangulator=triangulator,
            resize=resize,
        )
        if progress is not None:
            with progress_lock:
                progress.update(1)

    if workers == 1:
        for idx in range(count):
            try:
                run(idx)
            except Exception as e:
                raise FrameProcessingError(idx) from e
    else:
        errors = {}
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(run, idx): idx for idx in range(count)}
            for future in as_completed(futures):
                if future.cancelled():
                    continue
                error = future.exception()
                if error is not None:
                    errors[futures[future]] = error
                    for pending in futures:
                        pending.cancel()
        if errors:
            idx = min(errors)
            raise FrameProcessingError(idx) from errors[idx]

    sequence.frames = results
    sequence.width = width
    sequence.height = height
    return sequence

import argparse
import re
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
from omegaconf import DictConfig
from omegaconf.errors import OmegaConfBaseException
from tqdm import tqdm

from .config import load_config, validate_config


RESIZE_PATTERN = re.compile(r'^(\d+)x(\d+)$')


def parse_resize(dimensions: Optional[str]) -> Tuple[int, int]:
    """Parse 'WIDTHxHEIGHT'; an empty value means no resize."""
    if not dimensions:
        return 0, 0
    match = RESIZE_PATTERN.match(dimensions)
    if match is None:
        raise ValueError("invalid resize format, expected WIDTHxHEIGHT (e.g., 800x600)")
    return int(match.group(1)), int(match.group(2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='poly-convert',
        description="poly-convert - Apply a low-poly effect to JPEG, PNG and GIF images",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('input', type=str, help='Input image (.jpg, .jpeg, .png or .gif)')
    parser.add_argument('--resize', type=str, default='',
                        help='Resize the image to the specified dimensions (e.g., 800x600)')
    parser.add_argument('--intensity', type=int,
                        help='Set the intensity of the image processing (1-100)')
    parser.add_argument('--output', type=str, help='Output path (default: <name>-low-poly.<ext>)')
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--workers', type=int, help='Maximum frames processed concurrently (GIF only)')
    parser.add_argument('--seed', type=int, help='Random seed for reproducible output')
    parser.add_argument('--no-progress', action='store_true', help='Disable the progress bar')
    parser.add_argument('--metrics', action='store_true',
                        help='Print SSIM/PSNR against the input (still images only)')
    parser.add_argument('--compare', type=str,
                        help='Save a side-by-side comparison figure (still images only)')
    parser.add_argument('overrides', nargs='*', help='Additional config overrides (key=value)')
    return parser


def build_overrides(args: argparse.Namespace) -> List[str]:
    """Translate command-line flags into config overrides."""
    overrides = []
    if args.intensity is not None:
        overrides.append(f'intensity={args.intensity}')
    if args.resize:
        width, height = parse_resize(args.resize)
        overrides.append(f'resize.width={width}')
        overrides.append(f'resize.height={height}')
    if args.workers is not None:
        overrides.append(f'pipeline.workers={args.workers}')
    if args.seed is not None:
        overrides.append(f'seed={args.seed}')
    if args.no_progress:
        overrides.append('pipeline.progress=false')
    overrides.extend(args.overrides)
    return overrides


def convert_gif(input_path: Path, output_path: Path, cfg: DictConfig) -> None:
    """Apply the effect to every frame of a GIF."""
    from .codec import load_gif, save_gif
    from .pipeline import process_sequence

    sequence = load_gif(input_path)
    print(f"Loaded {len(sequence)} frames ({sequence.width}x{sequence.height})")

    bar = tqdm(total=len(sequence), unit='frame') if cfg.pipeline.progress else None
    try:
        process_sequence(
            sequence,
            cfg.resize.width,
            cfg.resize.height,
            cfg.intensity,
            progress=bar,
            workers=cfg.pipeline.workers,
            seed=cfg.seed,
            density=cfg.sampler.density,
            min_points=cfg.sampler.min_points,
        )
    finally:
        if bar is not None:
            bar.close()

    save_gif(sequence, output_path)
    print("GIF processed successfully")


def convert_still(input_path: Path, output_path: Path, cfg: DictConfig,
                  metrics: bool = False, compare_path: Optional[str] = None) -> None:
    """Apply the effect to a JPEG or PNG image."""
    from .codec import load_image, save_image, resize_image
    from .lowpoly import apply_low_poly

    image, fmt = load_image(input_path, input_path.suffix)

    if cfg.resize.width > 0 and cfg.resize.height > 0:
        print(f"Resizing image to {cfg.resize.width}x{cfg.resize.height}")
        image = resize_image(image, cfg.resize.width, cfg.resize.height)

    rng = np.random.default_rng(cfg.seed)
    result = apply_low_poly(image, cfg.intensity, cfg.sampler.density, cfg.sampler.min_points, rng)
    save_image(result, output_path, fmt, jpeg_quality=cfg.output.jpeg_quality)

    if metrics:
        from .utils import compute_metrics
        values = compute_metrics(image, result)
        print("\nMetrics:")
        print(f"SSIM: {values['ssim']:.3f}")
        print(f"PSNR: {values['psnr']:.2f}")

    if compare_path:
        from .utils import create_comparison_grid
        print(f"Saving comparison to {compare_path}")
        create_comparison_grid(image, result, compare_path)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point for poly-convert."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = load_config(args.config, build_overrides(args))
        validate_config(cfg)
    except (ValueError, AssertionError, OmegaConfBaseException) as e:
        print(f"Error: {e}")
        return 1

    from .codec import STILL_FORMATS, output_path as default_output_path

    input_path = Path(args.input)
    ext = input_path.suffix.lower()
    if ext != '.gif' and ext not in STILL_FORMATS:
        print(f"Error: unsupported image format: {ext}")
        return 1

    output_path = Path(args.output) if args.output else default_output_path(input_path, cfg.output.suffix)

    print(f"Processing image: {input_path}")
    print(f"Output will be saved to: {output_path}")

    try:
        if ext == '.gif':
            convert_gif(input_path, output_path, cfg)
        else:
            convert_still(input_path, output_path, cfg, args.metrics, args.compare)
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error processing image: {e}")
        return 1

    print("Image processing complete. Low-poly image saved successfully.")
    return 0


if __name__ == '__main__':
    sys.exit(main())

import numpy as np
from skimage.metrics import structural_similarity as ssim
from skimage.metrics import peak_signal_noise_ratio as psnr
from typing import Dict, Sequence


def compute_metrics(reference: np.ndarray, rendered: np.ndarray,
                    metrics: Sequence[str] = ('ssim', 'psnr')) -> Dict[str, float]:
    """
    Calculate similarity metrics between a source image and its stylization.

    Args:
        reference: Source pixel buffer (H, W, 4)
        rendered: Stylized pixel buffer (H, W, 4)
        metrics: Metrics to calculate, any of 'ssim' and 'psnr'

    Returns:
        Dictionary of metric values
    """
    if reference.shape != rendered.shape:
        raise ValueError(f"image shapes differ: {reference.shape} vs {rendered.shape}")

    unknown = set(metrics) - {'ssim', 'psnr'}
    if unknown:
        raise ValueError(f"unknown metrics: {', '.join(sorted(unknown))}")

    # Compare colour only, alpha is carried through unchanged by the effect
    reference_rgb = reference[..., :3]
    rendered_rgb = rendered[..., :3]
    data_range = float(np.iinfo(reference.dtype).max)

    results = {}

    if 'ssim' in metrics:
        results['ssim'] = float(ssim(reference_rgb, rendered_rgb,
                                     channel_axis=2, data_range=data_range))

    if 'psnr' in metrics:
        results['psnr'] = float(psnr(reference_rgb, rendered_rgb, data_range=data_range))

    return results

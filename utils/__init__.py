"""Shared utilities."""

from .constants import (
    BLOCK_SIZE,
    DCT_BASIS,
    JPEG_LUMA_Q50,
    ZIGZAG_ORDER,
    INVERSE_ZIGZAG,
    PSNR_SENTINEL,
)
from .fixed_point import (
    FixedPointFormat,
    SaturationCounter,
    PRECISION_PRESETS,
    resolve_precision,
    round_half_away,
    saturate,
)
from .metrics import exact_match, psnr, ssim, Timer, compression_stats
from .test_images import generate_checkerboard, generate_gradient, generate_noise

__all__ = [
    'BLOCK_SIZE',
    'DCT_BASIS',
    'JPEG_LUMA_Q50',
    'ZIGZAG_ORDER',
    'INVERSE_ZIGZAG',
    'PSNR_SENTINEL',
    'FixedPointFormat',
    'SaturationCounter',
    'PRECISION_PRESETS',
    'resolve_precision',
    'round_half_away',
    'saturate',
    'exact_match',
    'psnr',
    'ssim',
    'Timer',
    'compression_stats',
    'generate_checkerboard',
    'generate_gradient',
    'generate_noise',
]

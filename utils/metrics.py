"""Metrics: exact match, PSNR, SSIM, compression statistics."""

import math
import time
from typing import Dict, Iterable, List

import numpy as np
from skimage.metrics import mean_squared_error, structural_similarity

from models.errors import DimensionMismatch
from utils.constants import BLOCK_AREA, PSNR_SENTINEL


def _check_same_shape(a: np.ndarray, b: np.ndarray, what: str) -> None:
    if a.shape != b.shape:
        raise DimensionMismatch(f"Cannot compare {what} of shape {a.shape} with {b.shape}")


def exact_match(a, b) -> int:
    """Count scalar positions where two equal-shaped sequences differ."""
    a = np.asarray(a)
    b = np.asarray(b)
    _check_same_shape(a, b, "sequences")
    return int(np.count_nonzero(a != b))


def psnr(original: np.ndarray, reconstructed: np.ndarray) -> float:
    """
    Peak signal-to-noise ratio of 8-bit planes, in dB.

    Identical planes have zero error; they map to PSNR_SENTINEL rather
    than infinity so the value stays usable in averages and comparisons.
    """
    original = np.asarray(original)
    reconstructed = np.asarray(reconstructed)
    _check_same_shape(original, reconstructed, "planes")
    if original.size == 0:
        raise DimensionMismatch("Cannot compute PSNR of an empty plane")

    mse = mean_squared_error(original.astype(np.float64), reconstructed.astype(np.float64))
    if mse == 0:
        return PSNR_SENTINEL
    return float(10.0 * math.log10((255.0 ** 2) / mse))


def ssim(original: np.ndarray, reconstructed: np.ndarray) -> float:
    """Structural similarity of 8-bit planes at least 3 samples on a side."""
    original = np.asarray(original, dtype=np.float64)
    reconstructed = np.asarray(reconstructed, dtype=np.float64)
    _check_same_shape(original, reconstructed, "planes")

    win_size = min(7, *original.shape)
    if win_size < 3:
        raise ValueError(f"SSIM needs planes of at least 3x3, got {original.shape}")
    if win_size % 2 == 0:
        win_size -= 1
    return float(structural_similarity(
        original, reconstructed, win_size=win_size, data_range=255
    ))


class Timer:
    """Simple timer for encode/decode runtime."""

    def __init__(self):
        self.encode_time_ms = 0.0
        self.decode_time_ms = 0.0

    def measure_encode(self, func, *args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        self.encode_time_ms += (time.perf_counter() - start) * 1000.0
        return result

    def measure_decode(self, func, *args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        self.decode_time_ms += (time.perf_counter() - start) * 1000.0
        return result


def compression_stats(blocks: Iterable[List[tuple]], width: int, height: int) -> Dict:
    """
    Size statistics for a channel's token lists.

    Each token is costed as a 16-bit value plus an 8-bit run length; the
    source plane as 8 bits per in-bounds sample. This measures how well the
    value-run coder exploits sparsity, not a real bitstream size.
    """
    blocks = list(blocks)
    token_count = sum(len(tokens) for tokens in blocks)
    nonzero = sum(run for tokens in blocks for value, run in tokens if value != 0)
    total_coeffs = len(blocks) * BLOCK_AREA

    original_bits = width * height * 8
    encoded_bits = token_count * (16 + 8)

    return {
        'blocks': len(blocks),
        'tokens': token_count,
        'tokens_per_block': token_count / len(blocks) if blocks else 0.0,
        'nonzero_count': nonzero,
        'total_coeffs': total_coeffs,
        'encoded_bits': encoded_bits,
        'compression_ratio': float(original_bits / max(encoded_bits, 1)),
    }

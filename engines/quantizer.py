"""Quantization operations."""

import numpy as np
from typing import Optional

from engines.block_processor import check_block
from models.codec_params import normalize_quant_table
from utils.constants import COEFF_MAX, COEFF_MIN
from utils.fixed_point import SaturationCounter, round_half_away, saturate


def scale_quant_matrix(base_matrix: np.ndarray, quality: int) -> np.ndarray:
    """Scale quantization matrix by quality factor (1-100)."""
    quality = int(np.clip(quality, 1, 100))

    # JPEG scaling formula
    if quality < 50:
        scale = 5000.0 / quality
    else:
        scale = 200.0 - 2.0 * quality

    Q = np.floor((np.asarray(base_matrix, dtype=np.float64) * scale + 50.0) / 100.0)
    Q = np.clip(Q, 1, 255)
    return normalize_quant_table(Q)


def _as_table(Q_matrix) -> np.ndarray:
    """8x8 tables pass through; 64-entry tables are validated and reshaped."""
    Q_matrix = np.asarray(Q_matrix)
    if Q_matrix.shape == (8, 8):
        return Q_matrix
    return normalize_quant_table(Q_matrix)


def quantize(
    coeffs: np.ndarray,
    Q_matrix: np.ndarray,
    counter: Optional[SaturationCounter] = None,
) -> np.ndarray:
    """Quantize DCT coefficients: round(c / q), saturated to int16."""
    q = round_half_away(check_block(coeffs).astype(np.float64) / _as_table(Q_matrix))
    return saturate(q, COEFF_MIN, COEFF_MAX, counter, 'quantize').astype(np.int16)


def dequantize(
    quantized: np.ndarray,
    Q_matrix: np.ndarray,
    counter: Optional[SaturationCounter] = None,
) -> np.ndarray:
    """Dequantize coefficients: c * q, saturated to int16."""
    dq = check_block(quantized).astype(np.float64) * _as_table(Q_matrix)
    return saturate(dq, COEFF_MIN, COEFF_MAX, counter, 'dequantize').astype(np.int16)

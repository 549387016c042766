"""8x8 DCT/IDCT with level shift at a configurable intermediate precision."""

import numpy as np
from scipy.fft import dctn, idctn
from typing import Optional

from engines.block_processor import check_block
from utils.constants import (
    COEFF_MAX, COEFF_MIN, DCT_BASIS, LEVEL_SHIFT, SAMPLE_MAX, SAMPLE_MIN,
)
from utils.fixed_point import (
    FixedPointFormat, Precision, SaturationCounter, resolve_precision, round_half_away, saturate,
)

def dct2(block: np.ndarray) -> np.ndarray:
    """2D DCT-II with orthonormal normalization."""
    return dctn(block, type=2, norm='ortho')


def idct2(coeffs: np.ndarray) -> np.ndarray:
    """2D inverse DCT (Type-III)."""
    return idctn(coeffs, type=2, norm='ortho')


def reference_forward(block: np.ndarray) -> np.ndarray:
    """Level shift, exact-basis double DCT, round and saturate to int16."""
    shifted = check_block(block).astype(np.float64) - LEVEL_SHIFT
    coeffs = round_half_away(dct2(shifted))
    return np.clip(coeffs, COEFF_MIN, COEFF_MAX).astype(np.int16)


def reference_inverse(coeffs: np.ndarray) -> np.ndarray:
    """Exact-basis double IDCT, undo level shift, round and clip to [0,255]."""
    spatial = idct2(check_block(coeffs).astype(np.float64)) + LEVEL_SHIFT
    return np.clip(round_half_away(spatial), SAMPLE_MIN, SAMPLE_MAX).astype(np.uint8)


class FixedPointTransform:
    """
    Separable 8x8 DCT using the precomputed basis matrix ``C``.

    ``forward`` computes ``C (X - 128) C^T`` and ``inverse`` computes
    ``C^T Y C + 128``, one matrix pass per axis. After each pass the
    intermediate matrix is rounded to the configured precision:

    - ``'double'``/``'single'``: cast to float64/float32.
    - ``FixedPointFormat`` (and the ``'fixed24'``/``'fixed32'`` presets):
      products accumulate exactly, then snap to the format's grid with
      saturation. The basis itself is stored on the same grid.

    With no quantization in between, every preset reconstructs each sample
    within +/-1 of the exact-basis reference round trip. Integer
    coefficients alone can lose more: a lone pixel of value 2 in a zero
    block keeps no AC term and comes back as 0. Narrower custom formats
    carry no bound; intermediate clamping is recorded in the counter under
    ``'intermediate'``.
    """

    def __init__(self, precision: Precision = 'double', counter: Optional[SaturationCounter] = None):
        self.precision = precision
        self.counter = counter
        self._numeric = resolve_precision(precision)

        if isinstance(self._numeric, FixedPointFormat):
            self._basis = self._numeric.quantize(DCT_BASIS)
        else:
            self._basis = DCT_BASIS.astype(self._numeric)
        self._basis.flags.writeable = False

    def _snap(self, values: np.ndarray) -> np.ndarray:
        if isinstance(self._numeric, FixedPointFormat):
            return self._numeric.quantize(values, self.counter)
        return values.astype(self._numeric)

    def forward(self, block: np.ndarray) -> np.ndarray:
        """uint8 samples -> int16 coefficients."""
        shifted = self._snap(check_block(block).astype(np.float64) - LEVEL_SHIFT)

        tmp = self._snap(self._basis @ shifted)
        coeffs = self._snap(tmp @ self._basis.T)

        coeffs = saturate(round_half_away(coeffs), COEFF_MIN, COEFF_MAX, self.counter, 'forward')
        return coeffs.astype(np.int16)

    def inverse(self, coeffs: np.ndarray) -> np.ndarray:
        """int16 coefficients -> uint8 samples."""
        coeffs = self._snap(check_block(coeffs).astype(np.float64))

        tmp = self._snap(self._basis.T @ coeffs)
        spatial = self._snap(tmp @ self._basis)

        samples = round_half_away(spatial.astype(np.float64) + LEVEL_SHIFT)
        samples = saturate(samples, SAMPLE_MIN, SAMPLE_MAX, self.counter, 'inverse')
        return samples.astype(np.uint8)

    def __repr__(self) -> str:
        return f"FixedPointTransform(precision={self.precision!s})"

"""Fixed-point arithmetic, rounding and saturation accounting."""

import threading
from dataclasses import dataclass
from typing import Dict, Optional, Union

import numpy as np


def round_half_away(values: np.ndarray) -> np.ndarray:
    """Round to nearest integer, ties away from zero."""
    values = np.asarray(values, dtype=np.float64)
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


class SaturationCounter:
    """Thread-safe tally of clamped values, keyed by pipeline stage."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_stage: Dict[str, int] = {}

    def add(self, stage: str, count: int) -> None:
        if count <= 0:
            return
        with self._lock:
            self._by_stage[stage] = self._by_stage.get(stage, 0) + int(count)

    @property
    def total(self) -> int:
        with self._lock:
            return sum(self._by_stage.values())

    @property
    def by_stage(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._by_stage)

    def reset(self) -> None:
        with self._lock:
            self._by_stage.clear()

    def __repr__(self) -> str:
        return f"SaturationCounter({self.by_stage})"


def saturate(
    values: np.ndarray,
    low: float,
    high: float,
    counter: Optional[SaturationCounter] = None,
    stage: str = "",
) -> np.ndarray:
    """Clamp to [low, high], recording how many values were clamped."""
    clipped = np.clip(values, low, high)
    if counter is not None:
        counter.add(stage, int(np.count_nonzero(clipped != values)))
    return clipped


@dataclass(frozen=True)
class FixedPointFormat:
    """
    Signed fixed-point format with ``total_bits`` bits, ``integer_bits`` of
    them (sign included) left of the binary point.

    Values are rounded to the nearest step of ``2 ** -frac_bits`` and
    saturated to the representable range instead of wrapping.
    """

    total_bits: int
    integer_bits: int

    def __post_init__(self):
        if self.total_bits < 2 or self.total_bits > 52:
            raise ValueError(f"total_bits must be 2-52, got {self.total_bits}")
        if not (1 <= self.integer_bits <= self.total_bits):
            raise ValueError(
                f"integer_bits must be 1-{self.total_bits}, got {self.integer_bits}"
            )

    @property
    def frac_bits(self) -> int:
        return self.total_bits - self.integer_bits

    @property
    def step(self) -> float:
        return 2.0 ** -self.frac_bits

    @property
    def max_value(self) -> float:
        return 2.0 ** (self.integer_bits - 1) - self.step

    @property
    def min_value(self) -> float:
        return -(2.0 ** (self.integer_bits - 1))

    def quantize(self, values: np.ndarray, counter: Optional[SaturationCounter] = None) -> np.ndarray:
        """Snap values onto this format's grid."""
        scale = 2.0 ** self.frac_bits
        snapped = round_half_away(np.asarray(values, dtype=np.float64) * scale) / scale
        return saturate(snapped, self.min_value, self.max_value, counter, "intermediate")

    def __str__(self) -> str:
        return f"fixed<{self.total_bits},{self.integer_bits}>"


Precision = Union[str, FixedPointFormat]

# Every preset keeps a forward->inverse round trip within +/-1 of the
# exact-basis reference round trip.
# 12 integer bits hold the largest 8x8 DCT-II coefficient (|DC| <= 1024).
PRECISION_PRESETS: Dict[str, Union[type, FixedPointFormat]] = {
    'double': np.float64,
    'single': np.float32,
    'fixed32': FixedPointFormat(32, 16),
    'fixed24': FixedPointFormat(24, 12),
}


def resolve_precision(precision: Precision) -> Union[type, FixedPointFormat]:
    """Map a preset name or format to a numpy float type or FixedPointFormat."""
    if isinstance(precision, FixedPointFormat):
        return precision
    try:
        return PRECISION_PRESETS[precision]
    except (KeyError, TypeError):
        raise ValueError(
            f"Unknown precision {precision!r}; expected one of "
            f"{sorted(PRECISION_PRESETS)} or a FixedPointFormat"
        ) from None

"""Codec pipeline parameters."""

from dataclasses import dataclass, field
from typing import Literal, Optional

import numpy as np

from utils.constants import BLOCK_SIZE, JPEG_LUMA_Q50
from utils.fixed_point import Precision, resolve_precision

SCHEDULES = ('sequential', 'parallel', 'streaming')


def normalize_quant_table(table) -> np.ndarray:
    """Validate an 8x8 or 64-entry weight table and return a frozen 8x8 copy."""
    q = np.array(table, dtype=np.float64)
    if q.size != BLOCK_SIZE * BLOCK_SIZE:
        raise ValueError(f"Quantization table must have 64 entries, got {q.size}")
    q = q.reshape(BLOCK_SIZE, BLOCK_SIZE)
    if not np.all(q >= 1) or not np.all(q == np.floor(q)):
        raise ValueError("Quantization table weights must be positive integers")
    q.flags.writeable = False
    return q


@dataclass
class CodecParams:
    """Block codec configuration, fixed for the lifetime of a pipeline."""

    precision: Precision = 'double'
    quality: Optional[int] = None
    quant_table: np.ndarray = field(default_factory=lambda: JPEG_LUMA_Q50)
    schedule: Literal['sequential', 'parallel', 'streaming'] = 'sequential'
    workers: int = 4
    queue_depth: int = 2

    def __post_init__(self):
        resolve_precision(self.precision)
        if self.quality is not None and not (1 <= self.quality <= 100):
            raise ValueError(f"Quality must be 1-100, got {self.quality}")
        self.quant_table = normalize_quant_table(self.quant_table)
        if self.schedule not in SCHEDULES:
            raise ValueError(f"Schedule must be one of {SCHEDULES}, got {self.schedule!r}")
        if self.workers < 1:
            raise ValueError(f"Workers must be >= 1, got {self.workers}")
        if self.queue_depth < 2:
            raise ValueError(f"Queue depth must be >= 2, got {self.queue_depth}")

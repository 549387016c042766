"""Accelerated-versus-reference fidelity report."""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class FidelityReport:
    """Comparison of an accelerated codec path against the reference path."""

    accelerated_precision: str
    reference_precision: str

    # Bit-exactness
    coefficient_mismatches: int
    token_mismatch_blocks: int
    total_blocks: int

    # Distortion of the accelerated round trip
    psnr_channels: List[float]
    psnr_mean: float
    ssim_mean: float

    # Values clamped per stage, summed over channels
    saturation: Dict[str, int] = field(default_factory=dict)

    encode_time_ms: float = 0.0
    decode_time_ms: float = 0.0

    @property
    def bit_exact(self) -> bool:
        return self.coefficient_mismatches == 0 and self.token_mismatch_blocks == 0

"""
Value/run-length coding of zigzag sequences.

Every one of the 64 positions is coded the same way: consecutive equal
values collapse into one ``(value, run)`` token. There is no DC/AC split,
zero-run/size category or end-of-block marker as in baseline JPEG, so a
block of scattered nonzero AC terms costs one token per change of value.
The scheme is enough to measure sparsity, not to compete with JPEG
entropy coding.
"""

from typing import List, Sequence

import numpy as np

from engines.block_processor import check_integral
from models.encoded_channel import RunLengthToken
from models.errors import DimensionMismatch, MalformedRunLengthStream
from utils.constants import BLOCK_AREA, COEFF_MAX, COEFF_MIN


def encode(sequence: Sequence[int]) -> List[RunLengthToken]:
    """
    Collapse runs of equal values, scanning left to right.

    Integral floats are accepted; fractional values raise ``ValueError``.
    """
    values = np.asarray(sequence)
    if values.shape != (BLOCK_AREA,):
        raise DimensionMismatch(f"Expected a 64-coefficient sequence, got shape {values.shape}")
    check_integral(values)

    tokens = []
    i = 0
    n = len(values)
    while i < n:
        value = values[i]
        run = 1
        while i + run < n and values[i + run] == value:
            run += 1
        tokens.append(RunLengthToken(int(value), run))
        i += run
    return tokens


def decode(tokens: Sequence[RunLengthToken]) -> np.ndarray:
    """Expand tokens back into a 64-coefficient sequence."""
    total = 0
    for value, run in tokens:
        if run < 1:
            raise MalformedRunLengthStream(f"Run length must be positive, got {run}")
        if not COEFF_MIN <= value <= COEFF_MAX:
            raise MalformedRunLengthStream(f"Token value {value} is outside the int16 range")
        total += run
    if total != BLOCK_AREA:
        raise MalformedRunLengthStream(f"Run lengths sum to {total}, expected {BLOCK_AREA}")

    values = [value for value, _ in tokens]
    runs = [run for _, run in tokens]
    return np.repeat(np.asarray(values, dtype=np.int16), runs)


def streams_equal(a: Sequence[RunLengthToken], b: Sequence[RunLengthToken]) -> bool:
    """Token-for-token equality of two block streams."""
    if len(a) != len(b):
        return False
    return all(tuple(x) == tuple(y) for x, y in zip(a, b))


def token_mismatches(a_blocks: Sequence[Sequence[RunLengthToken]],
                     b_blocks: Sequence[Sequence[RunLengthToken]]) -> int:
    """Count blocks whose token streams differ between two encodings."""
    if len(a_blocks) != len(b_blocks):
        raise DimensionMismatch(
            f"Cannot compare {len(a_blocks)} encoded blocks with {len(b_blocks)}"
        )
    return sum(1 for a, b in zip(a_blocks, b_blocks) if not streams_equal(a, b))

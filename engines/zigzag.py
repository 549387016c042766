"""Zigzag scan between 8x8 blocks and 64-coefficient sequences."""

import numpy as np

from engines.block_processor import check_block, check_integral
from models.errors import DimensionMismatch
from utils.constants import BLOCK_AREA, BLOCK_SIZE, INVERSE_ZIGZAG, ZIGZAG_ORDER


def scan(block: np.ndarray) -> np.ndarray:
    """Read a block in zigzag order: DC first, then rising frequency."""
    flat = check_integral(check_block(block)).astype(np.int16).ravel()
    return flat[ZIGZAG_ORDER]


def unscan(sequence: np.ndarray) -> np.ndarray:
    """Rebuild an 8x8 block from its zigzag sequence."""
    sequence = np.asarray(sequence)
    if sequence.shape != (BLOCK_AREA,):
        raise DimensionMismatch(f"Expected a 64-coefficient sequence, got shape {sequence.shape}")
    return sequence.astype(np.int16)[INVERSE_ZIGZAG].reshape(BLOCK_SIZE, BLOCK_SIZE)

"""Block processing: tiling planes into 8x8 blocks and writing them back."""

import numpy as np
from typing import Iterator, Optional, Tuple

from models.errors import DimensionMismatch
from utils.constants import BLOCK_SIZE


def check_block(block) -> np.ndarray:
    """Return ``block`` as an array, rejecting anything but 8x8."""
    block = np.asarray(block)
    if block.shape != (BLOCK_SIZE, BLOCK_SIZE):
        raise DimensionMismatch(f"Expected an 8x8 block, got shape {block.shape}")
    return block


def check_integral(values: np.ndarray) -> np.ndarray:
    """Reject coefficient arrays holding fractional values instead of truncating them."""
    if not np.issubdtype(values.dtype, np.integer) and not np.all(values == np.trunc(values)):
        raise ValueError("Expected integer coefficients, got fractional values")
    return values


def block_grid(width: int, height: int) -> Tuple[int, int]:
    """Number of block rows and block columns covering a plane."""
    return -(-height // BLOCK_SIZE), -(-width // BLOCK_SIZE)


def as_plane(data, width: Optional[int] = None, height: Optional[int] = None) -> np.ndarray:
    """
    View caller data as a 2D (height, width) plane.

    2D arrays are taken as they are; flat row-major buffers need both
    ``width`` and ``height``. Given dimensions must match the data.
    """
    plane = np.asarray(data)
    if plane.ndim == 1:
        if width is None or height is None:
            raise DimensionMismatch("A flat plane needs explicit width and height")
        if plane.size != width * height:
            raise DimensionMismatch(
                f"Flat plane has {plane.size} samples, expected {width}x{height}={width * height}"
            )
        return plane.reshape(height, width)
    if plane.ndim != 2:
        raise DimensionMismatch(f"Expected a 2D plane, got {plane.ndim} dimensions")

    h, w = plane.shape
    if (width is not None and width != w) or (height is not None and height != h):
        raise DimensionMismatch(f"Plane is {w}x{h}, expected {width}x{height}")
    return plane


def extract_block(plane: np.ndarray, block_row: int, block_col: int) -> np.ndarray:
    """Copy one block out of a plane, zero-filling samples past its edges."""
    i = block_row * BLOCK_SIZE
    j = block_col * BLOCK_SIZE
    block = plane[i:i + BLOCK_SIZE, j:j + BLOCK_SIZE]
    if block.shape != (BLOCK_SIZE, BLOCK_SIZE):
        padded_block = np.zeros((BLOCK_SIZE, BLOCK_SIZE), dtype=plane.dtype)
        padded_block[:block.shape[0], :block.shape[1]] = block
        return padded_block
    return block.copy()


class BlockTiling:
    """Lazy, restartable sequence of (block_row, block_col, block) in row-major block order."""

    def __init__(self, plane: np.ndarray):
        self.plane = plane
        self.height, self.width = plane.shape
        self.block_rows, self.block_cols = block_grid(self.width, self.height)

    def __len__(self) -> int:
        return self.block_rows * self.block_cols

    def __iter__(self) -> Iterator[Tuple[int, int, np.ndarray]]:
        for block_row in range(self.block_rows):
            for block_col in range(self.block_cols):
                yield block_row, block_col, extract_block(self.plane, block_row, block_col)


def tile(plane, width: Optional[int] = None, height: Optional[int] = None) -> BlockTiling:
    """Partition a plane into zero-padded 8x8 blocks."""
    return BlockTiling(as_plane(plane, width, height))


def untile(block: np.ndarray, block_row: int, block_col: int, target: np.ndarray) -> None:
    """Write the in-bounds part of a block into ``target``; padding is dropped."""
    h, w = target.shape
    i = block_row * BLOCK_SIZE
    j = block_col * BLOCK_SIZE
    if not (0 <= i < h and 0 <= j < w):
        raise DimensionMismatch(
            f"Block ({block_row}, {block_col}) lies outside a {w}x{h} plane"
        )
    end_i = min(i + BLOCK_SIZE, h)
    end_j = min(j + BLOCK_SIZE, w)
    target[i:end_i, j:end_j] = block[:end_i - i, :end_j - j]

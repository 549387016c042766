"""Read-only constant tables shared by every pipeline instance."""

import numpy as np

BLOCK_SIZE = 8
BLOCK_AREA = BLOCK_SIZE * BLOCK_SIZE

COEFF_MIN = -32768
COEFF_MAX = 32767
SAMPLE_MIN = 0
SAMPLE_MAX = 255
LEVEL_SHIFT = 128.0

PSNR_SENTINEL = 99.0


def _frozen(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


# Orthonormal DCT-II basis, C[u][x] = a(u) * cos((2x + 1) * u * pi / 16),
# at the 6-decimal precision the accelerated kernels use.
DCT_BASIS = _frozen(np.array([
    [0.353553,  0.353553,  0.353553,  0.353553,  0.353553,  0.353553,  0.353553,  0.353553],
    [0.490393,  0.415735,  0.277785,  0.097545, -0.097545, -0.277785, -0.415735, -0.490393],
    [0.461940,  0.191342, -0.191342, -0.461940, -0.461940, -0.191342,  0.191342,  0.461940],
    [0.415735, -0.097545, -0.490393, -0.277785,  0.277785,  0.490393,  0.097545, -0.415735],
    [0.353553, -0.353553, -0.353553,  0.353553,  0.353553, -0.353553, -0.353553,  0.353553],
    [0.277785, -0.490393,  0.097545,  0.415735, -0.415735, -0.097545,  0.490393, -0.277785],
    [0.191342, -0.461940,  0.461940, -0.191342, -0.191342,  0.461940, -0.461940,  0.191342],
    [0.097545, -0.277785,  0.415735, -0.490393,  0.490393, -0.415735,  0.277785, -0.097545],
], dtype=np.float64))

# Standard JPEG luminance table (Annex K), quality 50
JPEG_LUMA_Q50 = _frozen(np.array([
    [16, 11, 10, 16, 24, 40, 51, 61],
    [12, 12, 14, 19, 26, 58, 60, 55],
    [14, 13, 16, 24, 40, 57, 69, 56],
    [14, 17, 22, 29, 51, 87, 80, 62],
    [18, 22, 37, 56, 68, 109, 103, 77],
    [24, 35, 55, 64, 81, 104, 113, 92],
    [49, 64, 78, 87, 103, 121, 120, 101],
    [72, 92, 95, 98, 112, 100, 103, 99],
], dtype=np.float64))

# Raster index of the coefficient visited at each zigzag step
ZIGZAG_ORDER = _frozen(np.array([
     0,  1,  8, 16,  9,  2,  3, 10,
    17, 24, 32, 25, 18, 11,  4,  5,
    12, 19, 26, 33, 40, 48, 41, 34,
    27, 20, 13,  6,  7, 14, 21, 28,
    35, 42, 49, 56, 57, 50, 43, 36,
    29, 22, 15, 23, 30, 37, 44, 51,
    58, 59, 52, 45, 38, 31, 39, 46,
    53, 60, 61, 54, 47, 55, 62, 63,
], dtype=np.intp))

# Zigzag step at which each raster position is visited
INVERSE_ZIGZAG = _frozen(np.argsort(ZIGZAG_ORDER))

"""DSP engines - pure computation, no I/O."""

from .block_processor import check_block, block_grid, as_plane, tile, untile, BlockTiling
from .transform import FixedPointTransform, dct2, idct2, reference_forward, reference_inverse
from .quantizer import scale_quant_matrix, quantize, dequantize
from .zigzag import scan, unscan
from .rle import encode, decode, streams_equal, token_mismatches
from .scheduler import StreamingScheduler, run_sequential, run_parallel, get_scheduler
from .pipeline import CodecPipeline
from .fidelity import check_fidelity

__all__ = [
    'check_block',
    'block_grid',
    'as_plane',
    'tile',
    'untile',
    'BlockTiling',
    'FixedPointTransform',
    'dct2',
    'idct2',
    'reference_forward',
    'reference_inverse',
    'scale_quant_matrix',
    'quantize',
    'dequantize',
    'scan',
    'unscan',
    'encode',
    'decode',
    'streams_equal',
    'token_mismatches',
    'StreamingScheduler',
    'run_sequential',
    'run_parallel',
    'get_scheduler',
    'CodecPipeline',
    'check_fidelity',
]

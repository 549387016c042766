"""Block codec pipeline: tile -> DCT -> quantize -> zigzag -> RLE and back."""

import logging
import numpy as np
from typing import List, Optional, Sequence, Tuple, Union

from models.codec_params import CodecParams
from models.encoded_channel import EncodedChannel, RunLengthToken
from models.errors import DimensionMismatch
from engines import rle, zigzag
from engines.block_processor import block_grid, tile, untile
from engines.quantizer import dequantize, quantize, scale_quant_matrix
from engines.scheduler import get_scheduler
from engines.transform import FixedPointTransform
from utils.fixed_point import SaturationCounter

logger = logging.getLogger(__name__)

TokenBlocks = List[List[RunLengthToken]]


class CodecPipeline:
    """
    Per-channel encoder/decoder built from one CodecParams.

    Every block goes through its chain on its own; the transform basis,
    quantization table and zigzag order are shared read-only, and each
    block writes a disjoint region of the output plane, so the scheduling
    strategy in ``params.schedule`` never changes the output.
    """

    def __init__(self, params: Optional[CodecParams] = None):
        self.params = params if params is not None else CodecParams()
        if self.params.quality is not None:
            self.quant_table = scale_quant_matrix(self.params.quant_table, self.params.quality)
        else:
            self.quant_table = self.params.quant_table
        self.counter = SaturationCounter()
        self.transform = FixedPointTransform(self.params.precision, self.counter)
        self._run = get_scheduler(self.params)

    # === Single block ===

    def encode_block(self, block: np.ndarray) -> List[RunLengthToken]:
        """uint8 block -> token list."""
        coeffs = self.transform.forward(block)
        quantized = quantize(coeffs, self.quant_table, self.counter)
        return rle.encode(zigzag.scan(quantized))

    def decode_block(self, tokens: Sequence[RunLengthToken]) -> np.ndarray:
        """Token list -> uint8 block."""
        quantized = zigzag.unscan(rle.decode(tokens))
        coeffs = dequantize(quantized, self.quant_table, self.counter)
        return self.transform.inverse(coeffs)

    # === Channel ===

    def encode_channel(self, plane, width: Optional[int] = None,
                       height: Optional[int] = None) -> EncodedChannel:
        """Encode one plane into per-block token lists in row-major block order."""
        tiling = tile(plane, width, height)
        before = self.counter.by_stage
        blocks: TokenBlocks = []

        self._run(
            tiling,
            lambda item: self.encode_block(item[2]),
            blocks.append,
        )

        saturation = _counter_delta(before, self.counter.by_stage)
        if saturation:
            logger.warning("Saturated %d values encoding %dx%d channel: %s",
                           sum(saturation.values()), tiling.width, tiling.height, saturation)
        logger.debug("Encoded %dx%d channel into %d blocks", tiling.width, tiling.height, len(blocks))
        return EncodedChannel(tiling.width, tiling.height, blocks, saturation)

    def decode_channel(self, encoded: Union[EncodedChannel, Sequence[Sequence[RunLengthToken]]],
                       width: Optional[int] = None, height: Optional[int] = None) -> np.ndarray:
        """Rebuild a uint8 plane from an EncodedChannel or from token lists plus dimensions."""
        if isinstance(encoded, EncodedChannel):
            blocks = encoded.blocks
            width = encoded.width if width is None else width
            height = encoded.height if height is None else height
        else:
            blocks = encoded
        if width is None or height is None:
            raise DimensionMismatch("Decoding token lists needs the plane width and height")

        block_rows, block_cols = block_grid(width, height)
        if len(blocks) != block_rows * block_cols:
            raise DimensionMismatch(
                f"{len(blocks)} encoded blocks do not cover a {width}x{height} plane "
                f"({block_rows}x{block_cols} blocks)"
            )

        plane = np.zeros((height, width), dtype=np.uint8)
        coords = ((index // block_cols, index % block_cols, tokens)
                  for index, tokens in enumerate(blocks))

        self._run(
            coords,
            lambda item: (item[0], item[1], self.decode_block(item[2])),
            lambda result: untile(result[2], result[0], result[1], plane),
        )
        logger.debug("Decoded %dx%d channel from %d blocks", width, height, len(blocks))
        return plane

    def transform_channel(self, plane, width: Optional[int] = None,
                          height: Optional[int] = None) -> np.ndarray:
        """
        Forward-transform a plane into an int16 coefficient plane of the same
        shape. Each block's coefficients land on that block's own samples;
        coefficients of padded positions are dropped.
        """
        tiling = tile(plane, width, height)
        coeffs = np.zeros((tiling.height, tiling.width), dtype=np.int16)
        self._run(
            tiling,
            lambda item: (item[0], item[1], self.transform.forward(item[2])),
            lambda result: untile(result[2], result[0], result[1], coeffs),
        )
        return coeffs

    # === Multi-channel ===

    def encode_planes(self, planes: Sequence[np.ndarray]) -> List[EncodedChannel]:
        """Encode each channel independently."""
        return [self.encode_channel(plane) for plane in planes]

    def decode_planes(self, encoded: Sequence[EncodedChannel]) -> List[np.ndarray]:
        return [self.decode_channel(channel) for channel in encoded]

    def round_trip(self, planes: Sequence[np.ndarray]) -> Tuple[List[EncodedChannel], List[np.ndarray]]:
        """Encode then decode every channel."""
        encoded = self.encode_planes(planes)
        return encoded, self.decode_planes(encoded)


def _counter_delta(before: dict, after: dict) -> dict:
    delta = {stage: count - before.get(stage, 0) for stage, count in after.items()}
    return {stage: count for stage, count in delta.items() if count > 0}

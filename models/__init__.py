"""Data models for codec parameters, encoded data and reports."""

from .errors import CodecError, DimensionMismatch, MalformedRunLengthStream, PipelineCancelled
from .codec_params import CodecParams, normalize_quant_table
from .encoded_channel import EncodedChannel, RunLengthToken
from .fidelity_report import FidelityReport

__all__ = [
    'CodecError',
    'DimensionMismatch',
    'MalformedRunLengthStream',
    'PipelineCancelled',
    'CodecParams',
    'normalize_quant_table',
    'EncodedChannel',
    'RunLengthToken',
    'FidelityReport',
]

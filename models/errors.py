"""Errors reported by the codec core."""


class CodecError(Exception):
    """Base class for codec core errors."""


class DimensionMismatch(CodecError, ValueError):
    """Two planes, blocks or sequences expected to share a shape do not."""


class MalformedRunLengthStream(CodecError, ValueError):
    """A token list does not expand to exactly one 64-coefficient block."""


class PipelineCancelled(CodecError):
    """A scheduler was cancelled before every block was stored."""

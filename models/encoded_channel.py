"""Compressed representation of one channel."""

from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple


class RunLengthToken(NamedTuple):
    """A coefficient value repeated ``run`` times."""

    value: int
    run: int


@dataclass
class EncodedChannel:
    """Token lists for every block of a plane, in row-major block order."""

    width: int
    height: int
    blocks: List[List[RunLengthToken]]

    # Values clamped while encoding, keyed by stage
    saturation: Dict[str, int] = field(default_factory=dict)

    @property
    def token_count(self) -> int:
        return sum(len(tokens) for tokens in self.blocks)

"""Channel identifiers and subdetector classification.

A channel is addressed by its longitudinal segment (``depth``), its signed
pseudo-rapidity ring (``ieta``, never 0) and its azimuthal bin (``iphi``,
1..72). Not every combination is realized; the enumeration of valid channels
lives in ``channel_map``.
"""

from enum import Enum
from typing import NamedTuple

from calosel.contracts.failure import InvalidChannel

__all__ = ["ChannelId", "Subdetector", "classify", "MAX_ABS_IETA", "N_IPHI", "MAX_DEPTH"]

MAX_ABS_IETA = 29
N_IPHI = 72
MAX_DEPTH = 3


class Subdetector(str, Enum):
    """Inner (barrel) and outer (endcap) regions of the calorimeter."""
    BARREL = "HB"
    ENDCAP = "HE"


class ChannelId(NamedTuple):
    """(depth, ieta, iphi) triple of one read-out channel."""
    depth: int
    ieta: int
    iphi: int

    @property
    def subdetector(self) -> Subdetector:
        return classify(self.depth, self.ieta)

    def __str__(self):
        return f"(depth={self.depth}, ieta={self.ieta}, iphi={self.iphi})"


def classify(depth: int, ieta: int) -> Subdetector:
    """Decide which subdetector a (depth, ieta) pair belongs to.

    Rings up to |ieta| = 15 are barrel, rings from |ieta| = 17 on are endcap.
    Ring 16 is shared: depths 1 and 2 are read out with the barrel, depth 3
    with the endcap.

    Raises
    ------
    InvalidChannel
        If depth or ieta is outside the detector, or depth 3 is requested
        for the last ring.
    """
    abseta = abs(ieta)
    if not 0 < abseta <= MAX_ABS_IETA:
        raise InvalidChannel(f"ieta {ieta} outside detector (0 < |ieta| <= {MAX_ABS_IETA})")
    if not 0 < depth <= MAX_DEPTH:
        raise InvalidChannel(f"depth {depth} outside detector (1..{MAX_DEPTH})")
    if abseta == MAX_ABS_IETA and depth > 2:
        raise InvalidChannel(f"depth {depth} does not exist at |ieta| = {MAX_ABS_IETA}")

    if abseta <= 15:
        return Subdetector.BARREL
    elif abseta == 16:
        return Subdetector.BARREL if depth <= 2 else Subdetector.ENDCAP
    else:
        return Subdetector.ENDCAP

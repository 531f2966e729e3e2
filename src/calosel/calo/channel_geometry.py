"""Channel direction table built from geometry description files.

Each geometry file lists one channel per row as ``ieta iphi depth x y z``
(whitespace or comma separated, ``#`` comments allowed). The position vector
is normalized to a unit direction and stored at the channel's linear index.
Pseudo-rapidity, azimuth and sin(theta) arrays are derived once from the
directions.

Every enumerated channel must receive exactly one direction. Anything else is
a fatal configuration error, raised before any event is processed.
"""

import logging
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np

from calosel.calo.channel_map import ChannelTopologyIndex
from calosel.calo.text_table import read_table
from calosel.contracts import MalformedTable, MissingGeometryEntry

__all__ = ["ChannelGeometry", "GEOMETRY_COLUMNS"]

logger = logging.getLogger(__name__)

# Order: ieta, iphi, depth, x, y, z
GEOMETRY_COLUMNS = (int, int, int, float, float, float)


class ChannelGeometry:
    """Unit direction vector for every channel, keyed by linear index.

    Use ``from_files`` or ``from_rows``; the constructor expects an already
    complete ``(n_channels, 3)`` array.

    Examples
    --------
    >>> index = ChannelTopologyIndex.build()
    >>> geometry = ChannelGeometry.from_files(index, ["Geometry/hb.ctr", "Geometry/he.ctr"])
    >>> geometry.eta[index.linear_index(1, 1, 1)]
    """

    def __init__(self, index: ChannelTopologyIndex, directions: np.ndarray):
        directions = np.asarray(directions, dtype=np.float64)
        if directions.shape != (len(index), 3):
            raise ValueError(
                f"Direction array has shape {directions.shape}, expected ({len(index)}, 3)"
            )

        norms = np.linalg.norm(directions, axis=1)
        missing = np.flatnonzero(norms == 0.0)
        if missing.size:
            cid = index.triple_of(missing[0])
            raise MissingGeometryEntry(
                f"no geometry data for ieta {cid.ieta}, iphi {cid.iphi}, depth {cid.depth} "
                f"({missing.size} channels without direction)"
            )

        self.index = index
        self.directions = directions / norms[:, np.newaxis]
        self.directions.setflags(write=False)

        x, y, z = self.directions.T
        rho = np.hypot(x, y)
        self.sin_theta = rho
        with np.errstate(divide="ignore"):
            self.eta = np.arcsinh(z / rho)
        self.phi = np.arctan2(y, x)

    @classmethod
    def from_rows(cls, index: ChannelTopologyIndex, rows: Iterable[Sequence],
                  source: str = "<rows>") -> "ChannelGeometry":
        """Build from ``(ieta, iphi, depth, x, y, z)`` rows.

        Raises
        ------
        InvalidChannel
            If a row names a channel outside the enumeration.
        MalformedTable
            If a channel appears in more than one row.
        MissingGeometryEntry
            If some channel has no row.
        """
        directions = np.zeros((len(index), 3))
        seen = np.zeros(len(index), dtype=bool)
        for ieta, iphi, depth, x, y, z in rows:
            i = index.linear_index(int(depth), int(ieta), int(iphi))
            if seen[i]:
                raise MalformedTable(
                    f"{source}: duplicate geometry entry for ieta {ieta}, iphi {iphi}, depth {depth}"
                )
            seen[i] = True
            directions[i] = (x, y, z)
        return cls(index, directions)

    @classmethod
    def from_files(cls, index: ChannelTopologyIndex, paths: Sequence) -> "ChannelGeometry":
        """Load geometry description files and build the direction table."""
        rows = []
        for path in paths:
            file_rows = read_table(path, GEOMETRY_COLUMNS)
            logger.info("Geometry file loaded: %s (%d rows)", path, len(file_rows))
            rows.extend(file_rows)
        names = ", ".join(str(Path(p)) for p in paths)
        return cls.from_rows(index, rows, source=names)

    def __len__(self):
        return len(self.directions)

    def direction(self, index: int) -> np.ndarray:
        self.index.triple_of(index)
        return self.directions[int(index)]

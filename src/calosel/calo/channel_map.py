"""Dense linear indexing of calorimeter channels.

This module builds the fixed enumeration of read-out channels and the lookup
tables derived from it:

- forward map: (depth, ieta, iphi) -> linear index
- inverse map: linear index -> ``ChannelId``
- module (front-end unit) and rack membership of every channel, with the
  ordinal position of the channel inside its module/rack
- cross-module neighbor graphs at channel and module granularity, computed
  lazily and cached

The enumeration order is part of the data format: linear indices are stored
alongside event data, so the order below must never change.

Lifecycle
=========
``ChannelTopologyIndex.build()`` is pure and deterministic. The neighbor
graph is filled on first use, or explicitly with
``ensure_neighbors_computed()``. The caches are not protected by locks: warm
them up before sharing an index between threads.
"""

import logging
from typing import Iterable, Optional

import numpy as np

from calosel.calo.channel_id import ChannelId, N_IPHI, classify
from calosel.calo.hardware_map import HpdRbxMap, load_hardware_map
from calosel.contracts import IndexOutOfRange, InvalidChannel, assert_topology

__all__ = ["ChannelTopologyIndex", "CHANNEL_COUNT", "enumerate_channels"]

logger = logging.getLogger(__name__)

CHANNEL_COUNT = 5184

# (depth, first ieta, last ieta, full azimuthal granularity). Rings with half
# granularity only populate odd iphi bins.
_ENUMERATION = (
    (1, -29, -21, False),
    (1, -20, 20, True),
    (1, 21, 29, False),
    (2, -29, -21, False),
    (2, -20, -18, True),
    (2, -16, -15, True),
    (2, 15, 16, True),
    (2, 18, 20, True),
    (2, 21, 29, False),
    (3, -28, -27, False),
    (3, -16, -16, True),
    (3, 16, 16, True),
    (3, 27, 28, False),
)


def enumerate_channels() -> tuple:
    """Return all valid channels in canonical order."""
    channels = []
    for depth, first, last, full in _ENUMERATION:
        step = 1 if full else 2
        for ieta in range(first, last + 1):
            if ieta == 0:
                continue
            for iphi in range(1, N_IPHI + 1, step):
                channels.append(ChannelId(depth, ieta, iphi))
    return tuple(channels)


def _wrap_iphi(iphi: int) -> int:
    if iphi == 0:
        return N_IPHI
    if iphi == N_IPHI + 1:
        return 1
    return iphi


class ChannelTopologyIndex:
    """Bijection between channel triples and linear indices, with hardware groupings.

    Parameters
    ----------
    hardware_map : object, optional
        Module/rack assignment (see ``calosel.calo.hardware_map``).
        Defaults to ``HpdRbxMap()``.

    Notes
    -----
    - Construction takes a few milliseconds; build once per process and share
    - All lookups raise ``IndexOutOfRange`` or ``InvalidChannel`` for
      arguments outside the enumeration
    - Not thread-safe until ``ensure_neighbors_computed()`` has run

    Examples
    --------
    >>> index = ChannelTopologyIndex.build()
    >>> i = index.linear_index(1, 1, 1)
    >>> index.triple_of(i)
    ChannelId(depth=1, ieta=1, iphi=1)
    >>> index.ensure_neighbors_computed()
    >>> index.channel_neighbors(i)
    """

    def __init__(self, hardware_map=None):
        self.hardware_map = hardware_map if hardware_map is not None else HpdRbxMap()
        self.n_modules = int(self.hardware_map.n_modules)
        self.n_racks = int(self.hardware_map.n_racks)

        self.channels = enumerate_channels()
        self._inverse = {cid: i for i, cid in enumerate(self.channels)}

        n = len(self.channels)
        self.module_lookup = np.empty(n, dtype=np.int64)
        self.rack_lookup = np.empty(n, dtype=np.int64)
        self._pos_in_module = np.empty(n, dtype=np.int64)
        self._pos_in_rack = np.empty(n, dtype=np.int64)
        module_members = [[] for _ in range(self.n_modules)]
        rack_members = [[] for _ in range(self.n_racks)]

        for i, cid in enumerate(self.channels):
            sub = classify(cid.depth, cid.ieta)
            module = int(self.hardware_map.module_index(sub, cid.ieta, cid.iphi, cid.depth))
            rack = int(self.hardware_map.rack_of_module(module))
            self.module_lookup[i] = module
            self.rack_lookup[i] = rack
            if 0 <= module < self.n_modules and 0 <= rack < self.n_racks:
                self._pos_in_module[i] = len(module_members[module])
                module_members[module].append(i)
                self._pos_in_rack[i] = len(rack_members[rack])
                rack_members[rack].append(i)

        assert_topology(self, CHANNEL_COUNT)

        self._module_members = tuple(tuple(m) for m in module_members)
        self._rack_members = tuple(tuple(r) for r in rack_members)

        self._channel_neighbors = None
        self._module_neighbors = None

        logger.info("ChannelTopologyIndex built: channels=%d, modules=%d, racks=%d",
                    n, self.n_modules, self.n_racks)

    @classmethod
    def build(cls, hardware_map=None) -> "ChannelTopologyIndex":
        """Build the index from the fixed enumeration rules."""
        return cls(hardware_map)

    @classmethod
    def from_config(cls, config) -> "ChannelTopologyIndex":
        """Build with the hardware map named by ``config.topology.hardware_map``."""
        hardware_map = load_hardware_map(config.topology.hardware_map)
        logger.info("Building channel topology with %r", hardware_map)
        return cls(hardware_map)

    def __len__(self):
        return len(self.channels)

    def __contains__(self, cid):
        return tuple(cid) in self._inverse

    def __repr__(self):
        return (f"ChannelTopologyIndex(channels={len(self)}, modules={self.n_modules}, "
                f"racks={self.n_racks}, neighbors_ready={self.neighbors_ready})")

    # ------------------------------------------------------------------
    # Forward and inverse lookups
    # ------------------------------------------------------------------

    def is_valid_triple(self, depth: int, ieta: int, iphi: int) -> bool:
        return (depth, ieta, iphi) in self._inverse

    def linear_index(self, depth: int, ieta: int, iphi: int) -> int:
        """Linear index of a channel triple.

        Raises
        ------
        InvalidChannel
            If the triple is not part of the enumerated geometry.
        """
        try:
            return self._inverse[(depth, ieta, iphi)]
        except KeyError:
            raise InvalidChannel(
                f"invalid channel triple (depth={depth}, ieta={ieta}, iphi={iphi})"
            ) from None

    def linear_indices(self, depth, ieta, iphi) -> np.ndarray:
        """Array version of ``linear_index`` for parallel coordinate arrays."""
        depth = np.asarray(depth).ravel()
        ieta = np.asarray(ieta).ravel()
        iphi = np.asarray(iphi).ravel()
        if not (depth.shape == ieta.shape == iphi.shape):
            raise ValueError(
                f"Coordinate arrays differ in length: {depth.shape}, {ieta.shape}, {iphi.shape}"
            )

        out = np.empty(depth.shape, dtype=np.int64)
        for i, key in enumerate(zip(depth.tolist(), ieta.tolist(), iphi.tolist())):
            out[i] = self.linear_index(*key)
        return out

    def triple_of(self, index: int) -> ChannelId:
        """Channel triple for a linear index.

        Raises
        ------
        IndexOutOfRange
            If index is not in [0, CHANNEL_COUNT).
        """
        return self.channels[self._check_index(index)]

    def _check_index(self, index: int) -> int:
        index = int(index)
        if not 0 <= index < len(self.channels):
            raise IndexOutOfRange(
                f"channel index {index} out of range [0, {len(self.channels)})"
            )
        return index

    def _check_module(self, module: int) -> int:
        module = int(module)
        if not 0 <= module < self.n_modules:
            raise IndexOutOfRange(f"module {module} out of range [0, {self.n_modules})")
        return module

    # ------------------------------------------------------------------
    # Hardware groupings
    # ------------------------------------------------------------------

    def module_of(self, index: int) -> int:
        return int(self.module_lookup[self._check_index(index)])

    def rack_of(self, index: int) -> int:
        return int(self.rack_lookup[self._check_index(index)])

    def position_within_module(self, index: int) -> int:
        return int(self._pos_in_module[self._check_index(index)])

    def position_within_rack(self, index: int) -> int:
        return int(self._pos_in_rack[self._check_index(index)])

    def module_channels(self, module: int) -> tuple:
        """Channel indices of a module, in insertion order."""
        return self._module_members[self._check_module(module)]

    def rack_channels(self, rack: int) -> tuple:
        rack = int(rack)
        if not 0 <= rack < self.n_racks:
            raise IndexOutOfRange(f"rack {rack} out of range [0, {self.n_racks})")
        return self._rack_members[rack]

    def max_channels_per_module(self) -> int:
        return max(len(m) for m in self._module_members)

    def max_channels_per_rack(self) -> int:
        return max(len(r) for r in self._rack_members)

    # ------------------------------------------------------------------
    # Neighbor graph
    # ------------------------------------------------------------------

    @property
    def neighbors_ready(self) -> bool:
        return self._channel_neighbors is not None and self._module_neighbors is not None

    def ensure_neighbors_computed(self) -> None:
        """Fill the channel and module neighbor tables. Idempotent."""
        if self._channel_neighbors is None:
            self._channel_neighbors = tuple(
                self._compute_channel_neighbors(i) for i in range(len(self.channels))
            )
            logger.debug("Channel neighbor table filled: %d channels", len(self.channels))
        if self._module_neighbors is None:
            self._module_neighbors = tuple(
                self._compute_module_neighbors(m) for m in range(self.n_modules)
            )
            logger.debug("Module neighbor table filled: %d modules", self.n_modules)

    def channel_neighbors(self, index: int) -> tuple:
        """Sorted neighbors of a channel that belong to other modules.

        Neighbors share the depth and lie within one ring in ieta and one bin
        in iphi (8-connectivity, azimuth wraps around, ring 0 is skipped).
        """
        index = self._check_index(index)
        if self._channel_neighbors is None:
            self._channel_neighbors = tuple(
                self._compute_channel_neighbors(i) for i in range(len(self.channels))
            )
        return self._channel_neighbors[index]

    def module_neighbors(self, module: int) -> tuple:
        """Sorted modules adjacent to ``module`` through cross-module channel neighbors."""
        module = self._check_module(module)
        if self._module_neighbors is None:
            self._module_neighbors = tuple(
                self._compute_module_neighbors(m) for m in range(self.n_modules)
            )
        return self._module_neighbors[module]

    def channel_set_neighbors(self, indices: Iterable[int]) -> tuple:
        """Sorted union of the cross-module neighbors of several channels."""
        found = set()
        for index in indices:
            found.update(self.channel_neighbors(index))
        return tuple(sorted(found))

    def module_boundary_channels(self, module: int) -> tuple:
        """Sorted channels of other modules that touch ``module``."""
        return self.channel_set_neighbors(self.module_channels(module))

    def _compute_channel_neighbors(self, index: int) -> tuple:
        depth, eta0, phi0 = self.channels[index]
        my_module = self.module_lookup[index]

        found = []
        for eta_shift in (-1, 0, 1):
            ieta = eta0 + eta_shift
            # Jump over 0
            if ieta == 0:
                ieta += eta_shift
            for phi_shift in (-1, 0, 1):
                if not (eta_shift or phi_shift):
                    continue
                neighbor = self._inverse.get((depth, ieta, _wrap_iphi(phi0 + phi_shift)))
                if neighbor is not None and self.module_lookup[neighbor] != my_module:
                    found.append(neighbor)
        return tuple(sorted(found))

    def _compute_module_neighbors(self, module: int) -> tuple:
        modules = set()
        for index in self._module_members[module]:
            modules.update(int(self.module_lookup[n]) for n in self.channel_neighbors(index))
        return tuple(sorted(modules))

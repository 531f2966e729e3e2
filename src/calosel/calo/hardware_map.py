"""Hardware grouping of channels into front-end modules and racks.

The topology index never hard-codes how channels are wired to read-out
electronics. It asks a hardware map, supplied at construction, for the module
of every channel. Any object with the attributes below can be used::

    n_modules: int
    n_racks: int
    module_index(subdetector, ieta, iphi, depth) -> int
    rack_of_module(module) -> int

``HpdRbxMap`` is the default. It groups the barrel and the endcap, each split
by z side, into 72 photodetector-like modules that follow the azimuth, and
groups four consecutive modules into one rack. Rack 0 of each partition
covers iphi 71, 72, 1 and 2.

Configuration names the map with an import path, ``"package.module:Name"``;
``load_hardware_map`` resolves it. A class or factory is called without
arguments, any other object is used as is.
"""

import importlib
import logging

from calosel.calo.channel_id import N_IPHI, Subdetector
from calosel.contracts import UnsupportedConfiguration

__all__ = ["HpdRbxMap", "load_hardware_map", "DEFAULT_HARDWARE_MAP"]

logger = logging.getLogger(__name__)

DEFAULT_HARDWARE_MAP = "calosel.calo.hardware_map:HpdRbxMap"

_REQUIRED = ("n_modules", "n_racks", "module_index", "rack_of_module")


class HpdRbxMap:
    """Default module (HPD) and rack (RBX) assignment.

    Module numbering: ``partition * 72 + (iphi + 1) % 72`` where the
    partitions are barrel+, barrel-, endcap+, endcap-. The outer endcap
    towers (|ieta| >= 21) are twice as wide in azimuth and only exist at odd
    iphi; their depth 2 and 3 segments are read out by the next module so
    that both modules spanned by the tower are populated.
    """

    MODULES_PER_PARTITION = N_IPHI
    MODULES_PER_RACK = 4
    WIDE_TOWER_IETA = 21

    _PARTITIONS = {
        (Subdetector.BARREL, 1): 0,
        (Subdetector.BARREL, -1): 1,
        (Subdetector.ENDCAP, 1): 2,
        (Subdetector.ENDCAP, -1): 3,
    }

    def __init__(self):
        self.n_modules = len(self._PARTITIONS) * self.MODULES_PER_PARTITION
        self.n_racks = self.n_modules // self.MODULES_PER_RACK

    def module_index(self, subdetector: Subdetector, ieta: int, iphi: int, depth: int) -> int:
        partition = self._PARTITIONS[(Subdetector(subdetector), 1 if ieta > 0 else -1)]
        offset = 1
        if (subdetector == Subdetector.ENDCAP and abs(ieta) >= self.WIDE_TOWER_IETA
                and depth >= 2):
            offset = 2
        return partition * self.MODULES_PER_PARTITION + (iphi + offset) % N_IPHI

    def rack_of_module(self, module: int) -> int:
        return module // self.MODULES_PER_RACK

    def __repr__(self):
        return f"HpdRbxMap(n_modules={self.n_modules}, n_racks={self.n_racks})"


def load_hardware_map(path: str):
    """Resolve a ``"module:attribute"`` import path to a hardware map instance.

    Raises
    ------
    UnsupportedConfiguration
        If the path is malformed, cannot be imported, or the object lacks
        the hardware map attributes.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise UnsupportedConfiguration(
            f"Hardware map must be given as 'module:attribute', got {path!r}"
        )

    try:
        obj = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise UnsupportedConfiguration(f"Cannot load hardware map {path!r}: {e}") from e

    if isinstance(obj, type) or (callable(obj) and not hasattr(obj, "module_index")):
        obj = obj()

    missing = [name for name in _REQUIRED if not hasattr(obj, name)]
    if missing:
        raise UnsupportedConfiguration(
            f"Hardware map {path!r} lacks {', '.join(missing)}"
        )

    logger.debug("Hardware map loaded: %s -> %r", path, obj)
    return obj

"""Calorimeter channel topology.

- channel_id: Channel triples and subdetector classification
- hardware_map: Module/rack assignment
- channel_map: Linear index, hardware groupings, neighbor graph
- channel_geometry: Channel directions from geometry tables
- text_table: Numeric text table reader
"""

from calosel.calo.channel_id import ChannelId, Subdetector, classify
from calosel.calo.hardware_map import HpdRbxMap, load_hardware_map, DEFAULT_HARDWARE_MAP
from calosel.calo.channel_map import ChannelTopologyIndex, CHANNEL_COUNT
from calosel.calo.channel_geometry import ChannelGeometry

__all__ = [
    "ChannelId",
    "Subdetector",
    "classify",
    "HpdRbxMap",
    "load_hardware_map",
    "DEFAULT_HARDWARE_MAP",
    "ChannelTopologyIndex",
    "CHANNEL_COUNT",
    "ChannelGeometry",
]

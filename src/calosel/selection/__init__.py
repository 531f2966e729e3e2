"""Energy-budgeted channel selection.

Per event: window energies are extracted from the time samples, channels are
associated with the nearest jet candidate inside a cone, and the softest
channels of each jet are pruned within an energy budget.
"""

from calosel.selection.jets import JetCandidate, ClusteringResult
from calosel.selection.energy_extractor import ChannelEnergyExtractor
from calosel.selection.jet_associator import JetChannelAssociator, delta_phi, UNASSOCIATED
from calosel.selection.budget_pruner import EnergyBudgetPruner
from calosel.selection.channel_selector import (
    ChannelSelector,
    JetChannelSelector,
    AllChannelSelector,
    make_channel_selector,
    transverse_energy,
)

__all__ = [
    "JetCandidate",
    "ClusteringResult",
    "ChannelEnergyExtractor",
    "JetChannelAssociator",
    "delta_phi",
    "UNASSOCIATED",
    "EnergyBudgetPruner",
    "ChannelSelector",
    "JetChannelSelector",
    "AllChannelSelector",
    "make_channel_selector",
    "transverse_energy",
]

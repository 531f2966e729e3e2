"""Per-event channel selection strategies.

A selector turns an event dataset (with ``channel_index`` and ``energy``
variables) plus the clustering output into three per-occurrence arrays:
the selection mask, the associated jet pt and the associated candidate
index (-1 when the channel lies outside every cone).
"""

import logging
from typing import TYPE_CHECKING, Tuple

import numpy as np
import xarray as xr

from calosel.contracts import UnsupportedConfiguration
from calosel.selection.budget_pruner import EnergyBudgetPruner
from calosel.selection.jet_associator import JetChannelAssociator, UNASSOCIATED
from calosel.selection.jets import ClusteringResult

if TYPE_CHECKING:
    from calosel.calo import ChannelGeometry
    from calosel.schemas import InternalConfig

__all__ = [
    "SELECTOR_ALIASES",
    "ChannelSelector",
    "JetChannelSelector",
    "AllChannelSelector",
    "make_channel_selector",
    "transverse_energy",
]

logger = logging.getLogger(__name__)

Selection = Tuple[np.ndarray, np.ndarray, np.ndarray]


def transverse_energy(event: xr.Dataset, geometry: "ChannelGeometry") -> np.ndarray:
    """Et = energy * sin(theta) for every occurrence of the event."""
    channel_index = np.asarray(event["channel_index"].values, dtype=np.int64)
    energy = np.asarray(event["energy"].values, dtype=np.float64)
    return energy * geometry.sin_theta[channel_index]


class ChannelSelector:
    """Base class; subclasses implement ``select``."""

    name = "base"

    def select(self, event: xr.Dataset, clustering: ClusteringResult) -> Selection:
        raise NotImplementedError

    def good_jet_count(self, clustering: ClusteringResult) -> int:
        return len(clustering.jets)


class JetChannelSelector(ChannelSelector):
    """Cone association followed by energy budget pruning."""

    name = "jet"

    def __init__(self, config: "InternalConfig", geometry: "ChannelGeometry"):
        self.geometry = geometry
        self.associator = JetChannelAssociator.from_config(config)
        self.pruner = EnergyBudgetPruner.from_config(config)

        logger.info(
            "JetChannelSelector initialized: cone=%.3f (%s, ratio=%.3f), "
            "et_fraction=%.3f of %s Et, jet_pt_cutoff=%.2f",
            self.associator.cone_size, self.associator.metric,
            self.associator.eta_to_phi_ratio,
            self.pruner.et_fraction_cutoff, self.pruner.budget_total, self.pruner.jet_pt_cutoff,
        )

    def good_jet_count(self, clustering: ClusteringResult) -> int:
        return len(self.pruner.good_jets(clustering.jets))

    def select(self, event: xr.Dataset, clustering: ClusteringResult) -> Selection:
        channel_index = np.asarray(event["channel_index"].values, dtype=np.int64)
        if "et" in event:
            et = np.asarray(event["et"].values, dtype=np.float64)
        else:
            et = transverse_energy(event, self.geometry)

        jets = clustering.sorted_jets()
        assignment = self.associator.associate(
            self.geometry.eta[channel_index],
            self.geometry.phi[channel_index],
            jets,
        )
        mask, jet_pt = self.pruner.prune(et, assignment, jets)

        candidate = np.array([j.index for j in jets], dtype=np.int64)
        jet = np.full(assignment.shape, UNASSOCIATED, dtype=np.int64)
        associated = assignment != UNASSOCIATED
        jet[associated] = candidate[assignment[associated]]

        logger.debug("Selected %d of %d channels (%d associated, %d jets)",
                     int(mask.sum()), mask.size, int(associated.sum()), len(jets))
        return mask, jet_pt, jet


class AllChannelSelector(ChannelSelector):
    """Keeps every occurrence; no jet association."""

    name = "all"

    def select(self, event: xr.Dataset, clustering: ClusteringResult) -> Selection:
        n = event.sizes["pulse"]
        return (
            np.ones(n, dtype=bool),
            np.zeros(n, dtype=np.float64),
            np.full(n, UNASSOCIATED, dtype=np.int64),
        )


# Long class names accepted for the two strategies
SELECTOR_ALIASES = {
    "fftjetchannelselector": "jet",
    "jetchannelselector": "jet",
    "allchannelselector": "all",
}


def make_channel_selector(config: "InternalConfig", geometry: "ChannelGeometry") -> ChannelSelector:
    """Build the selector named by ``config.selector.method``.

    ``jet`` and ``all`` are accepted, as well as the class names listed in
    ``SELECTOR_ALIASES`` (case-insensitive).

    Raises
    ------
    UnsupportedConfiguration
        If the method names neither strategy.
    """
    method = config.selector.method.strip().lower()
    method = SELECTOR_ALIASES.get(method, method)
    if method == "jet":
        return JetChannelSelector(config, geometry)
    if method == "all":
        return AllChannelSelector()
    raise UnsupportedConfiguration(f"Unknown channel selector: {config.selector.method!r}")

"""Per-event channel selection pipeline.

Runs each event through energy extraction, topology lookup, transverse
energy computation and channel selection, and attaches the results to a
copy of the event dataset.
"""

import logging
from typing import Iterable, Tuple, TYPE_CHECKING

import numpy as np
import pandas as pd
import xarray as xr

from calosel.contracts import (
    ContractViolation,
    assert_raw_event,
    assert_selection_output,
)
from calosel.selection import (
    ChannelEnergyExtractor,
    ClusteringResult,
    make_channel_selector,
    transverse_energy,
)

if TYPE_CHECKING:
    from calosel.calo import ChannelGeometry, ChannelTopologyIndex
    from calosel.schemas import InternalConfig

__all__ = ["ChannelSelectionProcessor", "SUMMARY_COLUMNS"]

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "event",
    "n_channels",
    "n_selected",
    "n_jets",
    "n_good_jets",
    "sum_et",
    "unclustered_et",
    "selected_et",
]


class ChannelSelectionProcessor:
    """Select calorimeter channels event by event.

    **Processing Pipeline:**

    For each event, the processor performs (in order):

    1. **Validate**: the raw event must carry integer channel triples and
       time samples for every occurrence.

    2. **Energy**: sum of calibrated charge over the configured time window.

    3. **Topology**: every occurrence is mapped to its linear channel index.
       Unknown triples raise ``InvalidChannel``.

    4. **Et**: energy times sin(theta) of the channel direction.

    5. **Select**: the configured selector produces the mask, the associated
       jet pt and the associated candidate index.

    The topology index and geometry are shared read-only; per-event state
    lives only in the returned dataset.

    Example usage::

        processor = ChannelSelectionProcessor(config, topology, geometry)
        result = processor.process(event, clustering)
        summary = processor.process_events(zip(events, clusterings))
    """

    def __init__(self, config: "InternalConfig", topology: "ChannelTopologyIndex",
                 geometry: "ChannelGeometry"):
        """Build the per-event stages.

        Raises
        ------
        InvalidWindow
            If the extractor time window is inconsistent.
        UnsupportedConfiguration
            If the selector method is unknown.
        """
        if geometry.index is not topology:
            raise ValueError("geometry was built for a different topology index")

        self.config = config
        self.topology = topology
        self.geometry = geometry

        self.extractor = ChannelEnergyExtractor(config)
        self.selector = make_channel_selector(config, geometry)

        # Neighbor tables must be filled before any concurrent reader
        if config.processor.warm_neighbor_cache:
            topology.ensure_neighbors_computed()

        logger.info("ChannelSelectionProcessor initialized: selector=%s, channels=%d, store_selected_only=%s",
                    self.selector.name, len(topology), config.output.store_selected_only)

    def process(self, event: xr.Dataset, clustering: ClusteringResult) -> xr.Dataset:
        """Run one event through the pipeline.

        Returns
        -------
        xr.Dataset
            The event trimmed to ``pulse_count`` occurrences with
            ``energy``, ``channel_index``, ``et``, ``jet``, ``selected`` and
            ``associated_jet_pt`` variables.
        """
        try:
            assert_raw_event(event)
        except ContractViolation as e:
            logger.error("Rejected raw event: %s", e)
            raise

        ds = self.extractor.attach(event)

        channel_index = self.topology.linear_indices(
            ds["depth"].values, ds["ieta"].values, ds["iphi"].values
        )
        ds["channel_index"] = xr.DataArray(
            channel_index, dims=("pulse",),
            attrs={"long_name": "Linear channel index"},
        )
        ds["et"] = xr.DataArray(
            transverse_energy(ds, self.geometry), dims=("pulse",),
            attrs={"long_name": "Channel transverse energy"},
        )

        mask, jet_pt, jet = self.selector.select(ds, clustering)

        ds["jet"] = xr.DataArray(
            jet, dims=("pulse",),
            attrs={"long_name": "Associated jet candidate index", "missing": -1},
        )
        ds["selected"] = xr.DataArray(
            mask, dims=("pulse",),
            attrs={"long_name": "Channel selected"},
        )
        ds["associated_jet_pt"] = xr.DataArray(
            jet_pt, dims=("pulse",),
            attrs={"long_name": "Pt of associated jet for selected channels"},
        )

        ds.attrs["n_jets"] = len(clustering.jets)
        ds.attrs["n_good_jets"] = self.selector.good_jet_count(clustering)
        ds.attrs["sum_et"] = float(clustering.sum_et)
        ds.attrs["unclustered_et"] = float(clustering.unclustered_et)
        ds.attrs["selector"] = self.selector.name

        try:
            assert_selection_output(ds, ds.sizes["pulse"])
        except ContractViolation as e:
            logger.critical("Selection contract violated: %s", e)
            raise

        logger.debug("Event processed: %d channels, %d selected", ds.sizes["pulse"], int(mask.sum()))
        return ds

    def selected_only(self, result: xr.Dataset) -> xr.Dataset:
        """Drop unselected occurrences when the output is configured to."""
        if not self.config.output.store_selected_only:
            return result
        keep = np.flatnonzero(result["selected"].values)
        ds_out = result.isel(pulse=keep)
        ds_out.attrs["pulse_count"] = int(keep.size)
        return ds_out

    @staticmethod
    def summarize(event_id, result: xr.Dataset) -> dict:
        selected = result["selected"].values
        return {
            "event": event_id,
            "n_channels": int(result.sizes["pulse"]),
            "n_selected": int(selected.sum()),
            "n_jets": int(result.attrs["n_jets"]),
            "n_good_jets": int(result.attrs["n_good_jets"]),
            "sum_et": float(result.attrs["sum_et"]),
            "unclustered_et": float(result.attrs["unclustered_et"]),
            "selected_et": float(result["et"].values[selected].sum()),
        }

    def process_events(self, events: Iterable[Tuple[xr.Dataset, ClusteringResult]]) -> pd.DataFrame:
        """Process a sequence of (event, clustering) pairs.

        Errors from a single event propagate; the caller decides whether to
        skip it or abort the run.
        """
        rows = []
        for event_id, (event, clustering) in enumerate(events):
            result = self.process(event, clustering)
            rows.append(self.summarize(event_id, result))

        df = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
        logger.info("Processed %d events, %d channels selected", len(df),
                    int(df["n_selected"].sum()) if len(df) else 0)
        return df

"""Window charge sums: raw time samples to one energy per channel occurrence."""

import logging
from typing import TYPE_CHECKING

import numpy as np
import xarray as xr

from calosel.contracts import IndexOutOfRange, InvalidWindow, pulse_count

if TYPE_CHECKING:
    from calosel.schemas import InternalConfig

__all__ = ["ChannelEnergyExtractor"]

logger = logging.getLogger(__name__)


class ChannelEnergyExtractor:
    """Reduce per-channel time samples to one energy value.

    The energy of an occurrence is ``sum((charge - pedestal) * gain)`` over
    the time slices ``[window_start, window_end)``.
    """

    def __init__(self, config: "InternalConfig"):
        """Store and validate the time window.

        Raises
        ------
        InvalidWindow
            Unless ``0 <= window_start < window_end <= n_time_slices``.
        """
        self.window_start = config.extractor.min_response_ts
        self.window_end = config.extractor.max_response_ts
        self.n_time_slices = config.extractor.n_time_slices

        if not 0 <= self.window_start < self.window_end <= self.n_time_slices:
            raise InvalidWindow(
                f"time window [{self.window_start}, {self.window_end}) invalid for "
                f"{self.n_time_slices} time slices"
            )

        logger.info("ChannelEnergyExtractor initialized: window=[%d, %d)",
                    self.window_start, self.window_end)

    def _check_samples(self, ds: xr.Dataset) -> None:
        n_ts = ds.sizes["ts"]
        if n_ts < self.window_end:
            raise InvalidWindow(
                f"event has {n_ts} time slices, window needs {self.window_end}"
            )

    def energy(self, ds: xr.Dataset, occurrence: int) -> float:
        """Energy of a single channel occurrence."""
        self._check_samples(ds)
        if not 0 <= occurrence < pulse_count(ds):
            raise IndexOutOfRange(f"occurrence {occurrence} outside [0, {pulse_count(ds)})")

        window = slice(self.window_start, self.window_end)
        q = ds["charge"].values[occurrence, window]
        ped = ds["pedestal"].values[occurrence, window]
        g = ds["gain"].values[occurrence, window]
        return float(np.sum((q - ped) * g))

    def energies(self, ds: xr.Dataset) -> np.ndarray:
        """Energies of all valid occurrences in the event."""
        self._check_samples(ds)
        count = pulse_count(ds)
        window = slice(self.window_start, self.window_end)
        q = ds["charge"].values[:count, window]
        ped = ds["pedestal"].values[:count, window]
        g = ds["gain"].values[:count, window]
        return np.sum((q - ped) * g, axis=1).astype(np.float64)

    def attach(self, ds: xr.Dataset) -> xr.Dataset:
        """Return a copy of the event, trimmed to pulse_count, with an ``energy`` variable."""
        energies = self.energies(ds)
        ds_out = ds.isel(pulse=slice(0, len(energies))).copy()
        ds_out["energy"] = xr.DataArray(
            energies,
            dims=("pulse",),
            attrs={
                "long_name": "Channel energy in time window",
                "window_start": self.window_start,
                "window_end": self.window_end,
            },
        )
        ds_out.attrs["pulse_count"] = len(energies)
        logger.debug("Energies attached: pulses=%d, total=%.3f", len(energies), energies.sum())
        return ds_out

"""Raw event contract.

Enforces the structure the raw event collaborator promises: parallel
per-occurrence channel coordinates and per-time-slice charge, pedestal and
gain arrays, with each channel occurring at most once.
"""

import numpy as np
import xarray as xr
from calosel.contracts.base import require

CHANNEL_VARS = ("depth", "ieta", "iphi")
SAMPLE_VARS = ("charge", "pedestal", "gain")


def pulse_count(ds: xr.Dataset) -> int:
    """Number of valid leading occurrences in a raw event."""
    return int(ds.attrs.get("pulse_count", ds.sizes.get("pulse", 0)))


def assert_raw_event(ds: xr.Dataset) -> None:
    """Enforce raw event contract.

    Called before any per-event processing.

    Parameters
    ----------
    ds : xr.Dataset
        Raw event with dims ``pulse`` and ``ts``

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    for var in CHANNEL_VARS:
        require(
            var in ds.data_vars,
            f"Event contract violated: missing '{var}'"
        )
        require(
            ds[var].dims == ("pulse",),
            f"Event contract violated: '{var}' has dims {ds[var].dims}, expected ('pulse',)"
        )
        require(
            ds[var].dtype.kind in {"i", "u"},
            f"Event contract violated: '{var}' dtype is {ds[var].dtype}, expected integer"
        )

    for var in SAMPLE_VARS:
        require(
            var in ds.data_vars,
            f"Event contract violated: missing '{var}'"
        )
        require(
            ds[var].dims == ("pulse", "ts"),
            f"Event contract violated: '{var}' has dims {ds[var].dims}, expected ('pulse', 'ts')"
        )

    count = pulse_count(ds)
    require(
        0 <= count <= ds.sizes["pulse"],
        f"Event contract violated: pulse_count={count} outside [0, {ds.sizes['pulse']}]"
    )

    triples = np.stack([ds[var].values[:count] for var in CHANNEL_VARS], axis=1)
    n_unique = len(np.unique(triples, axis=0)) if count else 0
    require(
        n_unique == count,
        f"Event contract violated: {count - n_unique} channels occur more than once"
    )

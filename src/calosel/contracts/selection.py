"""Selection stage contract.

Enforces the guarantee that after channel selection the event carries one
mask value and one associated jet pt per channel occurrence.
"""

import numpy as np
import xarray as xr
from calosel.contracts.base import require


def assert_selection_output(ds: xr.Dataset, n_occurrences: int) -> None:
    """Enforce selection stage contract.

    Parameters
    ----------
    ds : xr.Dataset
        Output of ``ChannelSelectionProcessor.process()``

    n_occurrences : int
        Number of channel occurrences in the input event

    Raises
    ------
    ContractViolation
        If structural requirements are violated
    """
    for var in ("selected", "associated_jet_pt", "channel_index"):
        require(
            var in ds.data_vars,
            f"Selection contract violated: missing '{var}'"
        )
        require(
            ds[var].shape == (n_occurrences,),
            f"Selection contract violated: '{var}' has shape {ds[var].shape}, expected ({n_occurrences},)"
        )

    require(
        ds["selected"].dtype == np.bool_,
        f"Selection contract violated: 'selected' dtype is {ds['selected'].dtype}, expected bool"
    )

    selected = ds["selected"].values
    jet_pt = ds["associated_jet_pt"].values
    require(
        bool(np.all(jet_pt[~selected] == 0.0)),
        "Selection contract violated: discarded channels must carry zero jet pt"
    )
    require(
        bool(np.all(jet_pt >= 0.0)),
        "Selection contract violated: negative associated jet pt"
    )

import numpy as np
import xarray as xr


def make_fake_event(
    channels,
    energies,
    n_ts=10,
    signal_ts=3,
    pulse_count=None,
    padding=0,
):
    """
    Create a raw event dataset with calibrated samples.

    Every occurrence carries its whole energy in ``signal_ts``; pedestals
    are zero and gains one. ``padding`` appends trailing occurrences with
    channel (0, 0, 0) that lie beyond ``pulse_count``.
    """
    channels = list(channels) + [(0, 0, 0)] * padding
    energies = list(energies) + [0.0] * padding
    n = len(channels)

    triples = np.array(channels, dtype=np.int32).reshape(n, 3)
    charge = np.zeros((n, n_ts))
    charge[:, signal_ts] = energies

    ds = xr.Dataset(
        data_vars={
            "depth": (("pulse",), triples[:, 0]),
            "ieta": (("pulse",), triples[:, 1]),
            "iphi": (("pulse",), triples[:, 2]),
            "charge": (("pulse", "ts"), charge),
            "pedestal": (("pulse", "ts"), np.zeros((n, n_ts))),
            "gain": (("pulse", "ts"), np.ones((n, n_ts))),
        },
    )
    ds.attrs["pulse_count"] = n - padding if pulse_count is None else pulse_count
    return ds

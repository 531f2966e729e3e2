"""Assign channels to the nearest jet candidate inside a cone.

The distance between a channel at (eta, phi) and a jet is

    d = sqrt((deta / sqrt(r))**2 + (dphi * sqrt(r))**2)

with ``dphi`` wrapped into [-pi, pi) and ``r`` the eta-to-phi cone axis
ratio. A channel is inside the cone when ``d <= cone_size``, i.e. inside the
ellipse with semi-axes ``cone_size * sqrt(r)`` in eta and
``cone_size / sqrt(r)`` in phi. The ``euclidean`` metric is the circle
(``r = 1``) regardless of the configured ratio.
"""

import logging
from typing import Sequence

import numpy as np

from calosel.selection.jets import JetCandidate

__all__ = ["JetChannelAssociator", "delta_phi", "UNASSOCIATED"]

logger = logging.getLogger(__name__)

UNASSOCIATED = -1


def delta_phi(phi1, phi2):
    """Azimuthal difference wrapped into [-pi, pi)."""
    return np.mod(np.asarray(phi1) - np.asarray(phi2) + np.pi, 2.0 * np.pi) - np.pi


class JetChannelAssociator:
    """Nearest-jet cone association.

    Parameters
    ----------
    cone_size : float
        Cone radius (geometric mean of the ellipse axes).
    metric : {"elliptic", "euclidean"}
        Angular metric.
    eta_to_phi_ratio : float
        Ratio of the eta and phi cone axes, used by the elliptic metric.
    """

    METRICS = ("elliptic", "euclidean")

    def __init__(self, cone_size: float, metric: str = "elliptic", eta_to_phi_ratio: float = 1.0):
        if metric not in self.METRICS:
            raise ValueError(f"Unknown cone metric: {metric}")
        if cone_size <= 0 or eta_to_phi_ratio <= 0:
            raise ValueError("cone_size and eta_to_phi_ratio must be positive")

        self.cone_size = float(cone_size)
        self.metric = metric
        self.eta_to_phi_ratio = float(eta_to_phi_ratio) if metric == "elliptic" else 1.0
        self._scale = np.sqrt(self.eta_to_phi_ratio)

    @classmethod
    def from_config(cls, config) -> "JetChannelAssociator":
        return cls(config.association.cone_size,
                   config.association.metric,
                   config.association.eta_to_phi_ratio)

    def distances(self, channel_eta, channel_phi, jets: Sequence[JetCandidate]) -> np.ndarray:
        """Distance matrix of shape (n_channels, n_jets), jets in the given order."""
        channel_eta = np.asarray(channel_eta, dtype=np.float64)
        channel_phi = np.asarray(channel_phi, dtype=np.float64)
        jet_eta = np.array([j.eta for j in jets], dtype=np.float64)
        jet_phi = np.array([j.phi for j in jets], dtype=np.float64)

        deta = channel_eta[:, np.newaxis] - jet_eta[np.newaxis, :]
        dphi = delta_phi(channel_phi[:, np.newaxis], jet_phi[np.newaxis, :])
        return np.hypot(deta / self._scale, dphi * self._scale)

    def associate(self, channel_eta, channel_phi, jets: Sequence[JetCandidate]) -> np.ndarray:
        """Position of the nearest in-cone jet for every channel, or -1.

        ``jets`` must be sorted by candidate index; positions refer to that
        order. ``np.argmin`` returns the first minimum, so equidistant jets
        resolve to the lower candidate index.
        """
        n_channels = len(channel_eta)
        if not jets or n_channels == 0:
            return np.full(n_channels, UNASSOCIATED, dtype=np.int64)

        d = self.distances(channel_eta, channel_phi, jets)
        nearest = np.argmin(d, axis=1)
        in_cone = d[np.arange(n_channels), nearest] <= self.cone_size
        assignment = np.where(in_cone, nearest, UNASSOCIATED).astype(np.int64)

        logger.debug("Associated %d of %d channels to %d jets",
                     int(in_cone.sum()), n_channels, len(jets))
        return assignment

"""Per-jet energy budget pruning of associated channels."""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from calosel.selection.jets import JetCandidate

__all__ = ["EnergyBudgetPruner", "BUDGET_TOTALS"]

logger = logging.getLogger(__name__)

# Where the per-jet total comes from: the clustering engine's jet Et, or the
# summed Et of the channels that fell inside the jet's cone.
BUDGET_TOTALS = ("jet", "channels")


class EnergyBudgetPruner:
    """Drop the softest channels of each jet within an energy budget.

    For every jet the associated channels are visited in ascending Et order.
    A channel is discarded while the running discarded Et stays within
    ``et_fraction_cutoff * jet_total``; the first channel that would overrun
    the budget is kept together with every harder channel. Jets below
    ``jet_pt_cutoff`` lose all their channels afterwards.

    ``jet_total`` is the jet's own Et (``JetCandidate.total_et``) unless
    ``budget_total="channels"``.
    """

    def __init__(self, et_fraction_cutoff: float, jet_pt_cutoff: float, budget_total: str = "jet"):
        if not 0.0 <= et_fraction_cutoff < 1.0:
            raise ValueError(f"et_fraction_cutoff must be in [0, 1), got {et_fraction_cutoff}")
        if jet_pt_cutoff < 0:
            raise ValueError(f"jet_pt_cutoff must be >= 0, got {jet_pt_cutoff}")
        if budget_total not in BUDGET_TOTALS:
            raise ValueError(f"budget_total must be one of {BUDGET_TOTALS}, got {budget_total!r}")

        self.et_fraction_cutoff = float(et_fraction_cutoff)
        self.jet_pt_cutoff = float(jet_pt_cutoff)
        self.budget_total = budget_total

    @classmethod
    def from_config(cls, config) -> "EnergyBudgetPruner":
        return cls(
            config.pruning.et_fraction_cutoff,
            config.pruning.jet_pt_cutoff,
            config.pruning.budget_total,
        )

    def is_good(self, jet: JetCandidate) -> bool:
        return jet.pt >= self.jet_pt_cutoff

    def good_jets(self, jets: Sequence[JetCandidate]) -> Tuple[JetCandidate, ...]:
        """Jets passing the momentum floor, in the given order."""
        return tuple(j for j in jets if self.is_good(j))

    def _budget_mask(self, et: np.ndarray, total: float) -> np.ndarray:
        # et belongs to one jet; returns the kept mask in the same order
        keep = np.zeros(len(et), dtype=bool)
        if total <= 0:
            return keep

        budget = self.et_fraction_cutoff * total
        order = np.argsort(et, kind="stable")
        discarded = np.cumsum(et[order]) <= budget
        keep[order] = ~discarded
        return keep

    def prune(
        self,
        channel_et,
        assignment,
        jets: Sequence[JetCandidate],
        jet_totals: Optional[Sequence[float]] = None,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Final selection mask and associated jet pt per channel.

        Parameters
        ----------
        channel_et : array-like of float, shape (n,)
            Transverse energy of each channel occurrence.
        assignment : array-like of int, shape (n,)
            Position in ``jets`` of the associated jet, or -1.
        jets : sequence of JetCandidate
            Jets in the order used to build ``assignment``.
        jet_totals : sequence of float, optional
            Total Et per jet, overriding ``budget_total`` for this call.

        Returns
        -------
        mask : np.ndarray of bool
        jet_pt : np.ndarray of float64
            Pt of the associated jet for kept channels, 0 elsewhere.
        """
        channel_et = np.asarray(channel_et, dtype=np.float64)
        assignment = np.asarray(assignment, dtype=np.int64)
        if channel_et.shape != assignment.shape:
            raise ValueError(
                f"channel_et and assignment differ in shape: {channel_et.shape} vs {assignment.shape}"
            )
        if jet_totals is not None and len(jet_totals) != len(jets):
            raise ValueError("jet_totals must have one entry per jet")

        mask = np.zeros(channel_et.shape, dtype=bool)
        jet_pt = np.zeros(channel_et.shape, dtype=np.float64)

        for position, jet in enumerate(jets):
            members = np.flatnonzero(assignment == position)
            if members.size == 0:
                continue
            if not self.is_good(jet):
                logger.debug("Jet %d below pt floor (%.2f < %.2f), %d channels dropped",
                             jet.index, jet.pt, self.jet_pt_cutoff, members.size)
                continue

            et = channel_et[members]
            if jet_totals is not None:
                total = float(jet_totals[position])
            elif self.budget_total == "channels":
                total = float(et.sum())
            else:
                total = float(jet.total_et)
            kept = members[self._budget_mask(et, total)]
            mask[kept] = True
            jet_pt[kept] = jet.pt

            logger.debug("Jet %d: kept %d of %d channels", jet.index, kept.size, members.size)

        return mask, jet_pt

"""Jet candidates supplied by the external clustering engine.

The selection code only reads these objects; it never tells the engine how
to cluster. Candidates are identified by ``index``, which also decides ties
during cone association (lower index wins).
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np

__all__ = ["JetCandidate", "ClusteringResult"]


@dataclass(frozen=True)
class JetCandidate:
    """Reconstructed jet direction, transverse momentum and total Et.

    ``et`` is the jet's own transverse energy as reported by the clustering
    engine. Engines that only report a momentum leave it unset and ``pt``
    stands in for it.
    """
    index: int
    eta: float
    phi: float
    pt: float
    et: Optional[float] = None

    @property
    def total_et(self) -> float:
        return self.pt if self.et is None else self.et


@dataclass(frozen=True)
class ClusteringResult:
    """Per-event output of the clustering engine.

    Attributes
    ----------
    jets : sequence of JetCandidate
        Candidates in any order; consumers use ``sorted_jets()``.
    sum_et : float
        Total visible transverse energy, summed as a scalar.
    unclustered_et : float
        Transverse energy not assigned to any jet.
    """
    jets: Tuple[JetCandidate, ...] = field(default_factory=tuple)
    sum_et: float = 0.0
    unclustered_et: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "jets", tuple(self.jets))

    def sorted_jets(self) -> Tuple[JetCandidate, ...]:
        return tuple(sorted(self.jets, key=lambda j: j.index))

    @classmethod
    def from_arrays(cls, eta: Sequence[float], phi: Sequence[float], pt: Sequence[float],
                    sum_et: float = 0.0, unclustered_et: float = 0.0,
                    et: Optional[Sequence[float]] = None) -> "ClusteringResult":
        """Build from parallel arrays; candidate index = array position."""
        eta, phi, pt = (np.asarray(a, dtype=np.float64) for a in (eta, phi, pt))
        if et is None:
            totals = [None] * len(pt)
        else:
            totals = [float(t) for t in np.asarray(et, dtype=np.float64)]
        jets = tuple(
            JetCandidate(i, float(e), float(p), float(t), total)
            for i, (e, p, t, total) in enumerate(zip(eta, phi, pt, totals))
        )
        return cls(jets, float(sum_et), float(unclustered_et))

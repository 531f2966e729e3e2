"""Topology stage contract.

Enforces the guarantee that a freshly built channel index is a complete,
consistent bijection over the fixed detector enumeration.
"""

import numpy as np
from calosel.contracts.base import require


def assert_topology(index, expected_count: int) -> None:
    """Enforce topology contract.

    Called at the end of ``ChannelTopologyIndex.build()``.

    Parameters
    ----------
    index : ChannelTopologyIndex
        Index under construction (all lookup tables filled)

    expected_count : int
        Fixed detector channel count

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        len(index) == expected_count,
        f"Topology contract violated: enumerated {len(index)} channels, expected {expected_count}"
    )
    require(
        len(set(index.channels)) == expected_count,
        "Topology contract violated: duplicate channel triples in enumeration"
    )

    modules = index.module_lookup
    require(
        modules.shape == (expected_count,),
        f"Topology contract violated: module table has shape {modules.shape}"
    )
    require(
        bool(np.all((modules >= 0) & (modules < index.n_modules))),
        "Topology contract violated: module id outside hardware map range"
    )

    racks = index.rack_lookup
    require(
        bool(np.all((racks >= 0) & (racks < index.n_racks))),
        "Topology contract violated: rack id outside hardware map range"
    )

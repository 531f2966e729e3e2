"""Processing contracts and failure types.

Contracts fail immediately and loudly when a stage doesn't produce its
promised invariants. Input errors (bad channel triples, missing geometry,
misconfigured windows) have their own exception types.

Key principle:
- Pydantic validates config correctness
- Contracts validate processing correctness
- Lookups raise typed errors for bad data
"""

from calosel.contracts.failure import (
    CaloselError,
    ContractViolation,
    IndexOutOfRange,
    InvalidChannel,
    InvalidWindow,
    MalformedTable,
    MissingGeometryEntry,
    UnsupportedConfiguration,
)
from calosel.contracts.base import require
from calosel.contracts.topology import assert_topology
from calosel.contracts.event import assert_raw_event, pulse_count
from calosel.contracts.selection import assert_selection_output

__all__ = [
    "CaloselError",
    "ContractViolation",
    "IndexOutOfRange",
    "InvalidChannel",
    "InvalidWindow",
    "MalformedTable",
    "MissingGeometryEntry",
    "UnsupportedConfiguration",
    "require",
    "assert_topology",
    "assert_raw_event",
    "pulse_count",
    "assert_selection_output",
]

"""Centralized failure types for channel indexing and selection.

Two families of errors live here:

- Lookup and configuration errors (``InvalidChannel``, ``IndexOutOfRange``,
  ``InvalidWindow``, ``MissingGeometryEntry``, ``UnsupportedConfiguration``,
  ``MalformedTable``). They describe bad input and are raised where the input
  is first examined. All of them derive from ``CaloselError`` and from the
  closest builtin exception, so callers may catch either.

- ``ContractViolation``: a processing stage did not produce what it promised.
  This is a bug, not bad input.

Nothing in ``calosel`` retries. Recovery is always the caller's decision.
"""


class CaloselError(Exception):
    """Base class for all calosel input and configuration errors."""


class InvalidChannel(CaloselError, ValueError):
    """A (depth, ieta, iphi) triple is not part of the enumerated geometry."""


class IndexOutOfRange(CaloselError, IndexError):
    """A linear channel, module or rack index is outside its valid range."""


class InvalidWindow(CaloselError, ValueError):
    """Energy extraction time window is inconsistent with the sample count."""


class MissingGeometryEntry(CaloselError, RuntimeError):
    """An enumerated channel received no direction from the geometry tables."""


class UnsupportedConfiguration(CaloselError, ValueError):
    """A configured strategy name is not known."""


class MalformedTable(CaloselError, ValueError):
    """A text table row could not be parsed."""


class ContractViolation(RuntimeError):
    """Raised when a processing contract is violated.

    This indicates a bug in processing logic, not bad user input. It means a
    stage did not produce the invariants it promised.

    Key distinction:
    - ValidationError: User/config error (handled by Pydantic)
    - CaloselError subclasses: bad channel data or startup configuration
    - ContractViolation: processing bug (programmer error)
    """
    pass

"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
"""

from calosel.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a processing contract.

    Called at stage boundaries to verify the preceding stage produced the
    guaranteed invariants. Fail-fast: no recovery, no fallback, no silence.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation.

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(len(index) == CHANNEL_COUNT, "Topology contract: wrong channel count")
    >>> require("selected" in ds.data_vars, "Selection contract: missing 'selected'")
    """
    if not condition:
        raise ContractViolation(message)

"""Read whitespace/comma separated numeric tables from text files.

Blank lines and comment lines (first non-blank character ``#``) are skipped.
Every remaining line must hold at least as many values as there are column
types; extra trailing values are ignored.
"""

from pathlib import Path
from typing import Sequence

import numpy as np

from calosel.contracts.failure import MalformedTable

__all__ = ["read_table", "parse_table_lines"]


def _row_dtype(column_types: Sequence[type]) -> np.dtype:
    return np.dtype([(f"c{i}", t) for i, t in enumerate(column_types)])


def parse_table_lines(lines, column_types: Sequence[type], source: str = "<text>") -> list:
    """Parse an iterable of text lines into a list of row tuples.

    Parameters
    ----------
    lines : iterable of str
        Text lines (trailing newlines allowed)
    column_types : sequence of type
        Type of each column, e.g. ``(int, int, int, float, float, float)``
    source : str
        Name used in error messages

    Raises
    ------
    MalformedTable
        If a data line has too few values or a value does not convert.
    """
    ncols = len(column_types)
    try:
        table = np.loadtxt(
            (line.replace(",", " ") for line in lines),
            dtype=_row_dtype(column_types),
            comments="#",
            usecols=range(ncols),
            ndmin=1,
        )
    except ValueError as e:
        raise MalformedTable(f"{source}: {e}") from e
    return table.tolist()


def read_table(path, column_types: Sequence[type]) -> list:
    """Read a numeric text table from ``path``.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    MalformedTable
        If a data line cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Table not found: {path}")

    with open(path) as f:
        return parse_table_lines(f, column_types, source=str(path))

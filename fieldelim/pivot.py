"""Deterministic pivot search for the elimination engine."""

from typing import Any, Iterator, Optional, Tuple

from fieldelim.matrix import FieldMatrix

COLUMN_MAJOR = "cols"
ROW_MAJOR = "rows"

Pivot = Tuple[int, int, Any]


def iter_entries(matrix: FieldMatrix, itr: int,
                 order: str = COLUMN_MAJOR) -> Iterator[Pivot]:
    """Yield ``(row, col, value)`` for the sub-rectangle starting at ``(itr, itr)``.

    ``COLUMN_MAJOR`` walks down each column before moving right,
    ``ROW_MAJOR`` walks along each row before moving down.
    """
    rows = range(itr, matrix.nrows)
    cols = range(itr, matrix.ncols)
    data = matrix.data

    if order == COLUMN_MAJOR:
        for j in cols:
            for i in rows:
                yield i, j, data[i, j]
    elif order == ROW_MAJOR:
        for i in rows:
            for j in cols:
                yield i, j, data[i, j]
    else:
        raise ValueError(f"Unknown scan order {order!r}")


def find_pivot(matrix: FieldMatrix, itr: int, mode) -> Optional[Pivot]:
    """Return the first nonzero entry at or below/right of ``(itr, itr)``.

    The scan order comes from ``mode.scan_order``. Returns ``None`` when the
    remaining sub-rectangle is entirely zero.
    """
    is_zero = matrix.field.is_zero
    for i, j, value in iter_entries(matrix, itr, mode.scan_order):
        if not is_zero(value):
            return i, j, value
    return None

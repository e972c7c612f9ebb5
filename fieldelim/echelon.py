"""Row- and column-echelon utilities over a field.

These wrap the one-sided elimination modes and, like the diagonal form in
:mod:`fieldelim.linalg`, return the invertible matrix that witnesses the
transformation so callers can compose them:

* ``row_echelon`` gives ``P`` and ``T = P @ A`` in reduced row-echelon form.
* ``column_echelon`` gives ``Q`` and ``T = A @ Q`` in reduced column-echelon
  form.
"""

from typing import List, Tuple

from .eliminator import FieldEliminator, Mode
from .matrix import FieldMatrix


def row_echelon(A: FieldMatrix) -> Tuple[FieldMatrix, FieldMatrix, int]:
    """Reduce ``A`` to reduced row-echelon form using row operations only.

    The eliminator scans the remaining block column by column. The first
    nonzero entry found is swapped into the current row, scaled to one and
    used to clear every other entry of its column.

    Args:
        A: Input matrix over a field.

    Returns:
        Tuple containing the invertible left transform ``P``, the echelon
        matrix ``T`` with ``T = P @ A``, and the rank of ``A``.
    """

    e = FieldEliminator(A, Mode.ROWS_ONLY).run()
    return e.left_transform(), e.result(), e.rank()


def column_echelon(A: FieldMatrix) -> Tuple[FieldMatrix, FieldMatrix, int]:
    """Reduce ``A`` to reduced column-echelon form using column operations only.

    Args:
        A: Input matrix over a field.

    Returns:
        Tuple containing the invertible right transform ``Q``, the echelon
        matrix ``T`` with ``T = A @ Q``, and the rank of ``A``.
    """

    e = FieldEliminator(A, Mode.COLS_ONLY).run()
    return e.right_transform(), e.result(), e.rank()


def pivot_columns(A: FieldMatrix) -> List[int]:
    """Indices of the pivot columns of ``A``, in increasing order."""
    e = FieldEliminator(A, Mode.ROWS_ONLY).run()
    return [j for _, j in e.pivots()]

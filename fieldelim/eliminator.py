"""Gauss-Jordan elimination over a field with a replayable step log.

The eliminator reduces a copy of its input by repeatedly choosing a pivot,
moving it onto the diagonal, normalizing it to one and clearing the rest of
its column (row elimination) and/or row (column elimination). Every
operation is an :class:`~fieldelim.steps.ElementaryStep` and is recorded in
the order it was applied, so that ``apply_log(steps, A)`` reproduces the
working matrix at any point of the run.

Three modes are supported:

* ``Mode.BOTH`` reduces ``A`` to ``diag(1, ..., 1, 0, ..., 0)`` using row and
  column operations. The number of ones is the rank of ``A``.
* ``Mode.ROWS_ONLY`` reduces ``A`` to reduced row-echelon form.
* ``Mode.COLS_ONLY`` reduces ``A`` to reduced column-echelon form.

Replaying the row steps on an identity matrix gives ``P`` and replaying the
column steps gives ``Q`` with ``P @ A @ Q == result``.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from fieldelim.field import Field
from fieldelim.matrix import FieldMatrix
from fieldelim.pivot import COLUMN_MAJOR, ROW_MAJOR, find_pivot
from fieldelim.steps import (
    AddCol,
    AddRow,
    ElementaryStep,
    ScaleCol,
    ScaleRow,
    SwapCols,
    SwapRows,
)

logger = logging.getLogger(__name__)


class Mode(enum.Enum):
    BOTH = "both"
    ROWS_ONLY = "rows"
    COLS_ONLY = "cols"

    @property
    def eliminates_rows(self) -> bool:
        return self is not Mode.COLS_ONLY

    @property
    def eliminates_cols(self) -> bool:
        return self is not Mode.ROWS_ONLY

    @property
    def scan_order(self) -> str:
        return ROW_MAJOR if self is Mode.COLS_ONLY else COLUMN_MAJOR

    def bound(self, nrows: int, ncols: int) -> int:
        """Iteration index at which a run of this mode is finished."""
        if self is Mode.ROWS_ONLY:
            return nrows
        if self is Mode.COLS_ONLY:
            return ncols
        return min(nrows, ncols)


class EliminationStateError(RuntimeError):
    """Raised when results are requested from an eliminator that never ran."""


def apply_log(steps: Iterable[ElementaryStep], matrix: FieldMatrix,
              in_place: bool = False) -> FieldMatrix:
    """Replay ``steps`` in order against ``matrix`` and return the result."""
    target = matrix if in_place else matrix.copy()
    for s in steps:
        s.apply(target)
    return target


def left_transform(steps: Sequence[ElementaryStep], field: Field,
                   n: int) -> FieldMatrix:
    """``P`` such that the row steps of ``steps`` equal left multiplication by ``P``."""
    row_steps = [s for s in steps if s.is_row_step]
    return apply_log(row_steps, FieldMatrix.identity(field, n), in_place=True)


def right_transform(steps: Sequence[ElementaryStep], field: Field,
                    m: int) -> FieldMatrix:
    """``Q`` such that the column steps of ``steps`` equal right multiplication by ``Q``."""
    col_steps = [s for s in steps if s.is_col_step]
    return apply_log(col_steps, FieldMatrix.identity(field, m), in_place=True)


def left_inverse(steps: Sequence[ElementaryStep], field: Field,
                 n: int) -> FieldMatrix:
    """``P^-1``: the inverted row steps replayed last-to-first."""
    inverted = [s.inverse(field) for s in reversed(steps) if s.is_row_step]
    return apply_log(inverted, FieldMatrix.identity(field, n), in_place=True)


def right_inverse(steps: Sequence[ElementaryStep], field: Field,
                  m: int) -> FieldMatrix:
    """``Q^-1``: the inverted column steps replayed last-to-first."""
    inverted = [s.inverse(field) for s in reversed(steps) if s.is_col_step]
    return apply_log(inverted, FieldMatrix.identity(field, m), in_place=True)


class FieldEliminator:
    """State machine driving one elimination run.

    The input matrix is copied; the caller's matrix is never modified. Use
    :meth:`run` to reduce to completion or :meth:`step` to advance one
    iteration at a time.
    """

    def __init__(self, matrix: FieldMatrix, mode: Mode = Mode.BOTH,
                 debug: bool = False):
        self.field = matrix.field
        self.mode = mode
        self.debug = debug
        self.itr = 0

        self._working = matrix.copy()
        self._steps: List[ElementaryStep] = []
        self._pivots: List[Tuple[int, int]] = []
        self._started = False
        self._done = False

    @property
    def nrows(self) -> int:
        return self._working.nrows

    @property
    def ncols(self) -> int:
        return self._working.ncols

    @property
    def is_done(self) -> bool:
        return self._done

    def run(self) -> "FieldEliminator":
        while not self.step():
            pass
        return self

    def step(self) -> bool:
        """Execute one iteration and report whether the run is finished."""
        if self._done:
            return True
        self._started = True

        if self.itr >= self.mode.bound(self.nrows, self.ncols):
            return self._finish()

        pivot = find_pivot(self._working, self.itr, self.mode)
        if pivot is None:
            if self.mode is Mode.BOTH:
                # Remaining block is zero.
                return self._finish()
            if self.debug:
                logger.debug("itr=%d: no pivot, skipping", self.itr)
            return self._advance()

        i0, j0, _ = pivot
        if self.debug:
            logger.debug("itr=%d: pivot at (%d, %d)", self.itr, i0, j0)

        if self.mode.eliminates_rows and i0 > self.itr:
            self._apply(SwapRows(self.itr, i0))
            i0 = self.itr

        if self.mode.eliminates_cols and j0 > self.itr:
            self._apply(SwapCols(self.itr, j0))
            j0 = self.itr

        if self.mode.eliminates_rows:
            self._eliminate_rows(i0, j0)

        if self.mode.eliminates_cols:
            self._eliminate_cols(i0, j0)

        self._pivots.append((i0, j0))
        return self._advance()

    def _advance(self) -> bool:
        self.itr += 1
        if self.itr >= self.mode.bound(self.nrows, self.ncols):
            return self._finish()
        return False

    def _finish(self) -> bool:
        self._done = True
        if self.debug:
            logger.debug(
                "done after %d iterations, %d steps, diagonal %s",
                self.itr, len(self._steps), self._working.diagonal_entries(),
            )
        return True

    def _eliminate_rows(self, i0: int, j0: int) -> None:
        """Normalize the pivot and clear the rest of column ``j0``."""
        field = self.field
        A = self._working.data

        a = A[i0, j0]
        if not field.is_one(a):
            self._apply(ScaleRow(i0, field.inv(a)))

        for i in range(self.nrows):
            if i == i0 or field.is_zero(A[i, j0]):
                continue
            self._apply(AddRow(i0, i, field.neg(A[i, j0])))

    def _eliminate_cols(self, i0: int, j0: int) -> None:
        """Normalize the pivot and clear the rest of row ``i0``."""
        field = self.field
        A = self._working.data

        a = A[i0, j0]
        if not field.is_one(a):
            self._apply(ScaleCol(j0, field.inv(a)))

        for j in range(self.ncols):
            if j == j0 or field.is_zero(A[i0, j]):
                continue
            self._apply(AddCol(j0, j, field.neg(A[i0, j])))

    def _apply(self, s: ElementaryStep) -> ElementaryStep:
        s.apply(self._working)
        self._steps.append(s)
        if self.debug:
            logger.debug("%s\n%s", s.describe(), self._working)
        return s

    def _require_started(self) -> None:
        if not self._started:
            raise EliminationStateError(
                "Eliminator has not run; call run() or step() first"
            )

    def result(self) -> FieldMatrix:
        self._require_started()
        return self._working.copy()

    def diagonal(self) -> list:
        self._require_started()
        return self._working.diagonal_entries()

    def steps(self) -> Tuple[ElementaryStep, ...]:
        self._require_started()
        return tuple(self._steps)

    def pivots(self) -> Tuple[Tuple[int, int], ...]:
        """Pivot positions, after relocation, in the order they were used."""
        self._require_started()
        return tuple(self._pivots)

    def rank(self) -> int:
        self._require_started()
        if self.mode is Mode.BOTH:
            is_zero = self.field.is_zero
            return sum(1 for x in self.diagonal() if not is_zero(x))
        return len(self._pivots)

    def left_transform(self) -> FieldMatrix:
        return left_transform(self.steps(), self.field, self.nrows)

    def right_transform(self) -> FieldMatrix:
        return right_transform(self.steps(), self.field, self.ncols)

    def left_inverse(self) -> FieldMatrix:
        return left_inverse(self.steps(), self.field, self.nrows)

    def right_inverse(self) -> FieldMatrix:
        return right_inverse(self.steps(), self.field, self.ncols)


@dataclass(frozen=True)
class EliminationResult:
    """Snapshot of a finished elimination run."""

    mode: Mode
    result: FieldMatrix
    diagonal: Tuple
    steps: Tuple[ElementaryStep, ...]
    rank: int
    pivots: Tuple[Tuple[int, int], ...]

    @property
    def field(self) -> Field:
        return self.result.field

    def left_transform(self) -> FieldMatrix:
        return left_transform(self.steps, self.field, self.result.nrows)

    def right_transform(self) -> FieldMatrix:
        return right_transform(self.steps, self.field, self.result.ncols)

    def left_inverse(self) -> FieldMatrix:
        return left_inverse(self.steps, self.field, self.result.nrows)

    def right_inverse(self) -> FieldMatrix:
        return right_inverse(self.steps, self.field, self.result.ncols)


def eliminate(matrix: FieldMatrix, mode: Mode = Mode.BOTH,
              debug: bool = False) -> EliminationResult:
    """Run a full elimination and return its result.

    Holds no state between calls, so independent matrices may be eliminated
    concurrently.
    """
    e = FieldEliminator(matrix, mode, debug).run()
    return EliminationResult(
        mode=mode,
        result=e.result(),
        diagonal=tuple(e.diagonal()),
        steps=e.steps(),
        rank=e.rank(),
        pivots=e.pivots(),
    )

"""Elementary row and column operations.

Every step is an immutable record that knows how to apply itself to a
:class:`~fieldelim.matrix.FieldMatrix` in place. Because steps carry no
reference to the matrix they were produced from, a recorded sequence can be
replayed against any matrix of compatible shape, in particular against an
identity matrix to recover the transformation it represents.

Row steps act by left multiplication and column steps by right
multiplication:

* ``SwapRows(i, j)``: exchange rows ``i`` and ``j``.
* ``ScaleRow(i, by)``: multiply row ``i`` by the nonzero scalar ``by``.
* ``AddRow(src, dst, mul)``: add ``mul`` times row ``src`` to row ``dst``.

and the ``*Col`` variants symmetrically.
"""

from dataclasses import dataclass
from typing import Any

from fieldelim.field import Field
from fieldelim.matrix import FieldMatrix


class ElementaryStep:
    """Base class for the closed set of elementary operations."""

    is_row_step = False

    @property
    def is_col_step(self) -> bool:
        return not self.is_row_step

    def apply(self, matrix: FieldMatrix) -> None:
        raise NotImplementedError

    def inverse(self, field: Field) -> "ElementaryStep":
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError


def _check_distinct(src: int, dst: int) -> None:
    if src == dst:
        raise ValueError(f"Source and target must differ, got {src} twice")


@dataclass(frozen=True)
class SwapRows(ElementaryStep):
    i: int
    j: int

    is_row_step = True

    def apply(self, matrix: FieldMatrix) -> None:
        matrix.swap_rows(self.i, self.j)

    def inverse(self, field: Field) -> "SwapRows":
        return self

    def describe(self) -> str:
        return f"R{self.i} <-> R{self.j}"


@dataclass(frozen=True)
class SwapCols(ElementaryStep):
    i: int
    j: int

    def apply(self, matrix: FieldMatrix) -> None:
        matrix.swap_cols(self.i, self.j)

    def inverse(self, field: Field) -> "SwapCols":
        return self

    def describe(self) -> str:
        return f"C{self.i} <-> C{self.j}"


@dataclass(frozen=True)
class ScaleRow(ElementaryStep):
    i: int
    by: Any

    is_row_step = True

    def __post_init__(self):
        if self.by == 0:
            raise ValueError("Scale factor must be nonzero")

    def apply(self, matrix: FieldMatrix) -> None:
        if matrix.field.is_zero(self.by):
            raise ValueError(f"Scale factor {self.by} is zero in {matrix.field!r}")
        matrix.scale_row(self.i, self.by)

    def inverse(self, field: Field) -> "ScaleRow":
        return ScaleRow(self.i, field.inv(self.by))

    def describe(self) -> str:
        return f"R{self.i} *= {self.by}"


@dataclass(frozen=True)
class ScaleCol(ElementaryStep):
    i: int
    by: Any

    def __post_init__(self):
        if self.by == 0:
            raise ValueError("Scale factor must be nonzero")

    def apply(self, matrix: FieldMatrix) -> None:
        if matrix.field.is_zero(self.by):
            raise ValueError(f"Scale factor {self.by} is zero in {matrix.field!r}")
        matrix.scale_col(self.i, self.by)

    def inverse(self, field: Field) -> "ScaleCol":
        return ScaleCol(self.i, field.inv(self.by))

    def describe(self) -> str:
        return f"C{self.i} *= {self.by}"


@dataclass(frozen=True)
class AddRow(ElementaryStep):
    src: int
    dst: int
    mul: Any

    is_row_step = True

    def __post_init__(self):
        _check_distinct(self.src, self.dst)

    def apply(self, matrix: FieldMatrix) -> None:
        matrix.add_row(self.src, self.dst, self.mul)

    def inverse(self, field: Field) -> "AddRow":
        return AddRow(self.src, self.dst, field.neg(self.mul))

    def describe(self) -> str:
        return f"R{self.dst} += {self.mul} * R{self.src}"


@dataclass(frozen=True)
class AddCol(ElementaryStep):
    src: int
    dst: int
    mul: Any

    def __post_init__(self):
        _check_distinct(self.src, self.dst)

    def apply(self, matrix: FieldMatrix) -> None:
        matrix.add_col(self.src, self.dst, self.mul)

    def inverse(self, field: Field) -> "AddCol":
        return AddCol(self.src, self.dst, field.neg(self.mul))

    def describe(self) -> str:
        return f"C{self.dst} += {self.mul} * C{self.src}"

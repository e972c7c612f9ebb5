from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from fieldelim.field import Field


def _empty(nrows: int, ncols: int) -> np.ndarray:
    return np.empty((nrows, ncols), dtype=object)


@dataclass(eq=False)
class FieldMatrix:
    field: Field
    data: np.ndarray

    def __post_init__(self):
        data = self.data
        if not isinstance(data, np.ndarray) or data.ndim != 2:
            rows = [list(row) for row in data]
            ncols = len(rows[0]) if rows else 0
            for row in rows:
                if len(row) != ncols:
                    raise ValueError("All rows must have the same length")
            arr = _empty(len(rows), ncols)
            for i, row in enumerate(rows):
                for j, x in enumerate(row):
                    arr[i, j] = x
            data = arr
        elif data.dtype != object:
            data = data.astype(object)
        normalize = self.field.normalize
        out = _empty(*data.shape)
        for i in range(data.shape[0]):
            for j in range(data.shape[1]):
                out[i, j] = normalize(data[i, j])
        self.data = out

    @property
    def nrows(self) -> int:
        return self.data.shape[0]

    @property
    def ncols(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.nrows, self.ncols

    @classmethod
    def from_rows(cls, field: Field, rows: Sequence[Sequence],
                  ncols: Optional[int] = None) -> "FieldMatrix":
        """Build a matrix from nested sequences.

        ``ncols`` is only needed to give a matrix without rows its width.
        """
        rows = [list(row) for row in rows]
        if not rows:
            return cls(field, _empty(0, ncols or 0))
        if ncols is not None and any(len(row) != ncols for row in rows):
            raise ValueError(f"Expected rows of length {ncols}")
        return cls(field, rows)

    @classmethod
    def zeros(cls, field: Field, nrows: int, ncols: int) -> "FieldMatrix":
        data = _empty(nrows, ncols)
        data.fill(field.zero)
        return cls(field, data)

    @classmethod
    def identity(cls, field: Field, n: int) -> "FieldMatrix":
        M = cls.zeros(field, n, n)
        for i in range(n):
            M.data[i, i] = field.one
        return M

    @classmethod
    def diagonal(cls, field: Field, entries: Iterable,
                 nrows: Optional[int] = None,
                 ncols: Optional[int] = None) -> "FieldMatrix":
        entries = list(entries)
        nrows = len(entries) if nrows is None else nrows
        ncols = len(entries) if ncols is None else ncols
        if len(entries) > min(nrows, ncols):
            raise ValueError("Too many diagonal entries for the requested shape")
        M = cls.zeros(field, nrows, ncols)
        for i, v in enumerate(entries):
            M.data[i, i] = field.normalize(v)
        return M

    @classmethod
    def column_vector(cls, field: Field, entries: Iterable) -> "FieldMatrix":
        return cls.from_rows(field, [[x] for x in entries], ncols=1)

    def copy(self) -> "FieldMatrix":
        return FieldMatrix(self.field, self.data.copy())

    def transpose(self) -> "FieldMatrix":
        return FieldMatrix(self.field, self.data.T.copy())

    def tolist(self) -> List[list]:
        return self.data.tolist()

    def row(self, i: int) -> "FieldMatrix":
        return self.submatrix(i, i + 1, 0, self.ncols)

    def column(self, j: int) -> "FieldMatrix":
        return self.submatrix(0, self.nrows, j, j + 1)

    def submatrix(self, row_start: int, row_end: int,
                  col_start: int, col_end: int) -> "FieldMatrix":
        """Copy of rows [row_start:row_end) and cols [col_start:col_end)."""
        return FieldMatrix(
            self.field, self.data[row_start:row_end, col_start:col_end].copy()
        )

    def hstack(self, other: "FieldMatrix") -> "FieldMatrix":
        if self.field != other.field:
            raise ValueError("Cannot stack matrices over different fields")
        if self.nrows != other.nrows:
            raise ValueError(f"Row count mismatch: {self.nrows} != {other.nrows}")
        return FieldMatrix(self.field, np.hstack([self.data, other.data]))

    def diagonal_entries(self) -> list:
        return [self.data[i, i] for i in range(min(self.nrows, self.ncols))]

    def is_zero_matrix(self) -> bool:
        is_zero = self.field.is_zero
        return all(is_zero(x) for x in self.data.flat)

    def __eq__(self, other):
        if not isinstance(other, FieldMatrix):
            return NotImplemented
        return (
            self.field == other.field
            and self.shape == other.shape
            and bool(np.array_equal(self.data, other.data))
        )

    def __matmul__(self, other: "FieldMatrix") -> "FieldMatrix":
        if self.field != other.field:
            raise ValueError("Cannot multiply matrices over different fields")

        rA, cA = self.shape
        rB, cB = other.shape
        if cA != rB:
            raise ValueError(f"Dimension mismatch: {cA} != {rB}")

        field = self.field
        A = self.data
        B = other.data

        C = _empty(rA, cB)
        C.fill(field.zero)

        for i in range(rA):
            for k in range(cA):
                aik = A[i, k]
                if field.is_zero(aik):
                    continue
                for j in range(cB):
                    C[i, j] = C[i, j] + aik * B[k, j]
        return FieldMatrix(field, field.reduce_array(C))

    # In-place elementary operations. Indices are checked explicitly since
    # numpy would silently wrap negative ones.

    def _check_row(self, i: int) -> None:
        if not 0 <= i < self.nrows:
            raise IndexError(f"Row index {i} out of range for {self.nrows} rows")

    def _check_col(self, j: int) -> None:
        if not 0 <= j < self.ncols:
            raise IndexError(f"Column index {j} out of range for {self.ncols} columns")

    def swap_rows(self, i: int, j: int) -> None:
        self._check_row(i)
        self._check_row(j)
        self.data[[i, j], :] = self.data[[j, i], :]

    def swap_cols(self, i: int, j: int) -> None:
        self._check_col(i)
        self._check_col(j)
        self.data[:, [i, j]] = self.data[:, [j, i]]

    def scale_row(self, i: int, k) -> None:
        self._check_row(i)
        k = self.field.normalize(k)
        self.data[i, :] = self.field.reduce_array(self.data[i, :] * k)

    def scale_col(self, j: int, k) -> None:
        self._check_col(j)
        k = self.field.normalize(k)
        self.data[:, j] = self.field.reduce_array(self.data[:, j] * k)

    def add_row(self, src: int, dst: int, k) -> None:
        """In-place: row_dst <- row_dst + k * row_src."""
        self._check_row(src)
        self._check_row(dst)
        k = self.field.normalize(k)
        self.data[dst, :] = self.field.reduce_array(
            self.data[dst, :] + k * self.data[src, :]
        )

    def add_col(self, src: int, dst: int, k) -> None:
        """In-place: col_dst <- col_dst + k * col_src."""
        self._check_col(src)
        self._check_col(dst)
        k = self.field.normalize(k)
        self.data[:, dst] = self.field.reduce_array(
            self.data[:, dst] + k * self.data[:, src]
        )

    def to_sympy(self):
        import sympy as sp
        return sp.Matrix(self.nrows, self.ncols, self.data.flatten().tolist())

    def pprint(self):
        from sympy import pprint
        pprint(self.to_sympy())

    def __str__(self):
        rows = ["[" + ", ".join(str(x) for x in row) + "]" for row in self.tolist()]
        return "[" + ",\n ".join(rows) + "]"

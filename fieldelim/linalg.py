from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .eliminator import EliminationResult, Mode, eliminate
from .field import QQ, Field
from .matrix import FieldMatrix
from .steps import ScaleCol, ScaleRow, SwapCols, SwapRows


@dataclass
class DiagonalForm:
    """Plain-list view of ``D = P @ A @ Q``."""

    P: List[list]
    Q: List[list]
    D: List[list]
    rank: int


def diagonalize(A: FieldMatrix) -> Tuple[FieldMatrix, FieldMatrix, FieldMatrix]:
    """
    Diagonal form of A over its field.

    Returns (P, Q, D) with D = P * A * Q, where D is diag(1, ..., 1, 0, ..., 0)
    padded with zeros to the shape of A. P and Q are invertible.
    """
    res = eliminate(A, Mode.BOTH)
    return res.left_transform(), res.right_transform(), res.result


def diagonal_form(matrix: Sequence[Sequence], field: Field = QQ) -> DiagonalForm:
    """
    List-in / list-out front-end to :func:`diagonalize`.

    Entries are converted with ``field.normalize``; the returned lists hold
    field elements.
    """
    ncols = len(matrix[0]) if matrix else 0
    A = FieldMatrix.from_rows(field, matrix, ncols=ncols)
    res = eliminate(A, Mode.BOTH)
    return DiagonalForm(
        P=res.left_transform().tolist(),
        Q=res.right_transform().tolist(),
        D=res.result.tolist(),
        rank=res.rank,
    )


def rank(A: FieldMatrix) -> int:
    return eliminate(A, Mode.BOTH).rank


def nullity(A: FieldMatrix) -> int:
    return A.ncols - rank(A)


def kernel(A: FieldMatrix) -> List[FieldMatrix]:
    """
    Basis of {x : A x = 0} as column vectors.

    From P A Q = D, x is in the kernel iff Q^-1 x vanishes in its first
    `rank` coordinates, so the trailing columns of Q span the kernel.
    """
    res = eliminate(A, Mode.BOTH)
    Q = res.right_transform()
    return [Q.column(j) for j in range(res.rank, A.ncols)]


def image(A: FieldMatrix) -> List[FieldMatrix]:
    """
    Basis of the column space of A as column vectors.

    A Q = P^-1 D, so the leading `rank` columns of P^-1 span the image.
    """
    res = eliminate(A, Mode.BOTH)
    P_inv = res.left_inverse()
    return [P_inv.column(i) for i in range(res.rank)]


def solve(A: FieldMatrix, b: FieldMatrix) -> Optional[FieldMatrix]:
    """
    One solution x of A x = b, or None if the system is inconsistent.

    b must be a column vector with A.nrows entries.
    """
    if b.shape != (A.nrows, 1):
        raise ValueError(f"Expected a {A.nrows}x1 right-hand side, got {b.shape}")
    if A.field != b.field:
        raise ValueError("Matrix and right-hand side live over different fields")

    field = A.field
    res = eliminate(A, Mode.BOTH)
    c = res.left_transform() @ b

    for i in range(res.rank, A.nrows):
        if not field.is_zero(c.data[i, 0]):
            return None

    y = FieldMatrix.zeros(field, A.ncols, 1)
    for i in range(res.rank):
        y.data[i, 0] = c.data[i, 0]
    return res.right_transform() @ y


def inverse(A: FieldMatrix) -> FieldMatrix:
    """Inverse of a square matrix: P A Q = I gives A^-1 = Q P."""
    if A.nrows != A.ncols:
        raise ValueError("Only square matrices can be inverted")
    res = eliminate(A, Mode.BOTH)
    if res.rank != A.nrows:
        raise ValueError(f"Matrix is singular (rank {res.rank} < {A.nrows})")
    return res.right_transform() @ res.left_transform()


def determinant(A: FieldMatrix):
    """Determinant read off the step log of a full elimination."""
    if A.nrows != A.ncols:
        raise ValueError("Determinant requires a square matrix")
    res = eliminate(A, Mode.BOTH)
    return _determinant_from_log(res, A.field)


def _determinant_from_log(res: EliminationResult, field: Field):
    n = res.result.nrows
    if res.rank < n:
        return field.zero
    # det(P) det(A) det(Q) = det(I); additions have determinant one.
    det = field.one
    for s in res.steps:
        if isinstance(s, (SwapRows, SwapCols)):
            det = field.neg(det)
        elif isinstance(s, (ScaleRow, ScaleCol)):
            det = field.div(det, s.by)
    return det

import random
from itertools import combinations

import numpy as np

from fieldelim.field import Field, PrimeField
from fieldelim.homology import ChainComplex
from fieldelim.matrix import FieldMatrix


def make_random_matrix(field: Field, nrows: int, ncols: int,
                       low: int = -4, high: int = 4) -> FieldMatrix:
    """Random matrix; entries are drawn from [low, high] or all of F_p."""
    if isinstance(field, PrimeField):
        low, high = 0, field.p - 1
    data = [
        [random.randint(low, high) for _ in range(ncols)]
        for _ in range(nrows)
    ]
    return FieldMatrix.from_rows(field, data, ncols=ncols)


def make_low_rank_matrix(field: Field, nrows: int, ncols: int,
                         rank: int) -> FieldMatrix:
    """Product of random (nrows x rank) and (rank x ncols) factors."""
    L = make_random_matrix(field, nrows, rank)
    R = make_random_matrix(field, rank, ncols)
    return L @ R


def det_field_matrix(M: FieldMatrix):
    """
    Naive Laplace-expansion determinant for small square matrices.
    """
    field = M.field
    n = M.nrows
    assert n == M.ncols

    if n == 0:
        return field.one
    if n == 1:
        return M.data[0, 0]

    det = field.zero
    for j in range(n):
        sub = FieldMatrix(field, np.delete(M.data[1:, :], j, axis=1))
        term = field.mul(M.data[0, j], det_field_matrix(sub))
        if j % 2 == 0:
            det = field.add(det, term)
        else:
            det = field.sub(det, term)
    return det


def minor_rank(M: FieldMatrix) -> int:
    """
    Rank as the size of the largest nonzero minor. Only for small matrices.
    """
    field = M.field
    for k in range(min(M.nrows, M.ncols), 0, -1):
        for rows in combinations(range(M.nrows), k):
            for cols in combinations(range(M.ncols), k):
                sub = FieldMatrix(field, M.data[np.ix_(rows, cols)])
                if not field.is_zero(det_field_matrix(sub)):
                    return k
    return 0


def verify_reduced_row_echelon(T: FieldMatrix) -> bool:
    """
    Check:
    - For each non-zero row, the first non-zero column index strictly increases.
    - Once a zero row appears, all later rows are zero.
    - Every pivot is one and is the only nonzero entry of its column.
    """
    field = T.field
    nrows, ncols = T.shape
    last_pivot_col = -1
    zero_row_seen = False

    for r in range(nrows):
        row = T.data[r]
        pivot_col = -1
        for c in range(ncols):
            if not field.is_zero(row[c]):
                pivot_col = c
                break

        if pivot_col == -1:
            zero_row_seen = True
            continue

        if zero_row_seen or pivot_col <= last_pivot_col:
            return False
        if not field.is_one(row[pivot_col]):
            return False
        for rr in range(nrows):
            if rr != r and not field.is_zero(T.data[rr, pivot_col]):
                return False
        last_pivot_col = pivot_col

    return True


def is_canonical_diagonal(D: FieldMatrix, rank: int) -> bool:
    """diag(1, ..., 1, 0, ..., 0) with ``rank`` leading ones."""
    field = D.field
    for i in range(D.nrows):
        for j in range(D.ncols):
            x = D.data[i, j]
            if i == j and i < rank:
                if not field.is_one(x):
                    return False
            elif not field.is_zero(x):
                return False
    return True


def hstack_columns(field: Field, nrows: int, columns) -> FieldMatrix:
    M = FieldMatrix.zeros(field, nrows, 0)
    for c in columns:
        M = M.hstack(c)
    return M


def simplicial_complex(field: Field, top_simplices):
    """Chain complex of the simplicial complex generated by ``top_simplices``.

    Simplices are sorted tuples of vertices; each degree lists its simplices
    in lexicographic order, which fixes the basis used by the differentials.
    """
    simplices = set()
    for s in top_simplices:
        for k in range(1, len(s) + 1):
            simplices.update(combinations(sorted(s), k))

    by_dim = {}
    for s in simplices:
        by_dim.setdefault(len(s) - 1, []).append(s)
    for faces in by_dim.values():
        faces.sort()

    dims = {i: len(faces) for i, faces in by_dim.items()}
    differentials = {}
    for i in range(1, max(by_dim) + 1):
        index = {s: r for r, s in enumerate(by_dim[i - 1])}
        d = FieldMatrix.zeros(field, dims[i - 1], dims[i])
        for c, s in enumerate(by_dim[i]):
            for k in range(len(s)):
                face = s[:k] + s[k + 1:]
                d.data[index[face], c] = field.normalize((-1) ** k)
        differentials[i] = d
    return ChainComplex(field, dims, differentials)

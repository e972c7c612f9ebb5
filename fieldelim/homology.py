"""Chain complexes of finite-dimensional vector spaces and their homology.

A complex is given by the dimensions ``dims[i] = dim C_i`` and the matrices of
the differentials ``d_i: C_i -> C_{i-1}``, each of shape
``(dims[i-1], dims[i])``. Differentials that are not given are zero maps.

Over a field the homology is determined by ranks alone::

    dim H_i = dim C_i - rank d_i - rank d_{i+1}

Each rank is an independent elimination run, so
:meth:`ChainComplex.differential_ranks` dispatches them to a thread pool.

A :class:`ChainMap` is a family of matrices ``f_i: C_i -> D_{i+k}``
commuting with the differentials. Its induced map on homology is computed
by expressing the image of each generator in the target's homology basis.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field as dc_field
from typing import Dict, List, Mapping, Optional

from .eliminator import Mode, eliminate
from .field import Field
from .linalg import solve
from .matrix import FieldMatrix

logger = logging.getLogger(__name__)


@dataclass
class HomologyGroup:
    field: Field
    degree: int
    dimension: int
    generators: List[FieldMatrix] = dc_field(default_factory=list)
    boundaries: Optional[FieldMatrix] = None

    @property
    def is_zero(self) -> bool:
        return self.dimension == 0

    def vectorize(self, z: FieldMatrix) -> FieldMatrix:
        """Coordinates of the class of the cycle ``z`` in the generator basis.

        The generators together with the columns of ``boundaries`` span the
        cycles, and the generators are independent modulo the boundaries, so
        the generator part of any solution is unique.

        Raises:
            ValueError: ``z`` has the wrong shape or is not a cycle, or the
                group was built without its boundary matrix.
        """
        if self.boundaries is None:
            raise ValueError(f"H_{self.degree} has no boundary matrix attached")
        n = self.boundaries.nrows
        if z.shape != (n, 1):
            raise ValueError(f"Expected a {n}x1 chain, got {z.shape}")

        M = FieldMatrix.zeros(self.field, n, 0)
        for g in self.generators:
            M = M.hstack(g)
        M = M.hstack(self.boundaries)

        x = solve(M, z)
        if x is None:
            raise ValueError(f"not a cycle in degree {self.degree}")
        return x.submatrix(0, self.dimension, 0, 1)

    def __str__(self):
        if self.dimension == 0:
            return "0"
        return f"{self.field.symbol}^{self.dimension}"


class ChainComplex:
    def __init__(self, field: Field, dims: Mapping[int, int],
                 differentials: Optional[Mapping[int, FieldMatrix]] = None):
        self.field = field
        self.dims: Dict[int, int] = dict(dims)
        self._d: Dict[int, FieldMatrix] = {}

        for i, d in (differentials or {}).items():
            expected = (self.dim(i - 1), self.dim(i))
            if d.shape != expected:
                raise ValueError(
                    f"d_{i} has shape {d.shape}, expected {expected}"
                )
            if d.field != field:
                raise ValueError(f"d_{i} is not defined over {field!r}")
            self._d[i] = d

    @property
    def degrees(self) -> List[int]:
        return sorted(self.dims)

    def dim(self, i: int) -> int:
        return self.dims.get(i, 0)

    def differential(self, i: int) -> FieldMatrix:
        """Matrix of d_i: C_i -> C_{i-1}, the zero map when none was given."""
        if i in self._d:
            return self._d[i]
        return FieldMatrix.zeros(self.field, self.dim(i - 1), self.dim(i))

    def shifted(self, k: int) -> "ChainComplex":
        """The complex with ``C'_{i+k} = C_i`` and the same differentials."""
        return ChainComplex(
            self.field,
            {i + k: n for i, n in self.dims.items()},
            {i + k: d for i, d in self._d.items()},
        )

    def dual(self) -> "ChainComplex":
        """Dual complex, reindexed so it is again a chain complex.

        ``C*_{-i}`` is the dual of ``C_i`` and the differential
        ``C*_{1-i} -> C*_{-i}`` is the transpose of ``d_i``.
        """
        return ChainComplex(
            self.field,
            {-i: n for i, n in self.dims.items()},
            {1 - i: d.transpose() for i, d in self._d.items()},
        )

    def is_chain_complex(self) -> bool:
        for i in self.degrees:
            dd = self.differential(i - 1) @ self.differential(i)
            if not dd.is_zero_matrix():
                logger.debug("d_%d d_%d is nonzero", i - 1, i)
                return False
        return True

    def differential_ranks(self, max_workers: Optional[int] = None) -> Dict[int, int]:
        """Rank of every given differential, keyed by degree."""
        degrees = sorted(self._d)

        def _rank(i):
            r = eliminate(self._d[i], Mode.BOTH).rank
            logger.debug("rank d_%d = %d", i, r)
            return r

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            ranks = list(pool.map(_rank, degrees))
        return dict(zip(degrees, ranks))

    def betti_numbers(self, max_workers: Optional[int] = None) -> Dict[int, int]:
        ranks = self.differential_ranks(max_workers)
        return {
            i: self.dim(i) - ranks.get(i, 0) - ranks.get(i + 1, 0)
            for i in self.degrees
        }

    def homology(self, i: int) -> HomologyGroup:
        """H_i with cycle representatives of a basis.

        The cycles are the kernel of d_i. A cycle is kept as a generator when
        it raises the rank of (boundaries | chosen generators), so the kept
        cycles are independent modulo the image of d_{i+1}.
        """
        field = self.field
        n = self.dim(i)

        res = eliminate(self.differential(i), Mode.BOTH)
        Q = res.right_transform()
        cycles = [Q.column(j) for j in range(res.rank, n)]

        boundaries = self.differential(i + 1)
        span = boundaries
        current = eliminate(span, Mode.BOTH).rank
        generators = []
        for z in cycles:
            candidate = span.hstack(z)
            r = eliminate(candidate, Mode.BOTH).rank
            if r > current:
                span, current = candidate, r
                generators.append(z)

        logger.debug("H_%d has dimension %d", i, len(generators))
        return HomologyGroup(field, i, len(generators), generators, boundaries)

    def __str__(self):
        parts = [f"C_{i}: {self.field.symbol}^{self.dim(i)}" for i in self.degrees]
        return ", ".join(parts)


class ChainMap:
    """Degree-``k`` map ``f_i: C_i -> D_{i+k}`` between two complexes.

    ``maps[i]`` has shape ``(target.dim(i + k), source.dim(i))``; missing
    components are zero maps.
    """

    def __init__(self, source: ChainComplex, target: ChainComplex,
                 maps: Optional[Mapping[int, FieldMatrix]] = None,
                 degree: int = 0):
        if source.field != target.field:
            raise ValueError("Source and target complexes use different fields")
        self.source = source
        self.target = target
        self.degree = degree
        self.field = source.field
        self._f: Dict[int, FieldMatrix] = {}

        for i, f in (maps or {}).items():
            expected = (target.dim(i + degree), source.dim(i))
            if f.shape != expected:
                raise ValueError(
                    f"f_{i} has shape {f.shape}, expected {expected}"
                )
            if f.field != self.field:
                raise ValueError(f"f_{i} is not defined over {self.field!r}")
            self._f[i] = f

    def matrix(self, i: int) -> FieldMatrix:
        """Matrix of f_i: C_i -> D_{i+k}."""
        if i in self._f:
            return self._f[i]
        return FieldMatrix.zeros(
            self.field, self.target.dim(i + self.degree), self.source.dim(i)
        )

    def is_chain_map(self) -> bool:
        """Check ``d'_{i+k} f_i == f_{i-1} d_i`` in every source degree."""
        k = self.degree
        for i in self.source.degrees:
            lhs = self.target.differential(i + k) @ self.matrix(i)
            rhs = self.matrix(i - 1) @ self.source.differential(i)
            if lhs != rhs:
                logger.debug("f does not commute with d in degree %d", i)
                return False
        return True

    def shifted(self, k: int) -> "ChainMap":
        return ChainMap(
            self.source.shifted(k),
            self.target.shifted(k),
            {i + k: f for i, f in self._f.items()},
            self.degree,
        )

    def dual(self) -> "ChainMap":
        """Transpose map between the dual complexes, ``D* -> C*``."""
        k = self.degree
        return ChainMap(
            self.target.dual(),
            self.source.dual(),
            {-(i + k): f.transpose() for i, f in self._f.items()},
            k,
        )

    def induced(self, i: int,
                source_homology: Optional[HomologyGroup] = None,
                target_homology: Optional[HomologyGroup] = None) -> FieldMatrix:
        """Matrix of ``H_i(C) -> H_{i+k}(D)`` in the generator bases.

        Precomputed homology groups may be passed to keep the bases fixed
        across several calls.
        """
        H = source_homology or self.source.homology(i)
        K = target_homology or self.target.homology(i + self.degree)

        f = self.matrix(i)
        M = FieldMatrix.zeros(self.field, K.dimension, 0)
        for z in H.generators:
            M = M.hstack(K.vectorize(f @ z))
        return M

"""Exact sequences of finite-dimensional vector spaces.

An :class:`ExactSequence` models ``0 -> V_0 -> V_1 -> ... -> V_{n-1} -> 0``
where some dimensions and maps may be unknown. Exactness at ``V_k`` means
``rank f_{k-1} + rank f_k == dim V_k``, which lets unknown ranks and
dimensions be deduced from the known ones.

:class:`HomologySequence` lays out the long exact homology sequence of
``0 -> A -> B -> C -> 0`` on top of it, filling objects and maps from the
chain complexes on demand.
"""

import logging
from typing import Dict, List, Optional, Sequence

from .eliminator import Mode, eliminate
from .field import Field
from .homology import ChainMap, HomologyGroup
from .matrix import FieldMatrix

logger = logging.getLogger(__name__)


class ExactSequence:
    def __init__(self, field: Field, dims: Sequence[Optional[int]],
                 maps: Optional[Dict[int, FieldMatrix]] = None):
        self.field = field
        self.length = len(dims)
        self._dims: Dict[int, int] = {}
        self._maps: Dict[int, FieldMatrix] = {}
        self._ranks: Dict[int, int] = {}

        for k, d in enumerate(dims):
            if d is not None:
                self.set_object(k, d)
        for k, f in (maps or {}).items():
            self.set_map(k, f)

    def _check_object_index(self, k: int) -> None:
        if not 0 <= k < self.length:
            raise IndexError(f"object index {k} out of range [0, {self.length})")

    def _check_map_index(self, k: int) -> None:
        if not 0 <= k < self.length - 1:
            raise IndexError(f"map index {k} out of range [0, {self.length - 1})")

    def set_object(self, k: int, dim: int) -> None:
        self._check_object_index(k)
        if dim < 0:
            raise ValueError(f"dimension must be non-negative, got {dim}")
        self._dims[k] = dim

    def set_map(self, k: int, f: FieldMatrix) -> None:
        """Record the matrix of ``f_k: V_k -> V_{k+1}``.

        Both endpoint dimensions must already be known.
        """
        self._check_map_index(k)
        src, dst = self.dim(k), self.dim(k + 1)
        if src is None or dst is None:
            raise ValueError(f"f_{k} needs the dimensions of V_{k} and V_{k + 1}")
        if f.shape != (dst, src):
            raise ValueError(f"f_{k} has shape {f.shape}, expected {(dst, src)}")
        if f.field != self.field:
            raise ValueError(f"f_{k} is not defined over {self.field!r}")
        self._maps[k] = f
        self._ranks[k] = eliminate(f, Mode.BOTH).rank

    def dim(self, k: int) -> Optional[int]:
        """Dimension of V_k; the zero space outside the sequence, None if unknown."""
        if k < 0 or k >= self.length:
            return 0
        return self._dims.get(k)

    def map(self, k: int) -> Optional[FieldMatrix]:
        """Matrix of f_k. The maps out of and into the outer zeros are zero maps."""
        if k < 0 or k >= self.length - 1:
            src, dst = self.dim(k), self.dim(k + 1)
            if src is None or dst is None:
                return None
            return FieldMatrix.zeros(self.field, dst, src)
        return self._maps.get(k)

    def _known_rank(self, k: int) -> Optional[int]:
        if k < 0 or k >= self.length - 1:
            return 0
        if k in self._ranks:
            return self._ranks[k]
        if self.dim(k) == 0 or self.dim(k + 1) == 0:
            return 0
        return None

    def _rank_from_left(self, k: int) -> Optional[int]:
        r = self._known_rank(k)
        if r is not None:
            return r
        d = self.dim(k)
        if d is None:
            return None
        prev = self._rank_from_left(k - 1)
        return None if prev is None else d - prev

    def _rank_from_right(self, k: int) -> Optional[int]:
        r = self._known_rank(k)
        if r is not None:
            return r
        d = self.dim(k + 1)
        if d is None:
            return None
        nxt = self._rank_from_right(k + 1)
        return None if nxt is None else d - nxt

    def rank(self, k: int) -> Optional[int]:
        """Rank of f_k, computed from its matrix or deduced by exactness.

        Returns None when neither is possible.
        """
        r = self._rank_from_left(k)
        if r is None:
            r = self._rank_from_right(k)
        return r

    def _require(self, value, what: str):
        if value is None:
            raise ValueError(f"{what} cannot be determined")
        return value

    def is_zero_map(self, k: int) -> bool:
        return self._require(self.rank(k), f"rank of f_{k}") == 0

    def is_injective(self, k: int) -> bool:
        r = self._require(self.rank(k), f"rank of f_{k}")
        return r == self._require(self.dim(k), f"dim V_{k}")

    def is_surjective(self, k: int) -> bool:
        r = self._require(self.rank(k), f"rank of f_{k}")
        return r == self._require(self.dim(k + 1), f"dim V_{k + 1}")

    def is_isomorphic(self, k: int) -> bool:
        return self.is_injective(k) and self.is_surjective(k)

    def solve(self, k: int) -> Optional[int]:
        """Deduce ``dim V_k = rank f_{k-1} + rank f_k``; None if undeterminable."""
        self._check_object_index(k)
        d = self.dim(k)
        if d is not None:
            return d

        before, after = self.rank(k - 1), self.rank(k)
        if before is None or after is None:
            return None
        d = before + after
        logger.debug("dim V_%d = %d deduced by exactness", k, d)
        self._dims[k] = d
        return d

    def solve_all(self) -> List[Optional[int]]:
        """Deduce unknown dimensions until no more progress is made."""
        progress = True
        while progress:
            progress = False
            for k in range(self.length):
                if k not in self._dims and self.solve(k) is not None:
                    progress = True
        return [self.dim(k) for k in range(self.length)]

    def is_exact_at(self, k: int) -> bool:
        """Check ``im f_{k-1} == ker f_k`` from the matrices.

        Raises ValueError when a dimension or a neighbouring map is unknown.
        """
        self._check_object_index(k)
        d = self._require(self.dim(k), f"dim V_{k}")
        f = self._require(self.map(k - 1), f"f_{k - 1}")
        g = self._require(self.map(k), f"f_{k}")

        if not (g @ f).is_zero_matrix():
            logger.debug("f_%d f_%d is nonzero", k, k - 1)
            return False
        return self._known_rank(k - 1) + self._known_rank(k) == d

    def is_exact(self) -> bool:
        return all(self.is_exact_at(k) for k in range(self.length))

    def describe_object(self, k: int) -> str:
        d = self.dim(k)
        if d is None:
            return "?"
        if d == 0:
            return "0"
        return f"{self.field.symbol}^{d}"

    def __str__(self):
        objects = [self.describe_object(k) for k in range(self.length)]
        return " -> ".join(["0"] + objects + ["0"])


class HomologySequence:
    """Long exact sequence of ``0 -> A -f0-> B -f1-> C -> 0`` in homology.

    Objects are laid out in descending degree::

        H_n(A) -> H_n(B) -> H_n(C) -> H_{n-1}(A) -> ...

    Column ``i`` is 0 for ``A``, 1 for ``B`` and 2 for ``C``. The connecting
    map ``H_n(C) -> H_{n-1}(A)`` is supplied as a degree -1 chain map; when
    it is omitted those maps stay unknown and only ranks deduced by exactness
    are available for them.
    """

    def __init__(self, f0: ChainMap, f1: ChainMap,
                 connecting: Optional[ChainMap] = None):
        if f0.degree != 0 or f1.degree != 0:
            raise ValueError("f0 and f1 must have degree 0")
        if f0.target is not f1.source:
            raise ValueError("f1 must start where f0 ends")
        if connecting is not None:
            if connecting.degree != -1:
                raise ValueError("The connecting map must have degree -1")
            if connecting.source is not f1.target or connecting.target is not f0.source:
                raise ValueError("The connecting map must go from C to A")

        self.maps = (f0, f1, connecting)
        self.complexes = (f0.source, f0.target, f1.target)
        degrees = [i for C in self.complexes for i in C.degrees] or [0]
        self.top = max(degrees)
        self.bottom = min(degrees)
        self.sequence = ExactSequence(
            f0.field, [None] * ((self.top - self.bottom + 1) * 3)
        )
        self._homology: Dict[int, HomologyGroup] = {}

    def index(self, n: int, i: int) -> int:
        if not 0 <= i < 3:
            raise IndexError(f"column {i} out of range [0, 3)")
        return (self.top - n) * 3 + i

    def position(self, k: int):
        return self.top - k // 3, k % 3

    def homology(self, n: int, i: int) -> HomologyGroup:
        k = self.index(n, i)
        if k not in self._homology:
            self._homology[k] = self.complexes[i].homology(n)
        return self._homology[k]

    def _fill_map(self, k: int) -> None:
        n, i = self.position(k)
        f = self.maps[i]
        if f is None:
            return
        next_n, next_i = self.position(k + 1)
        matrix = f.induced(n, self.homology(n, i), self.homology(next_n, next_i))
        self.sequence.set_map(k, matrix)

    def fill(self, n: int, i: int) -> None:
        """Compute the object at (n, i) and any map to an already filled neighbour."""
        k = self.index(n, i)
        self.sequence.set_object(k, self.homology(n, i).dimension)

        seq = self.sequence
        if k > 0 and seq.dim(k - 1) is not None and seq.map(k - 1) is None:
            self._fill_map(k - 1)
        if k < seq.length - 1 and seq.dim(k + 1) is not None and seq.map(k) is None:
            self._fill_map(k)

    def fill_columns(self, *columns: int) -> None:
        for i in columns:
            for n in range(self.bottom, self.top + 1):
                self.fill(n, i)

    def dim(self, n: int, i: int) -> Optional[int]:
        return self.sequence.dim(self.index(n, i))

    def solve(self, n: int, i: int) -> Optional[int]:
        return self.sequence.solve(self.index(n, i))

    def solve_all(self) -> None:
        self.sequence.solve_all()

    def is_zero_map(self, n: int, i: int) -> bool:
        return self.sequence.is_zero_map(self.index(n, i))

    def is_injective(self, n: int, i: int) -> bool:
        return self.sequence.is_injective(self.index(n, i))

    def is_surjective(self, n: int, i: int) -> bool:
        return self.sequence.is_surjective(self.index(n, i))

    def is_isomorphic(self, n: int, i: int) -> bool:
        return self.sequence.is_isomorphic(self.index(n, i))

    def is_exact_at(self, n: int, i: int) -> bool:
        return self.sequence.is_exact_at(self.index(n, i))

    def is_exact(self) -> bool:
        return self.sequence.is_exact()

    def __str__(self):
        lines = ["n\tA\tB\tC"]
        for n in range(self.top, self.bottom - 1, -1):
            cells = [self.sequence.describe_object(self.index(n, i)) for i in range(3)]
            lines.append("\t".join([str(n)] + cells))
        return "\n".join(lines)

"""Field arithmetic contexts used by matrices and the elimination engine.

A field object carries the arithmetic; elements themselves are plain Python
values (``Fraction`` for the rationals, ``int`` for prime fields). Every
matrix holds a reference to its field.
"""

import numbers
from fractions import Fraction

import numpy as np
from sympy import isprime


class Field:
    """Capability set required by the elimination engine.

    Subclasses provide ``normalize``, ``inv`` and the identities; the derived
    operations below are expressed in terms of Python's numeric operators and
    ``normalize``.
    """

    symbol = "K"

    @property
    def zero(self):
        return self.normalize(0)

    @property
    def one(self):
        return self.normalize(1)

    def normalize(self, a):
        raise NotImplementedError

    def inv(self, a):
        raise NotImplementedError

    def add(self, a, b):
        return self.normalize(a + b)

    def sub(self, a, b):
        return self.normalize(a - b)

    def mul(self, a, b):
        return self.normalize(a * b)

    def neg(self, a):
        return self.normalize(-a)

    def div(self, a, b):
        return self.mul(a, self.inv(b))

    def is_zero(self, a) -> bool:
        return self.normalize(a) == 0

    def is_one(self, a) -> bool:
        return self.normalize(a) == 1

    def reduce_array(self, arr: np.ndarray) -> np.ndarray:
        """Canonicalize a 1-D or 2-D object array after a vectorized update."""
        return arr

    def __repr__(self):
        return f"{type(self).__name__}()"


class RationalField(Field):
    """The rational numbers, with ``Fraction`` elements."""

    symbol = "Q"

    def normalize(self, a):
        if isinstance(a, Fraction):
            return a
        return Fraction(a)

    def inv(self, a):
        a = self.normalize(a)
        if a == 0:
            raise ZeroDivisionError("0 has no inverse in Q")
        return 1 / a

    def __eq__(self, other):
        return isinstance(other, RationalField)

    def __hash__(self):
        return hash(RationalField)


class PrimeField(Field):
    """Integers modulo a prime ``p``."""

    def __init__(self, p: int):
        if not isinstance(p, int):
            raise TypeError("p must be an integer")
        if not isprime(p):
            raise ValueError(f"Z/{p} is not a field: {p} is not prime")
        self.p = p

    @property
    def symbol(self) -> str:
        return f"F_{self.p}"

    def normalize(self, a):
        """Reduce an integer or a rational into ``[0, p)``.

        A ``Fraction`` maps to ``numerator * denominator^-1``; a denominator
        divisible by ``p`` raises ``ZeroDivisionError``. Floats and other
        non-exact values are rejected rather than truncated.
        """
        if isinstance(a, Fraction):
            return a.numerator * self.inv(a.denominator) % self.p
        if isinstance(a, numbers.Integral):
            return int(a) % self.p
        raise TypeError(
            f"cannot interpret {a!r} of type {type(a).__name__} in F_{self.p}"
        )

    def inv(self, a):
        a = self.normalize(a)
        if a == 0:
            raise ZeroDivisionError(f"0 has no inverse in F_{self.p}")
        return pow(a, -1, self.p)

    def reduce_array(self, arr: np.ndarray) -> np.ndarray:
        return arr % self.p

    def __eq__(self, other):
        return isinstance(other, PrimeField) and other.p == self.p

    def __hash__(self):
        return hash((PrimeField, self.p))

    def __repr__(self):
        return f"PrimeField({self.p})"


QQ = RationalField()

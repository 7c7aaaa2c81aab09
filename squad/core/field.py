"""
GF(256) field engine.

Elements are bytes. Addition is XOR; multiplication is carried out modulo an
irreducible degree-8 polynomial using exp/log tables generated from a
primitive element. Two parties must use the same (polynomial, generator)
pair for shares to interoperate; nothing in a share records which field
produced it.

Presets:
    FIELD_AES           polynomial 0x11B, generator 0x03 (Rijndael field)
    FIELD_REED_SOLOMON  polynomial 0x11D, generator 0x02 (QR / RAID-6 field)
    FIELD_256           alias of FIELD_AES, the default for split/combine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, NamedTuple, Protocol, Sequence, runtime_checkable

from squad.core.errors import FieldError, InvalidInput

_ORDER = 255  # size of the multiplicative group


class Polynomials:
    """Irreducible degree-8 polynomials (bit 8 set)."""

    AES = 0x11B  # x^8 + x^4 + x^3 + x + 1
    REED_SOLOMON = 0x11D  # x^8 + x^4 + x^3 + x^2 + 1


class Generators:
    """Primitive elements for the polynomials above."""

    AES = 0x03
    FAST = 0x02  # primitive for REED_SOLOMON, not for AES


class Point(NamedTuple):
    x: int
    y: int


@runtime_checkable
class FieldEngine(Protocol):
    """Capability the splitter and combiner consume."""

    def add(self, a: int, b: int) -> int: ...

    def multiply(self, a: int, b: int) -> int: ...

    def evaluate(self, coefficients: Sequence[int], x: int) -> int: ...

    def interpolate(self, points: Sequence[tuple[int, int]], at_x: int) -> int: ...


def _mul_slow(a: int, b: int, polynomial: int) -> int:
    """Shift-and-add multiplication (used only for table init)."""
    p = 0
    while b:
        if b & 1:
            p ^= a
        a <<= 1
        if a & 0x100:
            a ^= polynomial
        b >>= 1
    return p


@dataclass(frozen=True)
class GF256:
    """A concrete GF(2^8) instance.

    Attributes:
        polynomial: Irreducible reduction polynomial, 0x100..0x1FF.
        generator: Primitive element used to build the exp/log tables.

    Raises:
        FieldError: If the polynomial is not degree 8, or the generator does
            not generate all 255 non-zero elements (which also rejects
            reducible polynomials).
    """

    polynomial: int
    generator: int
    _exp: tuple[int, ...] = field(init=False, repr=False, compare=False)
    _log: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not 0x100 <= self.polynomial <= 0x1FF:
            raise FieldError(
                f"polynomial 0x{self.polynomial:X} is not of degree 8"
            )
        if not 2 <= self.generator <= 0xFF:
            raise FieldError(f"generator {self.generator} out of range [2, 255]")

        exp = [0] * 512
        log = [0] * 256
        seen: set[int] = set()
        x = 1
        for i in range(_ORDER):
            if x == 0 or x in seen:
                raise FieldError(
                    f"generator 0x{self.generator:02X} is not primitive "
                    f"for polynomial 0x{self.polynomial:X}"
                )
            seen.add(x)
            exp[i] = x
            log[x] = i
            x = _mul_slow(x, self.generator, self.polynomial)
        if x != 1:
            raise FieldError(
                f"polynomial 0x{self.polynomial:X} is reducible"
            )
        # Extend exp table so log[a] + log[b] never needs a modulo
        for i in range(_ORDER, 512):
            exp[i] = exp[i - _ORDER]

        object.__setattr__(self, "_exp", tuple(exp))
        object.__setattr__(self, "_log", tuple(log))

    def add(self, a: int, b: int) -> int:
        return a ^ b

    # Subtraction is addition in characteristic 2
    sub = add

    def multiply(self, a: int, b: int) -> int:
        if a == 0 or b == 0:
            return 0
        return self._exp[self._log[a] + self._log[b]]

    def inverse(self, a: int) -> int:
        if a == 0:
            raise ZeroDivisionError("No inverse for 0 in GF(256)")
        return self._exp[_ORDER - self._log[a]]

    def divide(self, a: int, b: int) -> int:
        if b == 0:
            raise ZeroDivisionError("Division by zero in GF(256)")
        if a == 0:
            return 0
        return self._exp[self._log[a] + _ORDER - self._log[b]]

    def exp(self, power: int) -> int:
        """generator ** power."""
        return self._exp[power % _ORDER]

    def log(self, a: int) -> int:
        """Discrete log of a non-zero element to the generator's base."""
        if a == 0:
            raise ZeroDivisionError("log(0) is undefined in GF(256)")
        return self._log[a]

    def evaluate(self, coefficients: Sequence[int], x: int) -> int:
        """Evaluate a polynomial at x using Horner's method.

        coefficients[0] is the constant term, coefficients[1] the x term, etc.
        """
        result = 0
        for coeff in reversed(coefficients):
            result = self.multiply(result, x) ^ coeff
        return result

    def interpolate(self, points: Iterable[tuple[int, int]], at_x: int) -> int:
        """Lagrange interpolation of the points, evaluated at at_x.

        Raises:
            FieldError: If no points are given or two points share an x.
        """
        pts = [Point(x, y) for x, y in points]
        if not pts:
            raise FieldError("cannot interpolate zero points")
        xs = [p.x for p in pts]
        if len(set(xs)) != len(xs):
            raise FieldError("duplicate x coordinate in interpolation points")

        result = 0
        for i, (xi, yi) in enumerate(pts):
            # L_i(at_x) = prod (at_x - x_j) / (x_i - x_j), j != i
            numerator = 1
            denominator = 1
            for j, xj in enumerate(xs):
                if i == j:
                    continue
                numerator = self.multiply(numerator, at_x ^ xj)
                denominator = self.multiply(denominator, xi ^ xj)
            result ^= self.multiply(yi, self.divide(numerator, denominator))
        return result

    def __repr__(self) -> str:
        return f"GF256(polynomial=0x{self.polynomial:X}, generator=0x{self.generator:02X})"


FIELD_AES = GF256(Polynomials.AES, Generators.AES)
FIELD_REED_SOLOMON = GF256(Polynomials.REED_SOLOMON, Generators.FAST)
FIELD_256 = FIELD_AES

FIELD_PRESETS: dict[str, GF256] = {
    "aes": FIELD_AES,
    "reed-solomon": FIELD_REED_SOLOMON,
}


def get_field(name: str) -> GF256:
    """Look up a field preset by name (case-insensitive, '_' == '-')."""
    key = name.strip().lower().replace("_", "-")
    try:
        return FIELD_PRESETS[key]
    except KeyError:
        raise InvalidInput(
            f"Unknown field preset {name!r}; choose from: {', '.join(FIELD_PRESETS)}"
        ) from None

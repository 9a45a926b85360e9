"""
Elliptic curve arithmetic over prime fields, fixed to secp256k1 for signing

    E: y^2 = x^3 + ax + b (mod p)

Points are affine. The point at infinity is Point(None, None) and is falsy.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from .ecc_math import is_quadratic_residue, sqrt_mod

__all__ = ["EllipticCurve", "Point", "SECP256K1"]


@dataclass(frozen=True)
class Point:
    x: Optional[int] = None
    y: Optional[int] = None

    def __post_init__(self):
        if (self.x is None) != (self.y is None):
            raise ValueError("Point at infinity must have both coordinates as None")

    def __bool__(self) -> bool:
        return self.x is not None

    def __iter__(self):
        return iter((self.x, self.y))


class EllipticCurve:
    """
    Group of rational points of a non-singular curve, with a generator of the given order
    """

    def __init__(self, a: int, b: int, p: int, order: int, generator: Tuple[int, int] | Point,
                 name: Optional[str] = None):
        if (4 * pow(a, 3) + 27 * pow(b, 2)) % p == 0:
            raise ValueError("Cannot use Singular curve in ECC")

        self.a = a
        self.b = b
        self.p = p
        self.order = order
        self.generator = Point(*generator) if isinstance(generator, tuple) else generator
        self.name = name

        # 2^i * G for every bit of the order, used by multiply_generator
        self._generator_doublings = []
        current = self.generator
        for _ in range(order.bit_length()):
            self._generator_doublings.append(current)
            current = self._double_point(current)

    def __repr__(self):
        return f"EllipticCurve({self.name or hex(self.p)})"

    def _rhs(self, x: int) -> int:
        return (pow(x, 3, self.p) + self.a * x + self.b) % self.p

    def is_point_on_curve(self, point: Point) -> bool:
        if not point:
            return True
        return (point.y * point.y) % self.p == self._rhs(point.x)

    def is_x_on_curve(self, x: int) -> bool:
        return is_quadratic_residue(self._rhs(x), self.p)

    def point_from_x(self, x: int, parity: int) -> Point:
        """
        The curve point with the given x-coordinate whose y-coordinate has the given parity
        """
        if not self.is_x_on_curve(x):
            raise ValueError(f"Given x coordinate {x} is not on the curve.")
        y = sqrt_mod(self._rhs(x), self.p)
        if y & 1 != parity & 1:
            y = (-y) % self.p
        return Point(x, y)

    # --- GROUP OPERATIONS --- #

    def _double_point(self, point: Point) -> Point:
        if not point or point.y == 0:
            return Point()

        x, y = point
        m = ((3 * x * x + self.a) * pow(2 * y, -1, self.p)) % self.p
        x3 = (m * m - 2 * x) % self.p
        return Point(x3, (m * (x - x3) - y) % self.p)

    def add_points(self, point1: Point, point2: Point) -> Point:
        if not point1:
            return point2
        if not point2:
            return point1

        x1, y1 = point1
        x2, y2 = point2
        if x1 == x2:
            # Either the same point or inverses
            return self._double_point(point1) if y1 == y2 else Point()

        m = ((y2 - y1) * pow(x2 - x1, -1, self.p)) % self.p
        x3 = (m * m - x1 - x2) % self.p
        return Point(x3, (m * (x1 - x3) - y1) % self.p)

    def scalar_multiplication(self, n: int, point: Point) -> Point:
        """
        Double-and-add. Multiples of the generator use the precomputed doublings.
        """
        n = n % self.order
        if not point or n == 0:
            return Point()
        if point == self.generator:
            return self.multiply_generator(n)

        result = Point()
        addend = point
        while n:
            if n & 1:
                result = self.add_points(result, addend)
            addend = self._double_point(addend)
            n >>= 1
        return result

    def multiply_generator(self, n: int) -> Point:
        n = n % self.order
        result = Point()
        for bit, doubling in enumerate(self._generator_doublings):
            if n >> bit == 0:
                break
            if (n >> bit) & 1:
                result = self.add_points(result, doubling)
        return result


SECP256K1 = EllipticCurve(
    a=0,
    b=7,
    p=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F,
    order=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141,
    generator=(0x79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798,
               0x483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8),
    name="secp256k1"
)

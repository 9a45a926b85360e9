"""
Testing the Point and EllipticCurve classes and methods
"""
from secrets import randbits

import pytest

from sigma_protocol.crypto import Point, EllipticCurve, SECP256K1
from sigma_protocol.crypto.ecc_math import sqrt_mod, is_quadratic_residue

# y^2 = x^3 + 7 (mod 11) has these 11 affine points plus the point at infinity
SMALL_POINTS = [(2, 2), (2, 9), (3, 1), (3, 10), (4, 4), (4, 7), (5, 0), (6, 5), (6, 6), (7, 3), (7, 8)]


@pytest.fixture()
def small_curve():
    return EllipticCurve(a=0, b=7, p=11, order=12, generator=(2, 2))


def test_point_at_infinity(small_curve):
    assert Point() == Point(x=None, y=None)
    assert not Point()
    assert small_curve.is_point_on_curve(Point())

    with pytest.raises(ValueError):
        Point(x=3, y=None)
    with pytest.raises(ValueError):
        Point(x=None, y=3)


def test_singular_curve():
    with pytest.raises(ValueError):
        EllipticCurve(a=0, b=0, p=11, order=1, generator=(0, 0))


def test_small_curve_points(small_curve):
    on_curve = [(x, y) for x in range(11) for y in range(11) if small_curve.is_point_on_curve(Point(x, y))]
    assert on_curve == SMALL_POINTS

    for x, y in SMALL_POINTS:
        assert small_curve.point_from_x(x, y) == Point(x, y)
    with pytest.raises(ValueError):
        small_curve.point_from_x(0, 0)


def test_small_curve_arithmetic(small_curve):
    known_point = Point(7, 3)
    inverse_point = Point(7, 8)

    assert small_curve.add_points(Point(2, 2), Point(2, 9)) == Point()
    assert small_curve.add_points(Point(2, 2), Point(3, 1)) == known_point
    assert small_curve.add_points(Point(3, 1), Point(2, 2)) == known_point
    assert small_curve.add_points(Point(5, 0), Point(5, 0)) == Point(), "Points with y = 0 are their own inverse"
    assert small_curve.scalar_multiplication(11, known_point) == inverse_point

    # Scalar multiplication agrees with repeated addition, for the generator and any other point
    for point in (small_curve.generator, known_point):
        running = Point()
        for n in range(1, 13):
            running = small_curve.add_points(running, point)
            assert small_curve.scalar_multiplication(n, point) == running
        assert running == Point(), "Group order should annihilate every point"


def test_secp256k1():
    random_point = SECP256K1.multiply_generator(randbits(256))
    x, y = random_point
    assert SECP256K1.is_point_on_curve(random_point)
    assert SECP256K1.scalar_multiplication(SECP256K1.order - 1, random_point) == Point(x, -y % SECP256K1.p)
    assert SECP256K1.point_from_x(x, y) == random_point
    assert SECP256K1.point_from_x(x, y + 1) == Point(x, -y % SECP256K1.p)

    k1, k2 = randbits(128), randbits(128)
    assert SECP256K1.add_points(SECP256K1.multiply_generator(k1), SECP256K1.multiply_generator(k2)) == \
           SECP256K1.multiply_generator(k1 + k2)
    assert SECP256K1.scalar_multiplication(k1, SECP256K1.generator) == SECP256K1.multiply_generator(k1)


def test_sqrt_mod():
    p = SECP256K1.p
    for _ in range(5):
        n = randbits(255) % p
        square = n * n % p
        assert is_quadratic_residue(square, p)
        assert sqrt_mod(square, p) in (n, p - n)

    with pytest.raises(ValueError):
        sqrt_mod(3, 13)
    with pytest.raises(ValueError):
        sqrt_mod(2, 11)

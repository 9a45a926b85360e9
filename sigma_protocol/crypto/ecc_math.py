"""
Modular square roots for decompressing curve points
"""

__all__ = ["is_quadratic_residue", "sqrt_mod"]


def is_quadratic_residue(n: int, p: int) -> bool:
    """
    Euler's criterion. Zero counts as a residue.
    """
    n = n % p
    if n == 0:
        return True
    return pow(n, (p - 1) >> 1, p) == 1


def sqrt_mod(n: int, p: int) -> int:
    """
    Returns r with r^2 = n (mod p) for a prime p = 3 (mod 4), which covers the secp256k1 field
    """
    if p & 3 != 3:
        raise ValueError("Square roots are only supported for primes p = 3 (mod 4)")
    n = n % p
    if not is_quadratic_residue(n, p):
        raise ValueError(f"{n} is not a quadratic residue mod p")
    return pow(n, (p + 1) >> 2, p)

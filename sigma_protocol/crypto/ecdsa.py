"""
Methods to create, verify and recover signatures created using ECDSA on secp256k1
"""
from typing import Optional, Tuple

from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature, decode_dss_signature

from sigma_protocol.core import ECDSAError, ECC, SIGMA
from sigma_protocol.core.logging import get_logger
from sigma_protocol.crypto.ecc import SECP256K1, Point
from sigma_protocol.crypto.hash_functions import hmac_sha256

logger = get_logger(__name__)

__all__ = ["ecdsa", "verify_ecdsa", "recover_public_key", "calculate_recovery_id", "encode_compact",
           "decode_compact", "encode_der_signature", "decode_der_signature"]

curve = SECP256K1


def _message_to_int(message_hash: bytes) -> int:
    """
    Keep the n leftmost bits of the message hash
    """
    n = curve.order
    z = int.from_bytes(message_hash, 'big')
    excess = len(message_hash) * 8 - n.bit_length()
    if excess > 0:
        z >>= excess
    return z


def _deterministic_k(private_key: int, z: int) -> int:
    """
    RFC 6979 nonce generation with HMAC-SHA256
    """
    n = curve.order
    k = b'\x00' * 32
    v = b'\x01' * 32
    if z >= n:
        z -= n
    z_bytes = z.to_bytes(ECC.COORD_BYTES, 'big')
    secret_bytes = private_key.to_bytes(ECC.COORD_BYTES, 'big')

    k = hmac_sha256(k, v + b'\x00' + secret_bytes + z_bytes)
    v = hmac_sha256(k, v)
    k = hmac_sha256(k, v + b'\x01' + secret_bytes + z_bytes)
    v = hmac_sha256(k, v)
    while True:
        v = hmac_sha256(k, v)
        candidate = int.from_bytes(v, 'big')
        if 1 <= candidate < n:
            return candidate
        k = hmac_sha256(k, v + b'\x00')
        v = hmac_sha256(k, v)


def ecdsa(private_key: int, message_hash: bytes) -> Tuple[int, int]:
    """
    Generates an ECDSA signature for a given private_key and message hash.

    Parameters:
    ----------
    private_key : int
        The signer's private key.
    message_hash : bytes
        The hash of the message that will be signed.

    Returns:
    --------
    tuple
        The ECDSA signature (r, s), using low s as per BIP-62.

    Algorithm:
    ----------
    1) Compute z as the integer value of the first n bits of message hash.
    2) Derive k in [1, n-1] deterministically from the private key and z (RFC 6979).
    3) Calculate curve point (x, y) = k * generator.
    4) Compute r = x (mod n) and s = k^(-1)(z + r * private_key) (mod n).
    5) If r or s is 0, the private key / message pair cannot be signed.
    6) Return (r, min(s, n - s)).
    """
    n = curve.order
    if not (1 <= private_key < n):
        raise ECDSAError("Private key out of bounds")

    z = _message_to_int(message_hash)
    k = _deterministic_k(private_key, z)

    x, _ = curve.multiply_generator(k)
    r = x % n
    s = (pow(k, -1, n) * (z + r * private_key)) % n
    if r == 0 or s == 0:
        raise ECDSAError("Degenerate signature values for the given key and message")

    return r, min(s, n - s)


def verify_ecdsa(signature: tuple, message_hash: bytes, public_key: Point) -> bool:
    """
    We verify that the given signature corresponds to the public_key for the given message hash.

    Algorithm
    --------
    Let n denote the group order of the elliptic curve.

    1) Verify that (r,s) are integers in the interval [1,n-1]
    2) Let z be the integer value of the first n bits of the message hash
    3) Let u1 = z * s^(-1) (mod n) and u2 = r * s^(-1) (mod n)
    4) Calculate the curve point (x,y) = (u1 * generator) + (u2 * public_key)
    5) If r = x (mod n), the signature is valid.
    """
    n = curve.order
    r, s = signature

    # 1) Verify our values first
    if not (1 <= r < n):
        logger.debug(f"ECDSA r value {r} out of bounds.")
        return False
    if not (1 <= s < n):
        logger.debug(f"ECDSA s value {s} out of bounds.")
        return False

    z = _message_to_int(message_hash)

    s_inv = pow(s, -1, n)
    u1 = (z * s_inv) % n
    u2 = (r * s_inv) % n

    point = curve.add_points(curve.multiply_generator(u1), curve.scalar_multiplication(u2, public_key))
    if not point:
        logger.debug("Point at infinity encountered during signature verification.")
        return False

    return r == point.x % n


def recover_public_key(signature: tuple, recovery_id: int, message_hash: bytes) -> Optional[Point]:
    """
    Recovers the public key candidate for the given recovery id (SEC 1, 4.1.6). Returns None when no
    point exists for the id.

        R = point with x = r + (recovery_id >> 1) * n and y parity = recovery_id & 1
        Q = r^(-1) * (s * R - z * G)
    """
    n = curve.order
    r, s = signature
    if not (1 <= r < n and 1 <= s < n) or recovery_id not in SIGMA.RECOVERY_IDS:
        return None

    x = r + (recovery_id >> 1) * n
    if x >= curve.p or not curve.is_x_on_curve(x):
        return None
    big_r = curve.point_from_x(x, recovery_id & 1)

    z = _message_to_int(message_hash)
    r_inv = pow(r, -1, n)
    u1 = (-z * r_inv) % n
    u2 = (s * r_inv) % n
    public_key = curve.add_points(curve.multiply_generator(u1), curve.scalar_multiplication(u2, big_r))
    return public_key or None


def calculate_recovery_id(signature: tuple, message_hash: bytes, public_key: Point) -> Optional[int]:
    """
    Returns the recovery id whose recovered key equals the given public key, or None
    """
    for recovery_id in SIGMA.RECOVERY_IDS:
        if recover_public_key(signature, recovery_id, message_hash) == public_key:
            return recovery_id
    return None


# --- ENCODING --- #

def encode_compact(signature: tuple, recovery_id: int, compressed: bool = True) -> bytes:
    """
    65 byte compact signature: header || r || s, where header = 27 + recovery_id (+ 4 if compressed)
    """
    r, s = signature
    header = SIGMA.COMPACT_HEADER_BASE + recovery_id + (SIGMA.COMPACT_COMPRESSED_FLAG if compressed else 0)
    return bytes([header]) + r.to_bytes(ECC.COORD_BYTES, "big") + s.to_bytes(ECC.COORD_BYTES, "big")


def decode_compact(compact: bytes) -> Tuple[Tuple[int, int], int, bool]:
    """
    Returns ((r, s), recovery_id, compressed) from a compact signature
    """
    if len(compact) != SIGMA.COMPACT_SIG_BYTES:
        raise ECDSAError(f"Compact signature must be {SIGMA.COMPACT_SIG_BYTES} bytes")

    header = compact[0] - SIGMA.COMPACT_HEADER_BASE
    if not (0 <= header < 8):
        raise ECDSAError(f"Invalid compact signature header: {compact[0]}")

    compressed = header >= SIGMA.COMPACT_COMPRESSED_FLAG
    recovery_id = header - SIGMA.COMPACT_COMPRESSED_FLAG if compressed else header
    r = int.from_bytes(compact[1:33], "big")
    s = int.from_bytes(compact[33:], "big")
    return (r, s), recovery_id, compressed


def encode_der_signature(signature: tuple) -> bytes:
    r, s = signature
    return encode_dss_signature(r, s)


def decode_der_signature(der: bytes) -> Tuple[int, int]:
    try:
        return decode_dss_signature(der)
    except ValueError as e:
        raise ECDSAError(f"Malformed DER signature: {e}") from e

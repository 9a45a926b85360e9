"""
Child key derivation between two parties (BRC-42).

Both parties compute the same ECDH shared secret S = a * B = b * A. The invoice number is bound into a
scalar h = HMAC-SHA256(key=compressed(S), msg=invoice_number), so that:

    child private key (sender side)   = a + h (mod n)
    child public key  (receiver side) = A + h * G
"""
from sigma_protocol.core import PubKeyError
from sigma_protocol.crypto.ecc import SECP256K1
from sigma_protocol.crypto.hash_functions import hmac_sha256
from sigma_protocol.crypto.keys import PubKey

__all__ = ["shared_secret", "derive_child_private_key", "derive_child_public_key"]


def shared_secret(private_key: int, counterparty: PubKey) -> PubKey:
    point = SECP256K1.scalar_multiplication(private_key, counterparty.to_point())
    if not point:
        raise PubKeyError("Shared secret is the point at infinity")
    return PubKey.from_point(point)


def _invoice_scalar(secret: PubKey, invoice_number: str) -> int:
    return int.from_bytes(hmac_sha256(secret.compressed(), invoice_number.encode("utf-8")), "big")


def derive_child_private_key(private_key: int, counterparty: PubKey, invoice_number: str) -> int:
    """
    Returns the child private key the owner of private_key uses towards the counterparty
    """
    h = _invoice_scalar(shared_secret(private_key, counterparty), invoice_number)
    return (private_key + h) % SECP256K1.order


def derive_child_public_key(public_key: PubKey, private_key: int, invoice_number: str) -> PubKey:
    """
    Returns the child public key of public_key, as derived by the holder of private_key
    """
    h = _invoice_scalar(shared_secret(private_key, public_key), invoice_number)
    return PubKey.from_point(SECP256K1.add_points(public_key.to_point(), SECP256K1.multiply_generator(h)))

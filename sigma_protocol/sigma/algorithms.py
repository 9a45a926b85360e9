"""
The two Sigma signing algorithms

ECDSA: recoverable ECDSA over the Bitcoin Signed Message digest of the message, stored as a 65-byte compact
signature. Verification ignores the stored recovery id and searches all four.

ALT: a signed message blob (BRC-77 layout) which carries its own signer key and optional recipient.
"""
from enum import Enum
from typing import Optional

from sigma_protocol.core import SIGMA, RecoveryMissingError, ECDSAError, SignedMessageError, PubKeyError
from sigma_protocol.core.logging import get_logger
from sigma_protocol.crypto import encode_compact, decode_compact
from sigma_protocol.sigma.backend import CryptoBackend

logger = get_logger(__name__)

__all__ = ["Algorithm", "calculate_recovery_id", "sign_recoverable", "recover_signer", "verify_recoverable",
           "sign_alt", "verify_alt"]


class Algorithm(str, Enum):
    """
    Wire tags for the algorithm field of a Sigma instance
    """
    ECDSA = "ECDSA"
    ALT = "ALT"

    @classmethod
    def _missing_(cls, value):
        # Instances written before the rename carry the BSM tag
        if value == "BSM":
            return cls.ECDSA
        return None

    def __str__(self):
        return self.value


# --- ECDSA --- #

def calculate_recovery_id(backend: CryptoBackend, signature: tuple, digest: bytes, public_key: bytes) -> int:
    """
    Returns the recovery id for which the signature recovers to the given public key
    """
    for recovery_id in SIGMA.RECOVERY_IDS:
        if backend.recover_public_key(signature, recovery_id, digest) == public_key:
            return recovery_id
    raise RecoveryMissingError("Unable to calculate a recovery id for the signature")


def sign_recoverable(backend: CryptoBackend, private_key: int, message: bytes) -> bytes:
    """
    Returns the 65-byte compact signature of the message
    """
    digest = backend.magic_hash(message)
    signature = backend.sign_digest(private_key, digest)
    recovery_id = calculate_recovery_id(backend, signature, digest, backend.public_key(private_key))
    logger.debug(f"Signed message digest {digest.hex()} with recovery id {recovery_id}")
    return encode_compact(signature, recovery_id)


def recover_signer(backend: CryptoBackend, r: int, s: int, digest: bytes, address: str) -> Optional[int]:
    """
    Tries every recovery id in order. Returns the first id whose recovered key both validates the signature
    and derives the given address, or None if there is no such id.
    """
    for recovery_id in SIGMA.RECOVERY_IDS:
        candidate = backend.recover_public_key((r, s), recovery_id, digest)
        if candidate is None:
            continue
        if backend.verify_digest((r, s), digest, candidate) and backend.address(candidate) == address:
            return recovery_id
    return None


def verify_recoverable(backend: CryptoBackend, message: bytes, signature: bytes, address: str) -> bool:
    try:
        (r, s), _, _ = decode_compact(signature)
    except ECDSAError as e:
        logger.debug(f"Unreadable compact signature: {e}")
        return False

    recovery_id = recover_signer(backend, r, s, backend.magic_hash(message), address)
    if recovery_id is None:
        logger.debug(f"No recovery id yields address {address}")
        return False
    return True


# --- ALT --- #

def sign_alt(backend: CryptoBackend, private_key: int, message: bytes, verifier: Optional[bytes] = None) -> bytes:
    return backend.sign_message(message, private_key, verifier)


def verify_alt(backend: CryptoBackend, message: bytes, blob: bytes, address: str,
               recipient_private_key: Optional[int] = None) -> bool:
    """
    Verifies the signed message blob and checks that its signer key derives the claimed address
    """
    try:
        signer = backend.message_signer(blob)
        if backend.address(signer) != address:
            logger.debug(f"Signed message signer does not match address {address}")
            return False
        return backend.verify_message(message, blob, recipient_private_key)
    except (SignedMessageError, PubKeyError) as e:
        logger.warning(f"Signed message verification failed: {e}")
        return False

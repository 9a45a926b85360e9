"""
Hash functions
"""
import hashlib
import hmac

from ripemd.ripemd160 import ripemd160 as _ripemd160

from sigma_protocol.core import SIGMA

__all__ = ["sha256", "hash256", "ripemd160", "hash160", "hmac_sha256", "magic_hash"]


# HASHLIB
def sha256(encoded_data: bytes) -> bytes:
    return hashlib.sha256(encoded_data).digest()


def hash256(encoded_data: bytes) -> bytes:
    return sha256(sha256(encoded_data))


def ripemd160(encoded_data: bytes) -> bytes:
    return _ripemd160(encoded_data)


def hash160(encoded_data: bytes) -> bytes:
    return ripemd160(sha256(encoded_data))


def hmac_sha256(key: bytes, message: bytes) -> bytes:
    return hmac.new(key=key, msg=message, digestmod=hashlib.sha256).digest()


def magic_hash(message: bytes) -> bytes:
    """
    Bitcoin Signed Message digest:
        HASH256(varint(len(prefix)) || prefix || varint(len(message)) || message)
    """
    # Imported here as data depends on this module
    from sigma_protocol.data.compact_size import write_compact_size

    prefix = SIGMA.MAGIC_PREFIX
    return hash256(write_compact_size(len(prefix)) + prefix + write_compact_size(len(message)) + message)

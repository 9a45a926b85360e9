"""
The crypto capability used by the Sigma engine

The engine never touches curve arithmetic directly. Every hash, signature, recovery and address derivation goes
through a CryptoBackend, so the hash chain and codec can be exercised against a fake implementation.
Public keys cross this boundary as compressed bytes; private keys as integers.
"""
from abc import ABC, abstractmethod
from typing import Optional

from sigma_protocol.core import PubKeyError
from sigma_protocol.crypto import sha256, magic_hash, ecdsa, verify_ecdsa, recover_public_key, sign_message, \
    verify_message, decode_signed_message, PubKey
from sigma_protocol.data import p2pkh_address

__all__ = ["CryptoBackend", "LocalCryptoBackend"]


class CryptoBackend(ABC):

    @abstractmethod
    def sha256(self, data: bytes) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def magic_hash(self, message: bytes) -> bytes:
        """Bitcoin Signed Message digest of the message"""
        raise NotImplementedError

    @abstractmethod
    def public_key(self, private_key: int) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def address(self, public_key: bytes) -> str:
        raise NotImplementedError

    @abstractmethod
    def sign_digest(self, private_key: int, digest: bytes) -> tuple:
        """ECDSA (r, s) over a 32-byte digest"""
        raise NotImplementedError

    @abstractmethod
    def verify_digest(self, signature: tuple, digest: bytes, public_key: bytes) -> bool:
        raise NotImplementedError

    @abstractmethod
    def recover_public_key(self, signature: tuple, recovery_id: int, digest: bytes) -> Optional[bytes]:
        raise NotImplementedError

    @abstractmethod
    def sign_message(self, message: bytes, private_key: int, verifier: Optional[bytes] = None) -> bytes:
        """Signed message blob, optionally restricted to the holder of the verifier key"""
        raise NotImplementedError

    @abstractmethod
    def verify_message(self, message: bytes, blob: bytes, recipient: Optional[int] = None) -> bool:
        raise NotImplementedError

    @abstractmethod
    def message_signer(self, blob: bytes) -> bytes:
        """Public key of the signer embedded in a signed message blob"""
        raise NotImplementedError


class LocalCryptoBackend(CryptoBackend):
    """
    Pure python secp256k1 backend built on sigma_protocol.crypto
    """

    def __init__(self, testnet: bool = False):
        self.testnet = testnet

    def sha256(self, data: bytes) -> bytes:
        return sha256(data)

    def magic_hash(self, message: bytes) -> bytes:
        return magic_hash(message)

    def public_key(self, private_key: int) -> bytes:
        return PubKey(private_key).compressed()

    def address(self, public_key: bytes) -> str:
        return p2pkh_address(public_key, self.testnet)

    def sign_digest(self, private_key: int, digest: bytes) -> tuple:
        return ecdsa(private_key, digest)

    def verify_digest(self, signature: tuple, digest: bytes, public_key: bytes) -> bool:
        try:
            point = PubKey.from_bytes(public_key).to_point()
        except PubKeyError:
            return False
        return verify_ecdsa(signature, digest, point)

    def recover_public_key(self, signature: tuple, recovery_id: int, digest: bytes) -> Optional[bytes]:
        point = recover_public_key(signature, recovery_id, digest)
        if point is None:
            return None
        return PubKey.from_point(point).compressed()

    def sign_message(self, message: bytes, private_key: int, verifier: Optional[bytes] = None) -> bytes:
        verifier_key = PubKey.from_bytes(verifier) if verifier is not None else None
        return sign_message(message, private_key, verifier_key)

    def verify_message(self, message: bytes, blob: bytes, recipient: Optional[int] = None) -> bool:
        return verify_message(message, blob, recipient)

    def message_signer(self, blob: bytes) -> bytes:
        return decode_signed_message(blob).signer.compressed()

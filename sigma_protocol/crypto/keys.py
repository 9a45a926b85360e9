import json

from sigma_protocol.core import PubKeyError, ECC
from sigma_protocol.crypto.ecc import SECP256K1, Point
from sigma_protocol.crypto.hash_functions import hash160

__all__ = ["PubKey"]


class PubKey:
    """
    Used for serializing a secp256k1 public key
    """
    __slots__ = ("x", "y")

    def __init__(self, private_key: int | bytes):
        private_key = int.from_bytes(private_key, "big") if isinstance(private_key, bytes) else private_key
        if not (1 <= private_key < SECP256K1.order):
            raise PubKeyError("Private key out of bounds")
        self.x, self.y = SECP256K1.multiply_generator(private_key)

    # --- OVERRIDES --- #
    def __eq__(self, other) -> bool:
        if not isinstance(other, PubKey):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __hash__(self):
        return hash((self.x, self.y))

    def __repr__(self):
        return f"PubKey({self.compressed().hex()})"

    # --- CLASS METHODS --- #
    @classmethod
    def from_uncompressed(cls, full_pubkey: bytes):
        if len(full_pubkey) != 65:
            raise PubKeyError("Uncompressed pubkey not of correct length.")
        if full_pubkey[0] != 0x04:
            raise PubKeyError("Uncompressed pubkey has incorrect prefix")

        x = int.from_bytes(full_pubkey[1:33], "big")
        y = int.from_bytes(full_pubkey[33:], "big")
        return cls.from_point(Point(x, y))

    @classmethod
    def from_compressed(cls, compressed_pubkey: bytes):
        if len(compressed_pubkey) != ECC.COMPRESSED_BYTES:
            raise PubKeyError("Compressed pubkey must be 33 bytes")
        prefix = compressed_pubkey[0]
        if prefix not in (0x02, 0x03):
            raise PubKeyError("Invalid prefix for compressed pubkey")
        x = int.from_bytes(compressed_pubkey[1:], "big")
        if not (0 < x < SECP256K1.p):
            raise PubKeyError("x out of range")
        if not SECP256K1.is_x_on_curve(x):
            raise PubKeyError("Given x coordinate not on curve")

        return cls.from_point(SECP256K1.point_from_x(x, prefix & 1))

    @classmethod
    def from_point(cls, point: Point):
        if not point or not SECP256K1.is_point_on_curve(point):
            raise PubKeyError("Given point not on SECP256K1 curve")

        obj = object.__new__(cls)  # bypass __init__
        obj.x, obj.y = point
        return obj

    @classmethod
    def from_bytes(cls, pubkey_bytes: bytes):
        """
        Proceed based on length of pubkey
        """
        if len(pubkey_bytes) == 65 and pubkey_bytes[0] == 4:
            return cls.from_uncompressed(pubkey_bytes)
        elif len(pubkey_bytes) == ECC.COMPRESSED_BYTES and pubkey_bytes[0] in (2, 3):
            return cls.from_compressed(pubkey_bytes)
        raise PubKeyError("Unrecognized pubkey type")

    # --- FORMATTING --- #

    def compressed(self) -> bytes:
        y_byte = b'\x02' if self.y % 2 == 0 else b'\x03'
        return y_byte + self.x.to_bytes(ECC.COORD_BYTES, "big")

    def uncompressed(self) -> bytes:
        return b'\x04' + self.x.to_bytes(ECC.COORD_BYTES, "big") + self.y.to_bytes(ECC.COORD_BYTES, "big")

    def to_point(self) -> Point:
        return Point(self.x, self.y)

    def pubkey_hash(self) -> bytes:
        return hash160(self.compressed())

    # --- DISPLAY --- #
    def to_dict(self):
        return {
            "x": self.x,
            "y": self.y,
            "uncompressed": self.uncompressed().hex(),
            "compressed": self.compressed().hex(),
            "pubkey_hash": self.pubkey_hash().hex()
        }

    def to_json(self):
        return json.dumps(self.to_dict(), indent=2)

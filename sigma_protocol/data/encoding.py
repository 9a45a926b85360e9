"""
Methods for encoding and decoding keys and addresses
"""

import re

from sigma_protocol.core import DataEncodingError, ADDRESS, ECC
from sigma_protocol.crypto.hash_functions import hash256, hash160

__all__ = ["encode_base58", "decode_base58", "encode_base58check", "decode_base58check", "encode_wif",
           "decode_wif", "p2pkh_address", "decode_p2pkh_address", "decode_private_key"]

# --- BASE58 ENCODING --- #
BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def encode_base58(data: bytes) -> str:
    """
    We return the base58 encoding of the given bytes data
    """
    # Setup
    base = len(BASE58_ALPHABET)
    n = int.from_bytes(data, byteorder="big")
    encoded_string = ""

    # Encode into Base58
    while n > 0:
        n, temp_index = divmod(n, base)
        encoded_string = BASE58_ALPHABET[temp_index] + encoded_string

    # Handle leading zeros in the byte string
    leading_zeros = len(data) - len(data.lstrip(b'\x00'))
    return ("1" * leading_zeros) + encoded_string


def decode_base58(data: str) -> bytes:
    """
    Given a base58 encoded string, return the bytes of the underlying integer with leading zeros restored.
    """
    total = 0
    for char in data:
        char_i = BASE58_ALPHABET.find(char)
        if char_i < 0:
            raise DataEncodingError(f"Invalid base58 character: {char!r}")
        total = total * 58 + char_i

    decoded_bytes = total.to_bytes((total.bit_length() + 7) // 8, "big")

    # Each leading '1' represents a leading zero byte
    leading_zeros = len(re.match(r"^1*", data).group(0))
    return (b'\x00' * leading_zeros) + decoded_bytes


def encode_base58check(data: bytes) -> str:
    """
    Given bytes data, we return the base58 encoding along with checksum
    """
    checksum = hash256(data)[:4]  # First 4 bytes of HASH256(data)
    return encode_base58(data + checksum)


def decode_base58check(data: str) -> bytes:
    """
    Given a string of base58Check chars, we decode it and return the payload without its checksum.
    Raise DataEncodingError if checksum fails
    """
    decoded_bytecheck = decode_base58(data)
    if len(decoded_bytecheck) < 5:
        raise DataEncodingError("Base58check data too short")
    d_bytes, d_checksum = decoded_bytecheck[:-4], decoded_bytecheck[-4:]
    if hash256(d_bytes)[:4] != d_checksum:
        raise DataEncodingError("Decoded checksum does not equal given checksum")
    return d_bytes


# --- WIF --- #

def encode_wif(private_key: int, compressed: bool = True, testnet: bool = False) -> str:
    prefix = ADDRESS.WIF_TESTNET if testnet else ADDRESS.WIF_MAINNET
    suffix = ADDRESS.WIF_COMPRESSED if compressed else b''
    return encode_base58check(prefix + private_key.to_bytes(ECC.COORD_BYTES, "big") + suffix)


def decode_wif(wif: str) -> int:
    """
    Returns the private key integer encoded in the given WIF string (compressed or uncompressed)
    """
    payload = decode_base58check(wif)
    if payload[:1] not in (ADDRESS.WIF_MAINNET, ADDRESS.WIF_TESTNET):
        raise DataEncodingError(f"Unknown WIF version byte: {payload[:1].hex()}")

    key_bytes = payload[1:]
    if len(key_bytes) == ECC.COORD_BYTES + 1 and key_bytes[-1:] == ADDRESS.WIF_COMPRESSED:
        key_bytes = key_bytes[:-1]
    if len(key_bytes) != ECC.COORD_BYTES:
        raise DataEncodingError("WIF payload has incorrect length")
    return int.from_bytes(key_bytes, "big")


def decode_private_key(private_key: int | bytes | str) -> int:
    """
    Accepts a private key as an integer, 32 raw bytes, a 64 character hex string or a WIF string
    """
    if isinstance(private_key, int):
        return private_key
    if isinstance(private_key, bytes):
        if len(private_key) != ECC.COORD_BYTES:
            raise DataEncodingError("Raw private key must be 32 bytes")
        return int.from_bytes(private_key, "big")
    if isinstance(private_key, str):
        if re.fullmatch(r"[0-9a-fA-F]{64}", private_key):
            return int(private_key, 16)
        return decode_wif(private_key)
    raise TypeError(f"Unsupported private key type: {type(private_key)}")


# --- ADDRESSES --- #

def p2pkh_address(pubkey: bytes, testnet: bool = False) -> str:
    """
    Returns the base58check P2PKH address for the given serialized public key
    """
    prefix = ADDRESS.P2PKH_TESTNET if testnet else ADDRESS.P2PKH_MAINNET
    return encode_base58check(prefix + hash160(pubkey))


def decode_p2pkh_address(address: str) -> bytes:
    """
    Returns the 20-byte pubkey hash of a P2PKH address
    """
    payload = decode_base58check(address)
    if len(payload) != 21 or payload[:1] not in (ADDRESS.P2PKH_MAINNET, ADDRESS.P2PKH_TESTNET):
        raise DataEncodingError(f"Not a P2PKH address: {address}")
    return payload[1:]

"""
We generate random signatures and verify, recover and encode them
"""
from secrets import token_bytes, randbelow

import pytest

from sigma_protocol.core import ECDSAError
from sigma_protocol.crypto import ecdsa, verify_ecdsa, recover_public_key, calculate_recovery_id, encode_compact, \
    decode_compact, encode_der_signature, decode_der_signature, sha256, SECP256K1


def random_private_key() -> int:
    while True:
        priv_key = randbelow(SECP256K1.order)
        if priv_key != 0:
            return priv_key


def test_ecdsa():
    # Get random message values
    messages = [token_bytes(n) for n in (16, 32, 64, 128, 256)]

    # Generate public and private key
    priv_key = random_private_key()
    pub_key = SECP256K1.multiply_generator(priv_key)

    # Get signatures
    signatures = [ecdsa(priv_key, m) for m in messages]

    # Verify signature
    for x in range(len(messages)):
        assert verify_ecdsa(signatures[x], messages[x], pub_key), "Failed to verify ECDSA signature for random data"

    # Wrong message
    assert not verify_ecdsa(signatures[0], messages[1], pub_key)


def test_rfc6979_vector():
    """
    Private key 1 signing SHA256("Satoshi Nakamoto")
    """
    r, s = ecdsa(1, sha256(b"Satoshi Nakamoto"))
    assert r == 0x934b1ea10a4b3c1757e2b0c017d0b6143ce3c9a7e6a4a49860d7a6ab210ee3d8
    assert s == 0x2442ce9d2b916064108014783e923ec36b49743e2ffa1c4496f01a512aafd9e5


def test_deterministic_low_s():
    priv_key = random_private_key()
    message_hash = token_bytes(32)

    first = ecdsa(priv_key, message_hash)
    assert ecdsa(priv_key, message_hash) == first, "Signatures should be deterministic"
    assert first[1] <= SECP256K1.order // 2, "Signature s value should be low"


def test_private_key_bounds():
    with pytest.raises(ECDSAError):
        ecdsa(0, token_bytes(32))
    with pytest.raises(ECDSAError):
        ecdsa(SECP256K1.order, token_bytes(32))


def test_recovery():
    priv_key = random_private_key()
    pub_key = SECP256K1.multiply_generator(priv_key)
    message_hash = token_bytes(32)
    signature = ecdsa(priv_key, message_hash)

    recovery_id = calculate_recovery_id(signature, message_hash, pub_key)
    assert recovery_id is not None, "Failed to find a recovery id for a fresh signature"
    assert recover_public_key(signature, recovery_id, message_hash) == pub_key

    # Other ids recover other keys, or nothing
    for other_id in {0, 1, 2, 3} - {recovery_id}:
        assert recover_public_key(signature, other_id, message_hash) != pub_key

    assert recover_public_key(signature, 4, message_hash) is None


def test_compact_encoding():
    signature = ecdsa(random_private_key(), token_bytes(32))
    compact = encode_compact(signature, 2)

    assert len(compact) == 65
    assert compact[0] == 27 + 2 + 4
    assert decode_compact(compact) == (signature, 2, True)
    assert decode_compact(encode_compact(signature, 1, compressed=False)) == (signature, 1, False)

    with pytest.raises(ECDSAError):
        decode_compact(compact[1:])
    with pytest.raises(ECDSAError):
        decode_compact(b'\x01' + compact[1:])


def test_der_encoding():
    signature = ecdsa(random_private_key(), token_bytes(32))
    der = encode_der_signature(signature)

    assert der[0] == 0x30
    assert decode_der_signature(der) == signature

    with pytest.raises(ECDSAError):
        decode_der_signature(b'\x30\x01\x02')

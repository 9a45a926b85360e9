"""
Tests for signed message blobs and the child key derivation behind them
"""
from secrets import token_bytes

import pytest

from sigma_protocol.core import SignedMessageError
from sigma_protocol.crypto import PubKey, sign_message, verify_message, decode_signed_message, \
    derive_child_private_key, derive_child_public_key

ALICE = 0x1234567890abcdef
BOB = 0xfedcba0987654321
CAROL = 0x1111111111111111


def test_child_keys_agree():
    """
    The sender's child private key matches the child public key derived by the counterparty
    """
    invoice = "2-message signing-test"
    child_private = derive_child_private_key(ALICE, PubKey(BOB), invoice)
    child_public = derive_child_public_key(PubKey(ALICE), BOB, invoice)
    assert PubKey(child_private) == child_public


def test_anyone_can_verify():
    message = token_bytes(32)
    blob = sign_message(message, ALICE)

    decoded = decode_signed_message(blob)
    assert decoded.signer == PubKey(ALICE)
    assert decoded.recipient is None
    assert blob[:4].hex() == "42423301"
    assert blob[37] == 0x00

    assert verify_message(message, blob)
    assert not verify_message(token_bytes(32), blob), "Signature should not verify for another message"


def test_recipient_restricted():
    message = token_bytes(32)
    blob = sign_message(message, ALICE, PubKey(BOB))

    assert decode_signed_message(blob).recipient == PubKey(BOB)
    assert verify_message(message, blob, BOB)

    with pytest.raises(SignedMessageError):
        verify_message(message, blob)
    with pytest.raises(SignedMessageError):
        verify_message(message, blob, CAROL)


def test_key_id():
    message = token_bytes(32)
    key_id = b'\x07' * 32

    blob = sign_message(message, ALICE, key_id=key_id)
    assert decode_signed_message(blob).key_id == key_id
    assert decode_signed_message(blob).invoice_number == "2-message signing-" + "BwcH" * 10 + "Bwc="
    assert sign_message(message, ALICE, key_id=key_id) == blob, "Signing should be deterministic for a fixed key id"

    with pytest.raises(SignedMessageError):
        sign_message(message, ALICE, key_id=b'\x07' * 16)


def test_malformed_blobs():
    blob = sign_message(token_bytes(32), ALICE)

    with pytest.raises(SignedMessageError):
        decode_signed_message(b'\x00' + blob[1:])
    with pytest.raises(SignedMessageError):
        decode_signed_message(blob[:20])
    with pytest.raises(SignedMessageError):
        decode_signed_message(blob[:-3])

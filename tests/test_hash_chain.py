"""
Tests for the input, data and message hashes
"""
import hashlib

import pytest

from sigma_protocol.core import MissingStateError
from sigma_protocol.script import Script
from sigma_protocol.sigma import input_hash, data_hash, message_hash, resolve_vin, signed_data, LocalCryptoBackend, \
    serialize_instance, Algorithm
from sigma_protocol.tx import TxInput, TxOutput, Transaction
from tests.utility import INPUT_TXID, P2PKH_ASM

DUMMY_HASH = hashlib.sha256(b'\x00' * 32).digest()


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def test_resolve_vin():
    assert resolve_vin(3, -1) == 3
    assert resolve_vin(3, 0) == 0
    assert resolve_vin(0, 2) == 2


def test_input_hash_outpoint(fake_backend):
    tx = Transaction([TxInput(INPUT_TXID, 1)], [TxOutput(0, b'')])

    assert input_hash(tx, 0, 0, fake_backend) == sha256(INPUT_TXID + b'\x01\x00\x00\x00')
    assert fake_backend.hashed == [INPUT_TXID + b'\x01\x00\x00\x00'], "Only the outpoint should be hashed"


def test_input_hash_dummy(fake_backend):
    """
    Missing inputs and inputs without a previous txid hash the 32 zero byte placeholder
    """
    no_inputs = Transaction(outputs=[TxOutput(0, b'')])
    placeholder = Transaction([TxInput(None, 0)], [TxOutput(0, b'')])
    zero_txid = Transaction([TxInput(b'\x00' * 32, 5)], [TxOutput(0, b'')])

    for tx in (no_inputs, placeholder, zero_txid):
        assert input_hash(tx, 0, 0, fake_backend) == DUMMY_HASH
    assert input_hash(placeholder, 0, 3, fake_backend) == DUMMY_HASH


def test_input_hash_self_reference():
    backend = LocalCryptoBackend()
    inputs = [TxInput(INPUT_TXID, 0), TxInput(INPUT_TXID[::-1], 7)]
    tx = Transaction(inputs, [TxOutput(0, b''), TxOutput(0, b'')])

    assert input_hash(tx, 1, -1, backend) == sha256(inputs[1].outpoint)
    assert input_hash(tx, 1, 0, backend) == sha256(inputs[0].outpoint)


def test_data_hash_without_instance(fake_backend):
    script = Script.from_asm(P2PKH_ASM)
    assert data_hash(script, 0, fake_backend) == sha256(script.to_bytes())
    assert fake_backend.hashed == [script.to_bytes()]


def test_data_hash_excludes_separator(fake_backend):
    first = serialize_instance(Algorithm.ECDSA, "1first", "0102", 0)
    second = serialize_instance(Algorithm.ECDSA, "1second", "0304", 0)
    script = Script.from_bytes(Script.from_asm(f"{P2PKH_ASM} OP_RETURN {first} OP_SWAP {second}").to_bytes())
    script_bytes = script.to_bytes()
    p2pkh_bytes = Script.from_asm(P2PKH_ASM).to_bytes()

    assert signed_data(script, 0) == p2pkh_bytes
    assert signed_data(script, 1) == p2pkh_bytes + b'\x6a' + Script.from_asm(first).to_bytes()
    assert signed_data(script, 2) == script_bytes, "Empty slots cover the whole script"

    assert data_hash(script, 1, fake_backend) == sha256(signed_data(script, 1))


def test_message_hash(fake_backend):
    a, b = sha256(b'a'), sha256(b'b')
    assert message_hash(a, b, fake_backend) == sha256(a + b)

    with pytest.raises(MissingStateError):
        message_hash(None, b, fake_backend)
    with pytest.raises(MissingStateError):
        message_hash(a, None, fake_backend)

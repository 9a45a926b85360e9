"""
We test the various parts of a transaction
"""
from secrets import token_bytes

import pytest

from sigma_protocol.core import TX, ReadError
from sigma_protocol.script import Script
from sigma_protocol.tx import TxInput, TxOutput, Transaction
from tests.utility import getrand_txinput, getrand_txoutput, getrand_tx, P2PKH_ASM, INPUT_TXID


def test_txinput():
    """
    We test the serialization and class method of TxInput
    """
    random_txinput = getrand_txinput()
    recovered_txinput = TxInput.from_bytes(random_txinput.to_bytes())

    assert recovered_txinput == random_txinput, "Failed to reconstruct TxInput using to_bytes -> from_bytes method"


def test_txoutput():
    """
    We test the serialization and class method of TxOutput
    """
    random_txoutput = getrand_txoutput()
    recovered_txoutput = TxOutput.from_bytes(random_txoutput.to_bytes())

    assert recovered_txoutput == random_txoutput, "Failed to reconstruct TxOutput using to_bytes -> from_bytes method"


def test_tx():
    random_tx = getrand_tx()
    recovered_tx = Transaction.from_bytes(random_tx.to_bytes())

    assert recovered_tx == random_tx, "Failed to reconstruct Transaction using to_bytes -> from_bytes method"
    assert recovered_tx.txid == random_tx.txid


def test_outpoint():
    tx_input = TxInput(INPUT_TXID, 3)
    assert tx_input.outpoint == INPUT_TXID + b'\x03\x00\x00\x00'
    assert tx_input.has_known_txid


def test_placeholder_input():
    """
    Inputs without a previous txid serialize as zeros and are not known
    """
    placeholder = TxInput(None, 0)
    assert not placeholder.has_known_txid
    assert placeholder.to_bytes()[:TX.TXID] == b'\x00' * TX.TXID
    assert placeholder.to_dict()["txid"] is None

    zeros = TxInput.from_bytes(placeholder.to_bytes())
    assert not zeros.has_known_txid


def test_display_txid():
    tx_input = TxInput.from_display_txid(INPUT_TXID[::-1].hex(), 1)
    assert tx_input.txid == INPUT_TXID
    assert tx_input.to_dict()["txid"] == INPUT_TXID[::-1].hex()


def test_output_script():
    output = TxOutput(5000, Script.from_asm(P2PKH_ASM))
    assert output.script.to_asm() == P2PKH_ASM
    assert output.to_dict()["asm"] == P2PKH_ASM


def test_copy_is_independent():
    tx = getrand_tx()
    tx_copy = tx.copy()
    assert tx_copy == tx
    assert tx_copy is not tx

    tx_copy.set_output(0, TxOutput(1, token_bytes(10)))
    assert tx_copy != tx
    assert tx_copy.txid != tx.txid


def test_add_elements():
    tx = Transaction()
    empty_txid = tx.txid

    tx.add_input(getrand_txinput())
    tx.add_output(getrand_txoutput())
    assert tx.txid != empty_txid, "Cached txid should be invalidated"
    assert tx.get_input(0) is tx.inputs[0]
    assert tx.get_input(1) is None
    assert tx.get_output(-1) is None


def test_truncated_tx():
    data = getrand_tx().to_bytes()
    with pytest.raises(ReadError):
        Transaction.from_bytes(data[:-2])

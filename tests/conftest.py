"""
Fixtures used in the tests
"""
import pytest

from sigma_protocol.data import decode_wif
from sigma_protocol.script import Script
from sigma_protocol.tx import TxInput, TxOutput, Transaction
from tests.utility import FakeBackend, WIF_1, WIF_2, INPUT_TXID, P2PKH_ASM, DATA_ASM


@pytest.fixture()
def private_key():
    return decode_wif(WIF_1)


@pytest.fixture()
def private_key_2():
    return decode_wif(WIF_2)


@pytest.fixture()
def fake_backend():
    return FakeBackend()


@pytest.fixture()
def data_tx():
    """
    One output holding OP_0 OP_RETURN pushdata1 pushdata2, no inputs
    """
    return Transaction(outputs=[TxOutput(0, Script.from_asm(DATA_ASM))])


@pytest.fixture()
def p2pkh_tx():
    """
    One funded input and a single P2PKH output without any OP_RETURN
    """
    tx_input = TxInput(INPUT_TXID, 0, Script.from_asm(P2PKH_ASM).to_bytes())
    return Transaction([tx_input], [TxOutput(1000, Script.from_asm(P2PKH_ASM))])

"""
Tests for the sigma command line interface
"""
import json

from sigma_protocol.cli import main
from tests.utility import WIF_1, ADDRESS_1


def run(capsys, *argv):
    code = main(list(argv))
    out, err = capsys.readouterr()
    return code, out, err


def test_hashes(capsys, p2pkh_tx):
    code, out, _ = run(capsys, "hashes", p2pkh_tx.to_hex())
    result = json.loads(out)

    assert code == 0
    assert result["instance_count"] == 0
    assert result["instance_position"] == -1
    assert len(bytes.fromhex(result["message_hash"])) == 32


def test_sign_then_verify(capsys, p2pkh_tx):
    code, out, _ = run(capsys, "sign", p2pkh_tx.to_hex(), "--key", WIF_1)
    signed = json.loads(out)

    assert code == 0
    assert signed["address"] == ADDRESS_1
    assert signed["algorithm"] == "ECDSA"

    code, out, _ = run(capsys, "verify", signed["signed_tx"])
    result = json.loads(out)
    assert code == 0
    assert result["valid"] is True
    assert result["sig"]["address"] == ADDRESS_1


def test_verify_unsigned(capsys, p2pkh_tx):
    code, out, err = run(capsys, "verify", p2pkh_tx.to_hex())
    assert code == 2
    assert out == ""
    assert err.startswith("Error:")


def test_bad_transaction_hex(capsys):
    code, _, err = run(capsys, "hashes", "zz")
    assert code == 2
    assert "Error:" in err


def test_remote_sign_needs_full_auth(capsys, p2pkh_tx):
    code, _, err = run(capsys, "remote-sign", p2pkh_tx.to_hex(), "--host", "http://localhost", "--auth-type", "header")
    assert code == 2
    assert "--auth-key" in err

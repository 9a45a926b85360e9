"""
Tests for the remote signing client and Sigma.remote_sign
"""
import base64
from unittest import mock

import pytest
import requests

from sigma_protocol.core import RemoteSignerError, RecoveryMissingError
from sigma_protocol.crypto import PubKey, ecdsa, magic_hash, calculate_recovery_id, encode_compact, \
    encode_der_signature
from sigma_protocol.sigma import Sigma, AuthToken, request_signature
from tests.utility import ADDRESS_1

HOST = "https://signer.example.com/"
MESSAGE = bytes(range(32))


def fake_response(status_code: int = 200, body=None, text: str = ""):
    response = mock.Mock()
    response.status_code = status_code
    response.text = text
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


def fake_session(response):
    session = mock.Mock()
    session.post.return_value = response
    return session


def local_signature(private_key: int, message_hash: bytes):
    """
    Returns (r, s) and the recovery id a remote signer would produce for the message hash
    """
    digest = magic_hash(message_hash)
    signature = ecdsa(private_key, digest)
    recovery_id = calculate_recovery_id(signature, digest, PubKey(private_key).to_point())
    return signature, recovery_id


# --- request_signature --- #

def test_request_format():
    session = fake_session(fake_response(body={"address": ADDRESS_1, "sig": "AQI=", "ts": 1700000000}))
    result = request_signature(HOST, MESSAGE, session=session, timeout=5)

    session.post.assert_called_once_with(
        "https://signer.example.com/sign",
        json={"message": MESSAGE.hex(), "encoding": "hex"},
        headers={"Content-Type": "application/json"},
        params=None,
        timeout=5
    )
    assert result.address == ADDRESS_1
    assert result.sig == "AQI="
    assert result.ts == 1700000000
    assert result.recovery is None


def test_header_auth():
    session = fake_session(fake_response(body={"address": ADDRESS_1, "sig": "AQI="}))
    request_signature(HOST, MESSAGE, AuthToken("header", "X-Auth-Token", "secret"), session=session)

    _, kwargs = session.post.call_args
    assert kwargs["headers"]["X-Auth-Token"] == "secret"
    assert kwargs["params"] is None


def test_query_auth():
    session = fake_session(fake_response(body={"address": ADDRESS_1, "sig": "AQI="}))
    request_signature(HOST, MESSAGE, AuthToken("query", "token", "secret"), session=session)

    _, kwargs = session.post.call_args
    assert kwargs["params"] == {"token": "secret"}
    assert "token" not in kwargs["headers"]


def test_unknown_auth_type():
    with pytest.raises(ValueError):
        request_signature(HOST, MESSAGE, AuthToken("cookie", "a", "b"), session=fake_session(fake_response()))


def test_default_transport():
    response = fake_response(body={"address": ADDRESS_1, "sig": "AQI="})
    with mock.patch("sigma_protocol.sigma.remote.requests.post", return_value=response) as post:
        request_signature(HOST, MESSAGE)
    post.assert_called_once()


def test_transport_failure():
    session = mock.Mock()
    session.post.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(RemoteSignerError):
        request_signature(HOST, MESSAGE, session=session)
    assert session.post.call_count == 1, "Failed requests are not retried"


def test_error_status():
    session = fake_session(fake_response(status_code=500, text="internal error"))

    with pytest.raises(RemoteSignerError) as exc_info:
        request_signature(HOST, MESSAGE, session=session)
    assert exc_info.value.status_code == 500
    assert exc_info.value.body == "internal error"


def test_unusable_body():
    for body in (ValueError("not json"), {"address": ADDRESS_1}, {"sig": "AQI="}, ["not", "a", "dict"]):
        with pytest.raises(RemoteSignerError):
            request_signature(HOST, MESSAGE, session=fake_session(fake_response(body=body)))


# --- Sigma.remote_sign --- #

def remote_sign_with(p2pkh_tx, private_key, encode):
    """
    Signs through a fake remote signer which answers with encode(signature, recovery_id) -> (sig bytes, recovery)
    """
    sigma = Sigma(p2pkh_tx)
    signature, recovery_id = local_signature(private_key, sigma.get_message_hash())
    raw, recovery = encode(signature, recovery_id)

    body = {"address": ADDRESS_1, "sig": base64.b64encode(raw).decode(), "recovery": recovery}
    session = fake_session(fake_response(body=body))
    response = sigma.remote_sign(HOST, session=session)
    return sigma, response


def test_remote_sign_compact(p2pkh_tx, private_key):
    sigma, response = remote_sign_with(p2pkh_tx, private_key, lambda sig, rec: (encode_compact(sig, rec), None))

    assert response.address == ADDRESS_1
    assert response.signature == Sigma(p2pkh_tx).sign(private_key).signature
    assert sigma.verify()


def test_remote_sign_raw(p2pkh_tx, private_key):
    def raw(signature, recovery_id):
        r, s = signature
        return r.to_bytes(32, "big") + s.to_bytes(32, "big"), recovery_id

    sigma, response = remote_sign_with(p2pkh_tx, private_key, raw)
    assert len(base64.b64decode(response.signature)) == 65
    assert sigma.verify()


def test_remote_sign_der(p2pkh_tx, private_key):
    sigma, _ = remote_sign_with(p2pkh_tx, private_key, lambda sig, rec: (encode_der_signature(sig), rec))
    assert sigma.verify()


def test_remote_sign_missing_recovery(p2pkh_tx, private_key):
    def raw(signature, recovery_id):
        r, s = signature
        return r.to_bytes(32, "big") + s.to_bytes(32, "big"), None

    with pytest.raises(RecoveryMissingError):
        remote_sign_with(p2pkh_tx, private_key, raw)


def test_remote_sign_invalid_recovery(p2pkh_tx, private_key):
    with pytest.raises(RemoteSignerError):
        remote_sign_with(p2pkh_tx, private_key, lambda sig, rec: (encode_der_signature(sig), 7))


def test_remote_sign_invalid_base64(p2pkh_tx):
    body = {"address": ADDRESS_1, "sig": "not base64!"}
    sigma = Sigma(p2pkh_tx)

    with pytest.raises(RemoteSignerError):
        sigma.remote_sign(HOST, session=fake_session(fake_response(body=body)))
    assert sigma.get_sig_instance_count() == 0, "A failed remote sign must leave the transaction unchanged"

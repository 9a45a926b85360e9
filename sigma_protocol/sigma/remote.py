"""
Client for delegating a Sigma message hash to a remote signer

    POST {host}/sign[?key=value]
    {"message": <hex message hash>, "encoding": "hex"}

    -> {"address": ..., "sig": <base64>, "message": ..., "ts": ..., "recovery": ...}
"""
from dataclasses import dataclass
from typing import Literal, Optional

import requests

from sigma_protocol.core import REMOTE, RemoteSignerError
from sigma_protocol.core.logging import get_logger

logger = get_logger(__name__)

__all__ = ["AuthToken", "RemoteSignature", "request_signature"]


@dataclass(frozen=True)
class AuthToken:
    type: Literal["header", "query"]
    key: str
    value: str


@dataclass(frozen=True)
class RemoteSignature:
    address: str
    sig: str
    message: Optional[str] = None
    ts: Optional[int] = None
    recovery: Optional[int] = None


def request_signature(signer_host: str, message_hash: bytes, auth_token: Optional[AuthToken] = None,
                      timeout: float = REMOTE.TIMEOUT, session: Optional[requests.Session] = None) -> RemoteSignature:
    """
    Sends one signing request to the remote signer. Raises RemoteSignerError on transport failure, a non-2xx
    status or a response body missing the address or signature.
    """
    url = signer_host.rstrip("/") + REMOTE.SIGN_PATH
    headers = {"Content-Type": "application/json"}
    params = None

    if auth_token is not None:
        if auth_token.type == "header":
            headers[auth_token.key] = auth_token.value
        elif auth_token.type == "query":
            params = {auth_token.key: auth_token.value}
        else:
            raise ValueError(f"Unknown auth token type: {auth_token.type}")

    payload = {"message": message_hash.hex(), "encoding": REMOTE.ENCODING}
    http = session or requests

    try:
        response = http.post(url, json=payload, headers=headers, params=params, timeout=timeout)
    except requests.RequestException as e:
        logger.error(f"Remote signer request to {url} failed: {e}")
        raise RemoteSignerError(f"Remote signer request failed: {e}") from e

    if not 200 <= response.status_code < 300:
        logger.error(f"Remote signer returned {response.status_code}: {response.text}")
        raise RemoteSignerError(f"Remote signer returned status {response.status_code}",
                                status_code=response.status_code, body=response.text)

    try:
        body = response.json()
        return RemoteSignature(
            address=body["address"],
            sig=body["sig"],
            message=body.get("message"),
            ts=body.get("ts"),
            recovery=body.get("recovery")
        )
    except (ValueError, KeyError, TypeError) as e:
        logger.error(f"Unusable remote signer response: {response.text}")
        raise RemoteSignerError(f"Unusable remote signer response: {e}", status_code=response.status_code,
                                body=response.text) from e

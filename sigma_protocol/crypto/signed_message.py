"""
Self-describing signed messages with optional recipient restriction (BRC-77 layout)

    -------------------------------------------------------------
    |   Field           |   Byte Size   |   Format              |
    -------------------------------------------------------------
    |   version         |   4           |   0x42423301          |
    |   signer          |   33          |   compressed pubkey   |
    |   recipient       |   1 or 33     |   0x00 | pubkey       |
    |   key_id          |   32          |   random bytes        |
    |   signature       |   var         |   DER                 |
    -------------------------------------------------------------

The signature is made with the signer's child key for the invoice "2-message signing-<base64(key_id)>",
derived against the recipient. A recipient of 0x00 means anyone may verify: the counterparty is then the
private key 1, whose public key is the generator.
"""
import base64
import secrets
from dataclasses import dataclass
from typing import Optional

from sigma_protocol.core import SIGMA, ECC, SignedMessageError, PubKeyError, ECDSAError
from sigma_protocol.crypto.ecdsa import ecdsa, verify_ecdsa, encode_der_signature, decode_der_signature
from sigma_protocol.crypto.hash_functions import sha256
from sigma_protocol.crypto.key_derivation import derive_child_private_key, derive_child_public_key
from sigma_protocol.crypto.keys import PubKey

__all__ = ["SignedMessage", "sign_message", "verify_message", "decode_signed_message"]

ANYONE_PRIVATE_KEY = 1


@dataclass(frozen=True)
class SignedMessage:
    signer: PubKey
    recipient: Optional[PubKey]
    key_id: bytes
    signature: tuple

    @property
    def invoice_number(self) -> str:
        return _invoice_number(self.key_id)


def _invoice_number(key_id: bytes) -> str:
    return SIGMA.SIGNED_MESSAGE_INVOICE_PREFIX + base64.b64encode(key_id).decode("ascii")


def sign_message(message: bytes, private_key: int, verifier: Optional[PubKey] = None,
                 key_id: Optional[bytes] = None) -> bytes:
    """
    Signs the message. If a verifier public key is given, only the holder of its private key can verify.
    """
    key_id = key_id or secrets.token_bytes(SIGMA.SIGNED_MESSAGE_KEY_ID_BYTES)
    if len(key_id) != SIGMA.SIGNED_MESSAGE_KEY_ID_BYTES:
        raise SignedMessageError("Key id must be 32 bytes")

    counterparty = verifier if verifier is not None else PubKey(ANYONE_PRIVATE_KEY)
    signing_key = derive_child_private_key(private_key, counterparty, _invoice_number(key_id))
    der = encode_der_signature(ecdsa(signing_key, sha256(message)))

    recipient_bytes = SIGMA.SIGNED_MESSAGE_ANYONE if verifier is None else verifier.compressed()
    return SIGMA.SIGNED_MESSAGE_VERSION + PubKey(private_key).compressed() + recipient_bytes + key_id + der


def decode_signed_message(blob: bytes) -> SignedMessage:
    """
    Splits a signed message blob into its fields
    """
    version_len = len(SIGMA.SIGNED_MESSAGE_VERSION)
    if blob[:version_len] != SIGMA.SIGNED_MESSAGE_VERSION:
        raise SignedMessageError(f"Unsupported signed message version: {blob[:version_len].hex()}")

    pos = version_len
    try:
        signer = PubKey.from_compressed(blob[pos:pos + ECC.COMPRESSED_BYTES])
        pos += ECC.COMPRESSED_BYTES

        if blob[pos:pos + 1] == SIGMA.SIGNED_MESSAGE_ANYONE:
            recipient = None
            pos += 1
        else:
            recipient = PubKey.from_compressed(blob[pos:pos + ECC.COMPRESSED_BYTES])
            pos += ECC.COMPRESSED_BYTES
    except PubKeyError as e:
        raise SignedMessageError(f"Invalid public key in signed message: {e}") from e

    key_id = blob[pos:pos + SIGMA.SIGNED_MESSAGE_KEY_ID_BYTES]
    pos += SIGMA.SIGNED_MESSAGE_KEY_ID_BYTES
    if len(key_id) != SIGMA.SIGNED_MESSAGE_KEY_ID_BYTES:
        raise SignedMessageError("Signed message truncated")

    try:
        signature = decode_der_signature(blob[pos:])
    except ECDSAError as e:
        raise SignedMessageError(str(e)) from e

    return SignedMessage(signer, recipient, key_id, signature)


def verify_message(message: bytes, blob: bytes, recipient: Optional[int] = None) -> bool:
    """
    Verifies a signed message blob. Raises SignedMessageError if the blob is restricted to a recipient
    and no matching recipient private key is given.
    """
    decoded = decode_signed_message(blob)

    if decoded.recipient is None:
        recipient = ANYONE_PRIVATE_KEY
    elif recipient is None:
        raise SignedMessageError(
            f"Signature can only be verified by the holder of {decoded.recipient.compressed().hex()}")
    elif PubKey(recipient) != decoded.recipient:
        raise SignedMessageError(
            f"Signature requires recipient {decoded.recipient.compressed().hex()}, "
            f"got {PubKey(recipient).compressed().hex()}")

    signing_pubkey = derive_child_public_key(decoded.signer, recipient, decoded.invoice_number)
    return verify_ecdsa(decoded.signature, sha256(message), signing_pubkey.to_point())

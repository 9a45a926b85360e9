"""
The Sigma signing context

A Sigma wraps a transaction, the output holding the signatures (target_vout), the signature slot it works on
(sigma_instance) and the input bound into the signature (ref_vin). Signing never mutates the wrapped transaction:
each successful sign commits a fresh copy carrying the updated locking script.

    Unsigned --sign--> Signed --sign same slot--> Replaced
    Selecting another slot and signing creates an independent Signed slot.
"""
import base64
import binascii
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sigma_protocol.core import SIGMA, REMOTE, ECC, NoSignatureError, NoTransactionError, TargetOutputError, \
    RecoveryMissingError, RemoteSignerError, ECDSAError, UnreadableInstanceError
from sigma_protocol.core.logging import get_logger
from sigma_protocol.crypto import PubKey, decode_der_signature, encode_compact
from sigma_protocol.data import decode_private_key
from sigma_protocol.script import Script, OP_RETURN
from sigma_protocol.sigma.algorithms import Algorithm, sign_recoverable, verify_recoverable, sign_alt, verify_alt
from sigma_protocol.sigma.backend import CryptoBackend, LocalCryptoBackend
from sigma_protocol.sigma.hash_chain import input_hash, data_hash, message_hash, resolve_vin
from sigma_protocol.sigma.instances import parse_instances, find_instance, count_instances, \
    find_instance_position, serialize_instance
from sigma_protocol.sigma.remote import AuthToken, request_signature
from sigma_protocol.tx import Transaction, TxOutput

logger = get_logger(__name__)

__all__ = ["Sig", "SignResponse", "WriteMode", "resolve_write_mode", "Sigma"]

PRIVATE_KEY = int | bytes | str


@dataclass(frozen=True)
class Sig:
    address: str
    signature: str  # base64
    algorithm: Algorithm
    vin: int
    target_vout: int

    @property
    def signature_bytes(self) -> bytes:
        return base64.b64decode(self.signature)

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "signature": self.signature,
            "algorithm": self.algorithm.value,
            "vin": self.vin,
            "target_vout": self.target_vout
        }


@dataclass(frozen=True)
class SignResponse(Sig):
    sigma_script: Script
    signed_tx: Transaction

    @property
    def sig(self) -> Sig:
        return Sig(self.address, self.signature, self.algorithm, self.vin, self.target_vout)

    def to_dict(self) -> dict:
        sig_dict = super().to_dict()
        sig_dict.update({
            "sigma_script": self.sigma_script.to_asm(),
            "signed_tx": self.signed_tx.to_hex()
        })
        return sig_dict


class WriteMode(Enum):
    REPLACE = "replace"
    APPEND = "append"


def resolve_write_mode(sigma_instance: int, instance_count: int) -> WriteMode:
    """
    An occupied slot is overwritten. Any other slot appends a new instance after the existing script.
    """
    if 0 <= sigma_instance < instance_count:
        return WriteMode.REPLACE
    return WriteMode.APPEND


class Sigma:
    """
    Signing context for a single transaction output
    """

    def __init__(self, transaction: Optional[Transaction], target_vout: int = 0, sigma_instance: int = 0,
                 ref_vin: int = 0, backend: Optional[CryptoBackend] = None):
        self._transaction = transaction
        self._target_vout = target_vout
        self._sigma_instance = sigma_instance
        self._ref_vin = ref_vin
        self.backend = backend or LocalCryptoBackend()
        self._input_hash: Optional[bytes] = None
        self._data_hash: Optional[bytes] = None

        if self._transaction is not None:
            self.set_hashes()

    # --- PROPERTIES --- #

    @property
    def transaction(self) -> Optional[Transaction]:
        return self._transaction

    @property
    def target_vout(self) -> int:
        return self._target_vout

    @property
    def sigma_instance(self) -> int:
        return self._sigma_instance

    @property
    def ref_vin(self) -> int:
        return self._ref_vin

    @property
    def vin(self) -> int:
        return resolve_vin(self._target_vout, self._ref_vin)

    @property
    def target_txout(self) -> Optional[TxOutput]:
        if self._transaction is None:
            return None
        return self._transaction.get_output(self._target_vout)

    @property
    def message_hash(self) -> bytes:
        return self.get_message_hash()

    @property
    def sig(self) -> Optional[Sig]:
        """
        The signature stored in the selected slot of the target output, if any
        """
        output = self.target_txout
        if output is None:
            return None
        instance = find_instance(output.script, self._sigma_instance)
        if instance is None:
            return None
        return Sig(instance.address, instance.signature, instance.algorithm, instance.vin, self._target_vout)

    # --- HASHES --- #

    def _target_script(self) -> Script:
        if self._transaction is None:
            raise NoTransactionError("No transaction provided")
        output = self.target_txout
        if output is None:
            raise TargetOutputError(
                f"Target output {self._target_vout} not in transaction with {len(self._transaction.outputs)} outputs")
        return output.script

    def get_input_hash(self) -> bytes:
        if self._transaction is None:
            raise NoTransactionError("No transaction provided")
        return input_hash(self._transaction, self._target_vout, self._ref_vin, self.backend)

    def get_data_hash(self) -> bytes:
        return data_hash(self._target_script(), self._sigma_instance, self.backend)

    def get_message_hash(self) -> bytes:
        """
        Uses the cached input and data hashes. Call set_hashes() after mutating the transaction directly.
        """
        return message_hash(self._input_hash, self._data_hash, self.backend)

    def set_hashes(self):
        self._input_hash = self.get_input_hash()
        self._data_hash = self.get_data_hash()
        logger.debug(f"Input hash {self._input_hash.hex()}, data hash {self._data_hash.hex()}")

    # --- SELECTION --- #

    def set_target_vout(self, target_vout: int):
        self._target_vout = target_vout
        if self._transaction is not None:
            self.set_hashes()

    def set_sigma_instance(self, sigma_instance: int):
        self._sigma_instance = sigma_instance
        if self._transaction is not None:
            self.set_hashes()

    def get_sig_instance_count(self) -> int:
        return count_instances(self._target_script())

    def get_sig_instance_position(self) -> int:
        return find_instance_position(self._target_script(), self._sigma_instance)

    # --- SIGNING --- #

    def sign(self, private_key: PRIVATE_KEY, algorithm: Algorithm | str = Algorithm.ECDSA,
             verifier: Optional[PubKey | bytes | str] = None) -> SignResponse:
        """
        Signs the selected slot and commits a new transaction carrying the signature.

        For ALT signatures a verifier public key restricts verification to the holder of its private key.
        """
        self.set_hashes()
        message = self.get_message_hash()
        key = decode_private_key(private_key)
        algorithm = Algorithm(algorithm)

        if algorithm is Algorithm.ECDSA:
            signature = sign_recoverable(self.backend, key, message)
        else:
            signature = sign_alt(self.backend, key, message, _verifier_bytes(verifier))

        address = self.backend.address(self.backend.public_key(key))
        return self._embed(algorithm, address, signature)

    def remote_sign(self, signer_host: str, auth_token: Optional[AuthToken] = None,
                    timeout: float = REMOTE.TIMEOUT, session=None) -> SignResponse:
        """
        Has a remote signer sign the message hash, then embeds the result as an ECDSA instance
        """
        self.set_hashes()
        message = self.get_message_hash()
        response = request_signature(signer_host, message, auth_token, timeout, session)

        try:
            raw_signature = base64.b64decode(response.sig, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.error(f"Remote signer returned a signature that is not base64: {response.sig}")
            raise RemoteSignerError(f"Invalid base64 signature from remote signer: {e}") from e

        signature = _compact_signature(raw_signature, response.recovery)
        return self._embed(Algorithm.ECDSA, response.address, signature)

    def _embed(self, algorithm: Algorithm, address: str, signature: bytes) -> SignResponse:
        vin = self.vin
        sigma_script = Script.from_asm(serialize_instance(algorithm, address, signature.hex(), vin))
        instance_bytes = sigma_script.to_bytes()

        script = self._target_script()
        script_bytes = script.to_bytes()
        instances = parse_instances(script)
        mode = resolve_write_mode(self._sigma_instance, len(instances))

        if mode is WriteMode.REPLACE:
            slot = self._sigma_instance
            location = instances[slot].location
            new_script = script_bytes[:location.start] + instance_bytes + script_bytes[location.end:]
        else:
            slot = len(instances)
            separator = SIGMA.PIPE if script.contains_op(OP_RETURN) else OP_RETURN
            new_script = script_bytes + bytes([separator]) + instance_bytes

        # Raw OP_RETURN data that is not a sequence of pushes can absorb the new instance
        written = find_instance(Script.from_bytes(new_script), slot)
        if written is None or written.address != address or written.signature_bytes != signature:
            logger.error(f"Instance for {address} is unreadable in output {self._target_vout}, script left unsigned")
            raise UnreadableInstanceError(
                f"Output {self._target_vout} carries OP_RETURN data that is not a sequence of pushes, "
                f"an instance written there cannot be read back")

        if slot != self._sigma_instance:
            logger.warning(f"Slot {self._sigma_instance} is past the last instance, signature appended as slot {slot}")
            self._sigma_instance = slot
        logger.debug(f"{mode.value} {algorithm.value} instance for {address} in output {self._target_vout}")

        signed_tx = self._transaction.copy()
        signed_tx.set_output(self._target_vout, TxOutput(self.target_txout.amount, new_script))
        self._transaction = signed_tx

        return SignResponse(
            address=address,
            signature=base64.b64encode(signature).decode("ascii"),
            algorithm=algorithm,
            vin=vin,
            target_vout=self._target_vout,
            sigma_script=sigma_script,
            signed_tx=signed_tx
        )

    # --- VERIFICATION --- #

    def verify(self, recipient_private_key: Optional[PRIVATE_KEY] = None) -> bool:
        """
        Checks the signature in the selected slot against the message hash derived from the current state
        """
        self.set_hashes()
        sig = self.sig
        if sig is None:
            raise NoSignatureError("No signature data provided")
        message = self.get_message_hash()

        if sig.algorithm is Algorithm.ECDSA:
            return verify_recoverable(self.backend, message, sig.signature_bytes, sig.address)

        recipient = decode_private_key(recipient_private_key) if recipient_private_key is not None else None
        return verify_alt(self.backend, message, sig.signature_bytes, sig.address, recipient)

    def to_dict(self) -> dict:
        sig = self.sig
        return {
            "target_vout": self._target_vout,
            "sigma_instance": self._sigma_instance,
            "ref_vin": self._ref_vin,
            "input_hash": self._input_hash.hex() if self._input_hash else None,
            "data_hash": self._data_hash.hex() if self._data_hash else None,
            "instance_count": self.get_sig_instance_count() if self.target_txout is not None else 0,
            "sig": sig.to_dict() if sig else None
        }


def _verifier_bytes(verifier: Optional[PubKey | bytes | str]) -> Optional[bytes]:
    if verifier is None or isinstance(verifier, bytes):
        return verifier
    if isinstance(verifier, PubKey):
        return verifier.compressed()
    return bytes.fromhex(verifier)


def _compact_signature(raw_signature: bytes, recovery: Optional[int]) -> bytes:
    """
    Normalizes a remote signature to the 65-byte compact form. Accepts compact, 64-byte r || s or DER; the last
    two need the recovery id.
    """
    if len(raw_signature) == SIGMA.COMPACT_SIG_BYTES:
        return raw_signature

    if recovery is None:
        raise RecoveryMissingError("Remote signature has no recovery id")
    if recovery not in SIGMA.RECOVERY_IDS:
        raise RemoteSignerError(f"Invalid recovery id from remote signer: {recovery}")

    if len(raw_signature) == 2 * ECC.COORD_BYTES:
        r = int.from_bytes(raw_signature[:ECC.COORD_BYTES], "big")
        s = int.from_bytes(raw_signature[ECC.COORD_BYTES:], "big")
        return encode_compact((r, s), recovery)

    try:
        return encode_compact(decode_der_signature(raw_signature), recovery)
    except ECDSAError as e:
        raise RemoteSignerError(f"Unreadable signature from remote signer: {e}") from e

"""
The digest a Sigma signature commits to

    input_hash   = SHA256(outpoint of the referenced input)      or SHA256(32 zero bytes) if unavailable
    data_hash    = SHA256(script bytes before the instance separator)   or SHA256(whole script) if no instance
    message_hash = SHA256(input_hash || data_hash)
"""
from typing import Optional

from sigma_protocol.core import SIGMA, MissingStateError
from sigma_protocol.core.logging import get_logger
from sigma_protocol.script import Script
from sigma_protocol.sigma.backend import CryptoBackend
from sigma_protocol.sigma.instances import find_instance
from sigma_protocol.tx import Transaction

logger = get_logger(__name__)

__all__ = ["resolve_vin", "input_hash", "signed_data", "data_hash", "message_hash"]


def resolve_vin(target_vout: int, ref_vin: int) -> int:
    """
    A ref_vin of -1 binds the input with the same index as the target output
    """
    return target_vout if ref_vin == -1 else ref_vin


def input_hash(transaction: Transaction, target_vout: int, ref_vin: int, backend: CryptoBackend) -> bytes:
    vin = resolve_vin(target_vout, ref_vin)
    tx_input = transaction.get_input(vin)
    if tx_input is not None and tx_input.has_known_txid:
        return backend.sha256(tx_input.outpoint)

    logger.warning(f"Input {vin} missing or without a previous txid, using dummy input hash")
    return backend.sha256(SIGMA.DUMMY_INPUT)


def signed_data(script: Script, sigma_instance: int) -> bytes:
    """
    The script bytes covered by the given instance's signature
    """
    script_bytes = script.to_bytes()
    instance = find_instance(script, sigma_instance)
    if instance is None:
        return script_bytes
    return script_bytes[:instance.location.separator_start]


def data_hash(script: Script, sigma_instance: int, backend: CryptoBackend) -> bytes:
    return backend.sha256(signed_data(script, sigma_instance))


def message_hash(input_hash: Optional[bytes], data_hash: Optional[bytes], backend: CryptoBackend) -> bytes:
    if input_hash is None or data_hash is None:
        raise MissingStateError("Input hash and data hash must be set")
    return backend.sha256(input_hash + data_hash)

"""
The custom exceptions used throughout sigma_protocol
"""
__all__ = ["StreamError", "ReadError", "OpCodeError", "ScriptError", "DataEncodingError", "ECDSAError",
           "PubKeyError", "SignedMessageError", "SigmaError", "MissingStateError", "NoSignatureError",
           "NoTransactionError", "RecoveryMissingError", "RemoteSignerError", "MalformedInstanceError",
           "TargetOutputError", "UnreadableInstanceError"]


# --- TRANSACTION / SCRIPT / CRYPTO LAYER --- #

class StreamError(Exception):
    """
    Catchall for stream errors
    """
    pass


class ReadError(StreamError):
    """
    For when trying to read data of length n from the stream and receiving data of length < n
    """
    pass


class OpCodeError(Exception):
    """
    For use when parsing script op codes
    """
    pass


class ScriptError(Exception):
    """
    For use in the Script class, e.g. unparseable ASM
    """
    pass


class DataEncodingError(Exception):
    """
    For use in encoding/decoding algorithms
    """
    pass


class ECDSAError(Exception):
    """
    Raised during ECDSA operations for out of bounds values
    """
    pass


class PubKeyError(Exception):
    """
    Used for Pubkey errors
    """
    pass


class SignedMessageError(Exception):
    """
    For use when decoding or verifying signed message blobs
    """
    pass


# --- SIGMA ENGINE --- #

class SigmaError(Exception):
    """
    Parent class for errors raised by the Sigma signing context
    """
    pass


class MissingStateError(SigmaError):
    """
    Message hash requested before the input and data hashes have been computed
    """
    pass


class NoSignatureError(SigmaError):
    """
    Verification requested but no signature instance is selected
    """
    pass


class NoTransactionError(SigmaError):
    """
    Input or data hash requested without a backing transaction
    """
    pass


class RecoveryMissingError(SigmaError):
    """
    The ECDSA path could not produce a recovery identifier
    """
    pass


class TargetOutputError(SigmaError):
    """
    The target output index does not exist in the transaction
    """
    pass


class MalformedInstanceError(SigmaError):
    """
    A Sigma instance window could not be decoded. Caught by the instance codec, which skips the instance.
    """
    pass


class UnreadableInstanceError(SigmaError):
    """
    A freshly embedded instance could not be found when the new locking script was parsed back
    """
    pass


class RemoteSignerError(SigmaError):
    """
    Transport failure or non-2xx response from a remote signer
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

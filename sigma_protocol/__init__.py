"""
sigma_protocol: detachable, replay resistant signatures embedded in transaction outputs
"""
from sigma_protocol.sigma import Sigma, Sig, SignResponse, Algorithm, AuthToken, WriteMode, resolve_write_mode, \
    CryptoBackend, LocalCryptoBackend
from sigma_protocol.tx import Transaction, TxInput, TxOutput
from sigma_protocol.script import Script

__all__ = ["Sigma", "Sig", "SignResponse", "Algorithm", "AuthToken", "WriteMode", "resolve_write_mode",
           "CryptoBackend", "LocalCryptoBackend", "Transaction", "TxInput", "TxOutput", "Script"]

__version__ = "0.1.0"

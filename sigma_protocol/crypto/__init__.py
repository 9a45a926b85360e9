"""
crypto folder used to house all files dealing with elliptic curves, hash functions and signature algorithms
"""

# crypto/__init__.py
from sigma_protocol.crypto.hash_functions import *
from sigma_protocol.crypto.ecc import *
from sigma_protocol.crypto.ecdsa import *
from sigma_protocol.crypto.keys import *
from sigma_protocol.crypto.key_derivation import *
from sigma_protocol.crypto.signed_message import *

"""
Transaction classes
"""
# tx/__init__.py
from sigma_protocol.tx.tx import *

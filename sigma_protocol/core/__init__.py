"""
Contains the core elements that are used within sigma_protocol

Core:
    -Provides the standard serialization protocol for transaction and script elements
    -Provides the reference formats and wire constants
    -Provides custom exceptions for the transaction layer and the Sigma engine
"""
# core/__init__.py
from sigma_protocol.core.byte_stream import *
from sigma_protocol.core.exceptions import *
from sigma_protocol.core.formats import *
from sigma_protocol.core.logging import *
from sigma_protocol.core.serializable import *

"""
All methods for manipulating and representing data in sigma_protocol
"""

# data/__init__.py
from sigma_protocol.data.compact_size import *
from sigma_protocol.data.encoding import *

"""
All methods for dealing with elements of Bitcoin Script language
"""
# script/__init__.py
from sigma_protocol.script.chunk import *
from sigma_protocol.script.parser import *
from sigma_protocol.script.script import *

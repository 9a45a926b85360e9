"""
The Sigma signature engine: hash chain, instance codec, algorithms, remote signer client and signing context
"""
# sigma/__init__.py
from sigma_protocol.sigma.backend import *
from sigma_protocol.sigma.algorithms import *
from sigma_protocol.sigma.instances import *
from sigma_protocol.sigma.hash_chain import *
from sigma_protocol.sigma.remote import *
from sigma_protocol.sigma.context import *

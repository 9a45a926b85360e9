"""
Base class for objects with a wire serialization: transactions, their inputs and outputs, and scripts
"""
import json
from abc import ABC, abstractmethod

from sigma_protocol.core.byte_stream import SERIALIZED

__all__ = ["Serializable"]


class Serializable(ABC):
    """
    Subclasses supply from_bytes, to_bytes and to_dict. Equality and hashing follow the serialized bytes,
    so two objects are equal exactly when they encode identically.
    """

    @classmethod
    @abstractmethod
    def from_bytes(cls, byte_stream: SERIALIZED):
        raise NotImplementedError(f"{cls.__name__} must implement from_bytes()")

    @classmethod
    def from_hex(cls, hex_string: str):
        return cls.from_bytes(bytes.fromhex(hex_string))

    @abstractmethod
    def to_bytes(self) -> bytes:
        raise NotImplementedError(f"{self.__class__.__name__} must implement to_bytes()")

    @abstractmethod
    def to_dict(self) -> dict:
        raise NotImplementedError(f"{self.__class__.__name__} must implement to_dict()")

    @property
    def length(self) -> int:
        """Serialized size in bytes"""
        return len(self.to_bytes())

    def to_hex(self) -> str:
        return self.to_bytes().hex()

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Serializable):
            return NotImplemented
        return type(self) is type(other) and self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.to_bytes()))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_hex()})"

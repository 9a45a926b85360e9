"""
Reading fixed width fields from serialized transactions and scripts
"""
from io import BytesIO
from typing import Union, Optional

from .exceptions import ReadError

__all__ = ["SERIALIZED", "get_stream", "read_stream", "read_little_int", "read_remaining"]

SERIALIZED = Union[bytes, BytesIO]


def get_stream(byte_stream: SERIALIZED) -> BytesIO:
    """Wrap raw bytes in a stream. Streams are passed through so nested readers share a position"""
    if isinstance(byte_stream, BytesIO):
        return byte_stream
    if isinstance(byte_stream, (bytes, bytearray)):
        return BytesIO(bytes(byte_stream))
    raise TypeError(f"Expected bytes or BytesIO but received: {type(byte_stream)}")


def read_stream(stream: BytesIO, length: int, field: Optional[str] = None) -> bytes:
    """
    Read exactly length bytes. A short read raises ReadError naming the field and the shortfall.
    """
    data = stream.read(length)
    if len(data) != length:
        where = f" reading {field}" if field else ""
        raise ReadError(f"Insufficient data{where}: wanted {length} bytes, got {len(data)}")
    return data


def read_little_int(stream: BytesIO, length: int, field: Optional[str] = None) -> int:
    return int.from_bytes(read_stream(stream, length, field), "little")


def read_remaining(stream: BytesIO) -> bytes:
    """Everything left in the stream, possibly empty"""
    return stream.read()

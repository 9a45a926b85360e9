"""
Locating, decoding and encoding Sigma instances inside a locking script

An instance is five pushes: SIGMA | algorithm | address | signature | vin. It appears in one of two places:

    inline:  the pushes are top-level chunks of the script, preceded by a separator (OP_RETURN or "|")
    nested:  the pushes live inside the payload of a top-level OP_RETURN, which is parsed as a sub-script

A single scanner walks both placements in encounter order. Every location records absolute byte offsets in the
serialized script, so the data hash and in-place replacement work directly on the script bytes.
"""
import base64
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from sigma_protocol.core import SIGMA, OpCodeError, MalformedInstanceError
from sigma_protocol.core.logging import get_logger
from sigma_protocol.script import Script, ScriptChunk, OP_RETURN, parse_chunks
from sigma_protocol.sigma.algorithms import Algorithm

logger = get_logger(__name__)

__all__ = ["InlineLocation", "NestedLocation", "ParsedInstance", "scan_instances", "parse_instances",
           "count_instances", "find_instance", "find_instance_position", "serialize_instance"]


@dataclass(frozen=True)
class InlineLocation:
    """
    position: top-level chunk index of the marker
    separator_start: byte offset of the separator chunk; the signed data is everything before it
    start, end: byte span of the five instance pushes
    """
    position: int
    separator_start: int
    start: int
    end: int


@dataclass(frozen=True)
class NestedLocation:
    """
    position: top-level chunk index of the OP_RETURN carrying the instance
    separator_start: byte offset of the separator chunk inside the payload, or of the carrying OP_RETURN
                     when the marker opens the payload
    start, end: byte span of the five instance pushes, measured in the full script
    """
    position: int
    separator_start: int
    start: int
    end: int


Location = Union[InlineLocation, NestedLocation]


@dataclass(frozen=True)
class ParsedInstance:
    algorithm: Algorithm
    address: str
    signature: str
    vin: int
    location: Location

    @property
    def signature_bytes(self) -> bytes:
        return base64.b64decode(self.signature)


def _chunk_offsets(chunks: list[ScriptChunk], base: int) -> list[int]:
    offsets = []
    pos = base
    for chunk in chunks:
        offsets.append(pos)
        pos += len(chunk.to_bytes())
    return offsets


def _decode_fields(window: list[ScriptChunk]) -> tuple[Algorithm, str, bytes, int]:
    """
    Decodes algorithm, address, signature and vin from a marker window
    """
    fields = [c.push_data for c in window[1:]]
    if any(f is None for f in fields):
        raise MalformedInstanceError("Instance field is not a data push")

    algorithm_bytes, address_bytes, signature, vin_bytes = fields
    try:
        algorithm = Algorithm(algorithm_bytes.decode("utf-8"))
        address = address_bytes.decode("utf-8")
        vin_text = vin_bytes.decode("utf-8")
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedInstanceError(f"Undecodable instance field: {e}") from e

    if not (vin_text.isascii() and vin_text.isdigit()):
        raise MalformedInstanceError(f"Instance vin is not a decimal number: {vin_text!r}")

    return algorithm, address, signature, int(vin_text)


def _scan(chunks: list[ScriptChunk], base: int, carrier: Optional[int],
          payload_separator: Optional[int]) -> Iterator[ParsedInstance]:
    """
    chunks: the (sub-)script being scanned, starting at byte offset base of the full script
    carrier: top-level chunk index of the OP_RETURN whose payload is being scanned, None at top level
    payload_separator: byte offset of the OP_RETURN whose payload this is
    """
    offsets = _chunk_offsets(chunks, base)
    fields = SIGMA.INSTANCE_FIELDS
    i = 0

    while i < len(chunks):
        chunk = chunks[i]

        if chunk.push_data == SIGMA.MARKER:
            window = chunks[i:i + fields]
            if len(window) < fields:
                logger.debug(f"Discarding truncated instance at chunk {i}")
                i += 1
                continue
            try:
                algorithm, address, signature, vin = _decode_fields(window)
            except MalformedInstanceError as e:
                logger.warning(f"Skipping malformed instance at chunk {i}: {e}")
                i += 1
                continue

            start = offsets[i]
            end = offsets[i + fields - 1] + len(window[-1].to_bytes())
            if i > 0:
                separator_start = offsets[i - 1]
            else:
                separator_start = payload_separator if payload_separator is not None else base

            if carrier is None:
                location = InlineLocation(i, separator_start, start, end)
            else:
                location = NestedLocation(carrier, separator_start, start, end)

            yield ParsedInstance(algorithm, address, base64.b64encode(signature).decode("ascii"), vin, location)
            i += fields
            continue

        if chunk.op == OP_RETURN and chunk.data:
            try:
                payload_chunks = parse_chunks(chunk.data)
            except OpCodeError as e:
                logger.debug(f"OP_RETURN payload at chunk {i} is not a script: {e}")
            else:
                yield from _scan(payload_chunks, offsets[i] + 1, i if carrier is None else carrier, offsets[i])

        i += 1


def scan_instances(script: Script) -> Iterator[ParsedInstance]:
    """
    Yields every well formed instance in the script in encounter order
    """
    return _scan(script.chunks, 0, None, None)


def parse_instances(script: Script) -> list[ParsedInstance]:
    return list(scan_instances(script))


def count_instances(script: Script) -> int:
    return sum(1 for _ in scan_instances(script))


def find_instance(script: Script, index: int) -> Optional[ParsedInstance]:
    instances = parse_instances(script)
    if 0 <= index < len(instances):
        return instances[index]
    return None


def find_instance_position(script: Script, index: int) -> int:
    """
    Top-level chunk index at which the index-th instance begins, -1 if there is none
    """
    instance = find_instance(script, index)
    return instance.location.position if instance is not None else -1


def serialize_instance(algorithm: Algorithm | str, address: str, signature_hex: str, vin: int) -> str:
    """
    Returns the ASM for the five instance pushes
    """
    algorithm = Algorithm(algorithm)
    return " ".join([
        SIGMA.MARKER_HEX,
        algorithm.value.encode("utf-8").hex(),
        address.encode("utf-8").hex(),
        signature_hex,
        str(vin).encode("utf-8").hex()
    ])

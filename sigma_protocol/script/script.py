"""
The Script class: an ordered list of ScriptChunks with binary and ASM forms

A top-level OP_RETURN carries the remainder of the script as a raw payload. When rendered to ASM the payload
is parsed and rendered in turn, so that the ASM of a script with OP_RETURN data reads like any other script.
"""
from sigma_protocol.core import Serializable, SERIALIZED, get_stream, read_remaining, OpCodeError
from sigma_protocol.script.chunk import ScriptChunk, OP_RETURN
from sigma_protocol.script.parser import parse_chunks, parse_asm

__all__ = ["Script"]


class Script(Serializable):
    __slots__ = ("chunks",)

    def __init__(self, chunks: list[ScriptChunk] = None):
        self.chunks = chunks or []

    @classmethod
    def from_bytes(cls, byte_stream: SERIALIZED):
        """
        Reads the script from the remainder of the stream
        """
        return cls(parse_chunks(read_remaining(get_stream(byte_stream))))

    @classmethod
    def from_asm(cls, asm: str):
        return cls(parse_asm(asm))

    def to_bytes(self) -> bytes:
        return b''.join(c.to_bytes() for c in self.chunks)

    def to_asm(self) -> str:
        return " ".join(_chunk_asm(c) for c in self.chunks)

    def to_dict(self) -> dict:
        return {
            "asm": self.to_asm(),
            "hex": self.to_hex(),
            "size": self.length
        }

    @property
    def chunk_offsets(self) -> list[int]:
        """
        Byte offset of each chunk within the serialized script
        """
        offsets = []
        pos = 0
        for chunk in self.chunks:
            offsets.append(pos)
            pos += len(chunk.to_bytes())
        return offsets

    def contains_op(self, op: int) -> bool:
        """
        True if any top-level chunk has the given op code
        """
        return any(c.op == op for c in self.chunks)

    def push(self, data: bytes) -> "Script":
        self.chunks.append(ScriptChunk.push(data))
        return self

    def append_op(self, op: int) -> "Script":
        self.chunks.append(ScriptChunk(op))
        return self

    def __len__(self):
        return len(self.chunks)

    def __iter__(self):
        return iter(self.chunks)

    def __getitem__(self, item):
        return self.chunks[item]


def _chunk_asm(chunk: ScriptChunk) -> str:
    if chunk.op != OP_RETURN or not chunk.data:
        return chunk.to_asm()

    try:
        payload_asm = Script(parse_chunks(chunk.data)).to_asm()
    except OpCodeError:
        # Unparseable payload, shown as a single hex blob
        payload_asm = chunk.data.hex()
    return f"{chunk.to_asm()} {payload_asm}"

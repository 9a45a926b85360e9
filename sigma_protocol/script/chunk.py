"""
A single element of a script: an op code, with its pushed data or OP_RETURN payload
"""
from dataclasses import dataclass
from typing import Optional

from sigma_protocol.core import OPCODES

__all__ = ["ScriptChunk", "OP_0", "OP_PUSHDATA1", "OP_PUSHDATA2", "OP_PUSHDATA4", "OP_IF", "OP_NOTIF",
           "OP_ENDIF", "OP_RETURN"]

OP_0 = 0x00
OP_PUSHDATA1 = 0x4c
OP_PUSHDATA2 = 0x4d
OP_PUSHDATA4 = 0x4e
OP_IF = 0x63
OP_NOTIF = 0x64
OP_ENDIF = 0x68
OP_RETURN = 0x6a


@dataclass(frozen=True)
class ScriptChunk:
    """
    For push op codes (OP_0 through OP_PUSHDATA4) data holds the pushed bytes.
    For a top-level OP_RETURN, data holds the raw remainder of the script (the payload), or None.
    """
    op: int
    data: Optional[bytes] = None

    @classmethod
    def push(cls, data: bytes) -> "ScriptChunk":
        """
        Returns the minimal push chunk for the given data
        """
        length = len(data)
        if length == 0:
            return cls(OP_0)
        elif length <= 0x4b:
            return cls(length, data)
        elif length <= 0xff:
            return cls(OP_PUSHDATA1, data)
        elif length <= 0xffff:
            return cls(OP_PUSHDATA2, data)
        return cls(OP_PUSHDATA4, data)

    @property
    def is_push(self) -> bool:
        return self.op <= OP_PUSHDATA4

    @property
    def push_data(self) -> Optional[bytes]:
        """
        The bytes placed on the stack by a push chunk, None for any other op code
        """
        if not self.is_push:
            return None
        return self.data or b''

    def to_bytes(self) -> bytes:
        data = self.data or b''
        if self.op == OP_0:
            return b'\x00'
        elif self.op <= 0x4b:
            return bytes([self.op]) + data
        elif self.op == OP_PUSHDATA1:
            return bytes([self.op]) + len(data).to_bytes(1, "little") + data
        elif self.op == OP_PUSHDATA2:
            return bytes([self.op]) + len(data).to_bytes(2, "little") + data
        elif self.op == OP_PUSHDATA4:
            return bytes([self.op]) + len(data).to_bytes(4, "little") + data
        # OP_RETURN payload is appended raw
        return bytes([self.op]) + data

    def to_asm(self) -> str:
        if self.op == OP_0:
            return "OP_0"
        if self.is_push:
            return self.push_data.hex()
        return OPCODES.get(self.op, f"OP_UNKNOWN{self.op}")

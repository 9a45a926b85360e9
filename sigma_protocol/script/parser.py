"""
Methods for parsing script from its binary and ASM forms
"""
import re

from sigma_protocol.core import OpCodeError, ScriptError, OPCODE_NAMES
from sigma_protocol.script.chunk import ScriptChunk, OP_0, OP_PUSHDATA1, OP_PUSHDATA2, OP_PUSHDATA4, OP_IF, \
    OP_NOTIF, OP_ENDIF, OP_RETURN

__all__ = ["parse_chunks", "parse_asm"]

_PUSHDATA_WIDTH = {OP_PUSHDATA1: 1, OP_PUSHDATA2: 2, OP_PUSHDATA4: 4}
_HEX_TOKEN = re.compile(r"(?:[0-9a-fA-F]{2})+")
_UNKNOWN_TOKEN = re.compile(r"OP_UNKNOWN(\d+)")


def parse_chunks(data: bytes) -> list[ScriptChunk]:
    """
    Splits a serialized script into chunks.

    An OP_RETURN outside of any OP_IF/OP_NOTIF block ends execution, so it takes the remainder of the
    script as its payload and parsing stops there.
    """
    pos = 0
    length = len(data)
    depth = 0
    chunks = []

    while pos < length:
        opcode_int = data[pos]
        pos += 1

        # Direct push length (0x01-0x4b) - most common case first
        if 0x01 <= opcode_int <= 0x4b:
            if pos + opcode_int > length:
                raise OpCodeError("Script truncated during push operation")
            chunks.append(ScriptChunk(opcode_int, data[pos:pos + opcode_int]))
            pos += opcode_int

        # OP_PUSHDATA
        elif opcode_int in _PUSHDATA_WIDTH:
            width = _PUSHDATA_WIDTH[opcode_int]
            if pos + width > length:
                raise OpCodeError(f"Script truncated during {opcode_int:02x} length prefix")
            push_length = int.from_bytes(data[pos:pos + width], "little")
            pos += width

            if pos + push_length > length:
                raise OpCodeError(f"Script truncated during {opcode_int:02x} data")
            chunks.append(ScriptChunk(opcode_int, data[pos:pos + push_length]))
            pos += push_length

        elif opcode_int == OP_RETURN and depth == 0:
            payload = data[pos:]
            chunks.append(ScriptChunk(OP_RETURN, payload or None))
            break

        else:
            if opcode_int in (OP_IF, OP_NOTIF):
                depth += 1
            elif opcode_int == OP_ENDIF and depth > 0:
                depth -= 1
            chunks.append(ScriptChunk(opcode_int))

    return chunks


def parse_asm(asm: str) -> list[ScriptChunk]:
    """
    Parses space separated ASM: op code names, "0"/"-1" shorthands and hex pushes.
    No OP_RETURN payload folding takes place here; serializing the chunks gives the same bytes either way.
    """
    chunks = []
    for token in asm.split():
        if token in ("0", "OP_0", "OP_FALSE"):
            chunks.append(ScriptChunk(OP_0))
        elif token == "-1":
            chunks.append(ScriptChunk(OPCODE_NAMES["OP_1NEGATE"]))
        elif token in ("OP_PUSHDATA1", "OP_PUSHDATA2", "OP_PUSHDATA4"):
            raise ScriptError(f"Push op codes are implied by hex data in ASM: {token}")
        elif token in OPCODE_NAMES:
            chunks.append(ScriptChunk(OPCODE_NAMES[token]))
        elif _UNKNOWN_TOKEN.fullmatch(token):
            chunks.append(ScriptChunk(int(_UNKNOWN_TOKEN.fullmatch(token).group(1))))
        elif _HEX_TOKEN.fullmatch(token):
            chunks.append(ScriptChunk.push(bytes.fromhex(token)))
        else:
            raise ScriptError(f"Unrecognized ASM token: {token}")
    return chunks

"""
The classes for legacy (non-segwit) transactions
"""
from typing import Optional

from sigma_protocol.core import Serializable, SERIALIZED, get_stream, read_little_int, read_stream, TX
from sigma_protocol.crypto import hash256
from sigma_protocol.data import write_compact_size, read_compact_size
from sigma_protocol.script import Script

__all__ = ["TxInput", "TxOutput", "Transaction"]

# --- CACHE KEYS --- #
TXID_KEY = "txid"

UNKNOWN_TXID = b'\x00' * TX.TXID


class TxInput(Serializable):
    """
    =============================================================================
    |   name            |   data type   |   format              |   byte size   |
    =============================================================================
    |   txid            |   bytes       |   natural byte order  |   32          |
    |   vout            |   int         |   little-endian       |   4           |
    |   scriptsig_size  |               |   compactSize         |   var         |
    |   scriptsig       |   bytes       |   script bytes        |   var         |
    |   sequence        |   int         |   little-endian       |   4           |
    =============================================================================
    A txid of None marks a placeholder input whose previous output is not yet known. It serializes as zeros.
    """
    __slots__ = ("txid", "vout", "scriptsig", "sequence")

    def __init__(self, txid: Optional[bytes], vout: int | bytes, scriptsig: bytes = b'',
                 sequence: int | bytes = TX.DEFAULT_SEQUENCE):
        self.txid = txid
        self.vout = vout if isinstance(vout, int) else int.from_bytes(vout, "little")
        self.scriptsig = scriptsig
        self.sequence = sequence if isinstance(sequence, int) else int.from_bytes(sequence, "little")

    @classmethod
    def from_display_txid(cls, txid_hex: str, vout: int, scriptsig: bytes = b'',
                          sequence: int = TX.DEFAULT_SEQUENCE):
        """
        Create an input from the reversed hex txid shown by block explorers
        """
        return cls(bytes.fromhex(txid_hex)[::-1], vout, scriptsig, sequence)

    @property
    def has_known_txid(self) -> bool:
        return self.txid is not None and self.txid != UNKNOWN_TXID

    @property
    def outpoint(self) -> bytes:
        return (self.txid or UNKNOWN_TXID) + self.vout.to_bytes(TX.VOUT, "little")

    @classmethod
    def from_bytes(cls, byte_stream: SERIALIZED):
        stream = get_stream(byte_stream)

        txid = read_stream(stream, TX.TXID, "txid")
        vout = read_little_int(stream, TX.VOUT, "vout")
        scriptsig_size = read_compact_size(stream, "scriptsig_size")
        scriptsig = read_stream(stream, scriptsig_size, "scriptsig")
        sequence = read_little_int(stream, TX.SEQUENCE, "sequence")

        return cls(txid, vout, scriptsig, sequence)

    def to_bytes(self) -> bytes:
        """
        Serialize input
        txid || vout || scriptsig_size || scriptsig || sequence
        """
        parts = [
            self.outpoint,
            write_compact_size(len(self.scriptsig)),
            self.scriptsig,
            self.sequence.to_bytes(TX.SEQUENCE, "little")
        ]
        return b''.join(parts)

    def to_dict(self) -> dict:
        return {
            "txid": self.txid[::-1].hex() if self.txid is not None else None,
            "vout": self.vout,
            "scriptsig": self.scriptsig.hex(),
            "sequence": self.sequence
        }


class TxOutput(Serializable):
    """
    -----------------------------------------------------------------
    |   Field               |   Byte Size   |   Format              |
    -----------------------------------------------------------------
    |   Amount              |   8           |   little-endian       |
    |   scriptpubkey_size   |   var         |   CompactSize         |
    |   scriptpubkey        |   var         |   Script              |
    -----------------------------------------------------------------
    """
    __slots__ = ("amount", "scriptpubkey")

    def __init__(self, amount: int | bytes, scriptpubkey: bytes | Script):
        self.amount: int = amount if isinstance(amount, int) else int.from_bytes(amount, "little")
        self.scriptpubkey = scriptpubkey.to_bytes() if isinstance(scriptpubkey, Script) else scriptpubkey

    @property
    def script(self) -> Script:
        """
        The locking script, parsed from its bytes
        """
        return Script.from_bytes(self.scriptpubkey)

    @classmethod
    def from_bytes(cls, byte_stream: SERIALIZED):
        stream = get_stream(byte_stream)

        amount = read_little_int(stream, TX.AMOUNT, "amount")
        scriptpubkey_size = read_compact_size(stream, "scriptpubkey_size")
        scriptpubkey = read_stream(stream, scriptpubkey_size, "scriptpubkey")

        return cls(amount, scriptpubkey)

    def to_bytes(self) -> bytes:
        """
        amount || scriptpubkey_size || scriptpubkey
        """
        return self.amount.to_bytes(TX.AMOUNT, "little") + write_compact_size(len(self.scriptpubkey)) + \
            self.scriptpubkey

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "scriptpubkey": self.scriptpubkey.hex(),
            "asm": self.script.to_asm()
        }


class Transaction(Serializable):
    """
    -------------------------------------------------------------
    |   Field           |   Byte Size   |   Format              |
    -------------------------------------------------------------
    |   Version         |   4           |   little-endian       |
    |   input_count     |   var         |   CompactSize         |
    |   inputs          |   var         |   TxInput             |
    |   output_count    |   var         |   CompactSize         |
    |   outputs         |   var         |   TxOutput            |
    |   locktime        |   4           |   little-endian       |
    -------------------------------------------------------------
    """
    __slots__ = ("version", "inputs", "outputs", "locktime", "_cache")

    def __init__(self, inputs: list[TxInput] = None, outputs: list[TxOutput] = None, locktime: int = 0,
                 version: int = TX.DEFAULT_VERSION):
        self.inputs = inputs or []
        self.outputs = outputs or []
        self.version = version
        self.locktime = locktime
        self._cache = {}

    def _invalidate_cache(self):
        self._cache = {}

    @property
    def txid(self) -> bytes:
        """
        Return cached txid if it exists. Otherwise, return new txid
        """
        if TXID_KEY not in self._cache:
            self._cache[TXID_KEY] = hash256(self.to_bytes())
        return self._cache[TXID_KEY]

    def get_input(self, vin: int) -> Optional[TxInput]:
        if 0 <= vin < len(self.inputs):
            return self.inputs[vin]
        return None

    def get_output(self, vout: int) -> Optional[TxOutput]:
        if 0 <= vout < len(self.outputs):
            return self.outputs[vout]
        return None

    def add_input(self, tx_input: TxInput):
        self.inputs.append(tx_input)
        self._invalidate_cache()

    def add_output(self, tx_output: TxOutput):
        self.outputs.append(tx_output)
        self._invalidate_cache()

    def set_output(self, vout: int, tx_output: TxOutput):
        self.outputs[vout] = tx_output
        self._invalidate_cache()

    def copy(self) -> "Transaction":
        """
        Independent copy made through a serialization round trip
        """
        return Transaction.from_bytes(self.to_bytes())

    @classmethod
    def from_bytes(cls, byte_stream: SERIALIZED):
        stream = get_stream(byte_stream)

        version = read_little_int(stream, TX.VERSION, "version")

        input_num = read_compact_size(stream, "input_num")
        inputs = [TxInput.from_bytes(stream) for _ in range(input_num)]

        output_num = read_compact_size(stream, "output_num")
        outputs = [TxOutput.from_bytes(stream) for _ in range(output_num)]

        locktime = read_little_int(stream, TX.LOCKTIME, "locktime")

        return cls(inputs, outputs, locktime, version)

    def to_bytes(self) -> bytes:
        """
        version || input_num || inputs || output_num || outputs || locktime
        """
        parts = [
            self.version.to_bytes(TX.VERSION, "little"),
            write_compact_size(len(self.inputs)),
            b''.join(i.to_bytes() for i in self.inputs),
            write_compact_size(len(self.outputs)),
            b''.join(o.to_bytes() for o in self.outputs),
            self.locktime.to_bytes(TX.LOCKTIME, "little")
        ]
        return b''.join(parts)

    def to_dict(self) -> dict:
        return {
            "txid": self.txid[::-1].hex(),
            "version": self.version,
            "inputs": [i.to_dict() for i in self.inputs],
            "outputs": [o.to_dict() for o in self.outputs],
            "locktime": self.locktime
        }

"""
Packet Reader - sequential, bounds-checked cursor over a reply payload

Every read either returns a value and advances the cursor, or raises
PacketUnderflowError without consuming anything. Codecs therefore stop at
the first short read and never see half-decoded fields.
"""
import struct
from typing import Dict

from grokstat.exceptions import PacketUnderflowError

_INTEGER_FORMATS: Dict[str, str] = {
    "uint8": "B",
    "uint16": "H",
    "uint32": "I",
    "uint64": "Q",
    "int8": "b",
    "int16": "h",
    "int32": "i",
    "int64": "q",
}


class PacketReader:
    """
    Cursor over an immutable byte buffer.

    Supports:
    - Fixed-width reads and skips
    - Integer types (uint8/16/32/64, int8/16/32/64) with endianness
    - Sentinel-terminated byte strings and text
    """

    def __init__(self, data: bytes, offset: int = 0):
        self._data = bytes(data)
        self._offset = offset

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return max(len(self._data) - self._offset, 0)

    def _require(self, size: int) -> None:
        if size < 0 or self._offset + size > len(self._data):
            raise PacketUnderflowError(size, self._offset, self.remaining)

    def read(self, size: int) -> bytes:
        """Read exactly ``size`` bytes."""
        self._require(size)
        chunk = self._data[self._offset:self._offset + size]
        self._offset += size
        return chunk

    def skip(self, size: int) -> None:
        self._require(size)
        self._offset += size

    def read_int(self, field_type: str, endian: str = "big") -> int:
        """Read an integer of the named type, e.g. ``uint16``."""
        try:
            code = _INTEGER_FORMATS[field_type]
        except KeyError:
            raise ValueError(f"Unsupported integer type: {field_type}")
        fmt = (">" if endian == "big" else "<") + code
        return struct.unpack(fmt, self.read(struct.calcsize(fmt)))[0]

    def read_uint8(self) -> int:
        return self.read(1)[0]

    def read_uint16(self, endian: str = "big") -> int:
        return self.read_int("uint16", endian)

    def read_uint32(self, endian: str = "big") -> int:
        return self.read_int("uint32", endian)

    def read_bool(self) -> bool:
        """Any nonzero byte is true."""
        return self.read_uint8() != 0

    def read_until(self, sentinel: bytes = b"\x00") -> bytes:
        """Read up to and including ``sentinel``; the sentinel is not returned.

        A field whose sentinel never arrives is a short read.
        """
        end = self._data.find(sentinel, self._offset)
        if end < 0:
            raise PacketUnderflowError(self.remaining + len(sentinel), self._offset, self.remaining)
        chunk = self._data[self._offset:end]
        self._offset = end + len(sentinel)
        return chunk

    def read_string(self, encoding: str = "utf-8") -> str:
        """Read a NUL-terminated text field, stripping stray NUL padding."""
        raw = self.read_until(b"\x00").strip(b"\x00")
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            # Fallback to latin-1 which never fails
            return raw.decode("latin-1")

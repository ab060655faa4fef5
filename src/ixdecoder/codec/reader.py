"""
Cursor over a byte buffer.

The reader owns the current offset. Every typed read checks bounds first and
raises BufferUnderrun instead of returning a short value.
"""

import struct
from typing import Any, Callable, List, Optional

from solders.pubkey import Pubkey

from ..errors import BufferUnderrun


PUBKEY_LENGTH = 32

_INT_FORMATS = {
    "u8": ("B", 1),
    "i8": ("b", 1),
    "u16": ("H", 2),
    "i16": ("h", 2),
    "u32": ("I", 4),
    "i32": ("i", 4),
    "u64": ("Q", 8),
    "i64": ("q", 8),
    "f32": ("f", 4),
    "f64": ("d", 8),
}


def pubkey_to_str(raw: bytes) -> str:
    """Render 32 raw bytes as a base58 address."""
    return str(Pubkey.from_bytes(raw))


class ByteReader:
    """Sequential little-endian reader."""

    def __init__(self, data: bytes, offset: int = 0):
        self._data = bytes(data)
        self._offset = offset

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return max(len(self._data) - self._offset, 0)

    def __len__(self) -> int:
        return len(self._data)

    def at_end(self) -> bool:
        return self._offset >= len(self._data)

    def _take(self, n: int) -> bytes:
        if n < 0 or self._offset + n > len(self._data):
            raise BufferUnderrun(n, self._offset, len(self._data))
        chunk = self._data[self._offset:self._offset + n]
        self._offset += n
        return chunk

    def skip(self, n: int) -> None:
        self._take(n)

    def seek(self, offset: int) -> None:
        if offset < 0 or offset > len(self._data):
            raise BufferUnderrun(0, offset, len(self._data))
        self._offset = offset

    def window(self, n: int) -> "ByteReader":
        """Consume n bytes and return a reader over just those bytes."""
        return ByteReader(self._take(n))

    def peek_u8(self) -> int:
        if self._offset >= len(self._data):
            raise BufferUnderrun(1, self._offset, len(self._data))
        return self._data[self._offset]

    def read_number(self, fmt: str, endian: str = "le") -> Any:
        """Read a numeric value by format name (u8, u64, i32, f64, u128 ...)."""
        order = "<" if endian == "le" else ">"
        if fmt in ("u128", "i128"):
            raw = self._take(16)
            return int.from_bytes(
                raw,
                "little" if endian == "le" else "big",
                signed=fmt == "i128",
            )
        try:
            code, size = _INT_FORMATS[fmt]
        except KeyError:
            raise ValueError(f"unsupported number format: {fmt}") from None
        return struct.unpack(order + code, self._take(size))[0]

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_u16(self) -> int:
        return self.read_number("u16")

    def read_u32(self) -> int:
        return self.read_number("u32")

    def read_u64(self) -> int:
        return self.read_number("u64")

    def read_i64(self) -> int:
        return self.read_number("i64")

    def read_u128(self) -> int:
        return self.read_number("u128")

    def read_bool(self) -> bool:
        return self.read_u8() != 0

    def read_bytes(self, n: int) -> bytes:
        return self._take(n)

    def read_rest(self) -> bytes:
        return self._take(self.remaining)

    def read_pubkey(self) -> str:
        return pubkey_to_str(self._take(PUBKEY_LENGTH))

    def read_string(self, length_format: str = "u32") -> str:
        """Length-prefixed UTF-8 string (Borsh uses u32, bincode u64)."""
        length = self.read_number(length_format)
        return self._take(length).decode("utf-8")

    def read_vec(self, read_item: Callable[["ByteReader"], Any],
                 length_format: str = "u32") -> List[Any]:
        count = self.read_number(length_format)
        return [read_item(self) for _ in range(count)]

    def read_option(self, read_item: Callable[["ByteReader"], Any]) -> Optional[Any]:
        if self.read_u8() == 0:
            return None
        return read_item(self)

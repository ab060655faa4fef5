"""Binary reading helpers."""

from .reader import ByteReader, PUBKEY_LENGTH, pubkey_to_str

__all__ = [
    "ByteReader",
    "PUBKEY_LENGTH",
    "pubkey_to_str",
]

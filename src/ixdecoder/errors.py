"""Exception types raised inside the decoding engine.

None of these cross the public decode entry points; they are caught at the
component boundaries and turned into placeholders or error strings.
"""


class DecoderError(Exception):
    """Base class for all decoder errors."""


class BufferUnderrun(DecoderError):
    """A read would run past the end of the buffer."""

    def __init__(self, wanted: int, offset: int, length: int):
        self.wanted = wanted
        self.offset = offset
        self.length = length
        super().__init__(
            f"need {wanted} bytes at offset {offset}, buffer has {length}"
        )


class SchemaError(DecoderError):
    """A schema document cannot be used."""


class AccountLayoutError(DecoderError):
    """Account bytes do not match the expected container layout."""


class AccountFetchError(DecoderError):
    """The RPC node could not return the account."""

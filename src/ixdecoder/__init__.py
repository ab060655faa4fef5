"""
Solana multisig instruction decoder.

Turns raw program instructions and multisig transaction accounts into named,
typed trees using registered Codama or Anchor schemas and built-in decoders
for the native programs.
"""

from .config import DecoderConfig
from .decoder import DecoderFactory, InstructionDispatcher, TransactionDecoder
from .errors import DecoderError
from .models import AccountKey, DecodedAccount, DecodedInstruction, DecodedTransaction
from .schema import SchemaFormat, SchemaRegistry, detect_schema_format

__version__ = "0.1.0"

__all__ = [
    "DecoderConfig",
    "DecoderFactory",
    "InstructionDispatcher",
    "TransactionDecoder",
    "DecoderError",
    "AccountKey",
    "DecodedAccount",
    "DecodedInstruction",
    "DecodedTransaction",
    "SchemaFormat",
    "SchemaRegistry",
    "detect_schema_format",
]

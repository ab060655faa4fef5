"""Instruction dispatch and multisig transaction decoding."""

from ..models import AccountKey, DecodedAccount, DecodedInstruction, DecodedTransaction
from .cache import DecoderFactory
from .dispatcher import InstructionDispatcher
from .transaction import AttemptResult, TransactionDecoder

__all__ = [
    "DecoderFactory",
    "InstructionDispatcher",
    "AccountKey",
    "DecodedAccount",
    "DecodedInstruction",
    "DecodedTransaction",
    "AttemptResult",
    "TransactionDecoder",
]

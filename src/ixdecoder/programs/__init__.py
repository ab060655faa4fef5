"""Fixed-layout decoders for native programs."""

from typing import Dict

from .associated_token import AssociatedTokenDecoder
from .base import (
    KNOWN_PROGRAM_NAMES,
    LegacyInstruction,
    ProgramDecoder,
    TaggedProgramDecoder,
    known_program_name,
    label_accounts,
)
from .compute_budget import ComputeBudgetDecoder
from .lookup_table import AddressLookupTableDecoder
from .memo import MemoProgramDecoder
from .stake import StakeProgramDecoder
from .system import SystemProgramDecoder
from .token import TokenProgramDecoder
from .vote import VoteProgramDecoder

DECODER_CLASSES = [
    SystemProgramDecoder,
    TokenProgramDecoder,
    MemoProgramDecoder,
    ComputeBudgetDecoder,
    AssociatedTokenDecoder,
    AddressLookupTableDecoder,
    StakeProgramDecoder,
    VoteProgramDecoder,
]


def default_program_decoders(native_symbol: str = "SOL") -> Dict[str, ProgramDecoder]:
    """One decoder instance per native program id."""
    decoders: Dict[str, ProgramDecoder] = {}
    for cls in DECODER_CLASSES:
        decoder = cls(native_symbol)
        for program_id in decoder.program_ids:
            decoders[program_id] = decoder
    return decoders


__all__ = [
    "AddressLookupTableDecoder",
    "AssociatedTokenDecoder",
    "ComputeBudgetDecoder",
    "MemoProgramDecoder",
    "StakeProgramDecoder",
    "SystemProgramDecoder",
    "TokenProgramDecoder",
    "VoteProgramDecoder",
    "KNOWN_PROGRAM_NAMES",
    "LegacyInstruction",
    "ProgramDecoder",
    "TaggedProgramDecoder",
    "default_program_decoders",
    "known_program_name",
    "label_accounts",
]

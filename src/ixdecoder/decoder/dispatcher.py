"""
Instruction dispatcher.

Picks a decoding strategy per program id. Native programs go to their
fixed-layout decoder unless a Codama schema is registered for them, schema
programs go to the Codama parser or the Anchor coder, and everything else gets
a generic hex rendering. A failing branch is logged and the next one is tried.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..errors import DecoderError, SchemaError
from ..programs import ProgramDecoder, default_program_decoders, known_program_name, label_accounts
from ..programs.base import STAKE_PROGRAM_ID
from ..schema import (
    AnchorInstructionCoder,
    InstructionMatch,
    SchemaEntry,
    SchemaFormat,
    SchemaRegistry,
    is_anchor_compatible,
)
from ..formatters import format_instruction_name, format_instruction_title, truncated_hex
from ..models import AccountKey, DecodedAccount, DecodedInstruction

logger = logging.getLogger(__name__)

UNKNOWN_INSTRUCTION = "Unknown Instruction"
UNKNOWN_PROGRAM = "Unknown Program"

# Listed as native but has no decoder; always takes the generic path
CONFIG_PROGRAM_ID = "Config1111111111111111111111111111111111111"

# Parsing failures that demote a branch instead of aborting the decode
_BRANCH_ERRORS = (DecoderError, ValueError, TypeError, KeyError, IndexError, UnicodeDecodeError)


class InstructionDispatcher:
    """Routes one instruction to the decoder that understands its program."""

    def __init__(self, registry: SchemaRegistry,
                 program_decoders: Optional[Dict[str, ProgramDecoder]] = None,
                 native_symbol: str = "SOL"):
        self.registry = registry
        self.native_symbol = native_symbol
        if program_decoders is None:
            program_decoders = default_program_decoders(native_symbol)
        self.program_decoders = program_decoders
        self.anchor_coders: Dict[str, AnchorInstructionCoder] = {}
        self._build_anchor_coders()

    def _build_anchor_coders(self) -> None:
        for entry in self.registry.list_all():
            # Stake uses bincode, not Borsh, even when an IDL is registered
            if entry.program_id == STAKE_PROGRAM_ID:
                continue
            if not is_anchor_compatible(entry.format):
                continue
            try:
                self.anchor_coders[entry.program_id] = AnchorInstructionCoder.compile(entry.raw_schema)
                logger.debug("Anchor coder ready for %s (%s)", entry.name, entry.format.value)
            except (SchemaError, ValueError, TypeError, KeyError) as e:
                logger.warning("Anchor coder failed for %s: %s", entry.name, e)

    def is_known_program(self, program_id: str) -> bool:
        return program_id in self.program_decoders or program_id == CONFIG_PROGRAM_ID

    def program_name(self, program_id: str) -> str:
        return (
            self.registry.program_name(program_id)
            or known_program_name(program_id)
            or UNKNOWN_PROGRAM
        )

    def parse_instruction(self, program_id: str, data: bytes,
                          accounts: Sequence[AccountKey]) -> DecodedInstruction:
        """Decode one instruction. Never raises for malformed input."""
        data = bytes(data)
        entry = self.registry.lookup(program_id)

        if self.is_known_program(program_id):
            return self._parse_known(program_id, data, accounts, entry)

        if entry is not None and entry.format == SchemaFormat.CODAMA and entry.parser:
            decoded = self._try_codama(entry, program_id, data, accounts)
            if decoded:
                return decoded

        if entry is not None and is_anchor_compatible(entry.format):
            decoded = self._try_anchor(program_id, data, accounts)
            if decoded:
                return decoded

        return self.basic_parse(program_id, data, accounts)

    def _parse_known(self, program_id: str, data: bytes, accounts: Sequence[AccountKey],
                     entry: Optional[SchemaEntry]) -> DecodedInstruction:
        legacy = self.program_decoders.get(program_id)

        if entry is not None and entry.format == SchemaFormat.CODAMA and entry.parser:
            decoded = self._try_codama(entry, program_id, data, accounts, legacy)
            if decoded:
                return decoded

        if legacy is None:
            return self.basic_parse(program_id, data, accounts)

        try:
            decoded = legacy.decode(program_id, data, accounts)
        except _BRANCH_ERRORS as e:
            logger.warning("%s decoder failed for %s: %s", legacy.name, program_id, e)
            return self.basic_parse(program_id, data, accounts)
        decoded.program_name = self.program_name(program_id)
        return decoded

    def _try_codama(self, entry: SchemaEntry, program_id: str, data: bytes,
                    accounts: Sequence[AccountKey],
                    legacy: Optional[ProgramDecoder] = None) -> Optional[DecodedInstruction]:
        try:
            match = entry.parser.decode_instruction(data)
        except _BRANCH_ERRORS as e:
            logger.warning("Codama parser failed for %s: %s", program_id, e)
            return None
        if match is None:
            return None

        schema = entry.parser.get_instruction(match.name)
        names: List[str] = schema.account_names if schema else []
        if legacy is not None:
            fallback = legacy.account_names(data, len(accounts))
            names = [
                names[i] if i < len(names) else (fallback[i] if i < len(fallback) else "")
                for i in range(len(accounts))
            ]

        decoded = self._build(program_id, data, accounts, match, names)
        if legacy is not None:
            decoded.human_readable_summary = legacy.summary_for(data, decoded.accounts)
        return decoded

    def _try_anchor(self, program_id: str, data: bytes,
                    accounts: Sequence[AccountKey]) -> Optional[DecodedInstruction]:
        coder = self.anchor_coders.get(program_id)
        if coder is None:
            return None
        try:
            match = coder.decode(data)
        except _BRANCH_ERRORS as e:
            logger.warning("Anchor coder failed to decode for %s: %s", program_id, e)
            return None
        if match is None:
            return None
        return self._build(program_id, data, accounts, match, coder.account_names(match.name))

    def _build(self, program_id: str, data: bytes, accounts: Sequence[AccountKey],
               match: InstructionMatch, names: Sequence[str]) -> DecodedInstruction:
        name = format_instruction_name(match.name)
        return DecodedInstruction(
            program_id=program_id,
            program_name=self.program_name(program_id),
            instruction_name=name,
            instruction_title=format_instruction_title(name),
            accounts=label_accounts(names, accounts),
            args=match.fields,
            raw_data_hex=data.hex(),
        )

    def basic_parse(self, program_id: str, data: bytes,
                    accounts: Sequence[AccountKey]) -> DecodedInstruction:
        """Generic rendering for programs nothing else understands."""
        return DecodedInstruction(
            program_id=program_id,
            program_name=self.program_name(program_id),
            instruction_name=UNKNOWN_INSTRUCTION,
            instruction_title=UNKNOWN_INSTRUCTION,
            accounts=[
                DecodedAccount(f"Account {i}", acc.pubkey, acc.is_signer, acc.is_writable)
                for i, acc in enumerate(accounts)
            ],
            args={"data": truncated_hex(data)},
            raw_data_hex=data.hex(),
        )

"""Base interface for fixed-layout native program decoders."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

from ..codec import ByteReader
from ..models import AccountKey, DecodedAccount, DecodedInstruction
from ..errors import DecoderError

logger = logging.getLogger(__name__)

SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
MEMO_PROGRAM_ID = "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr"
MEMO_LEGACY_PROGRAM_ID = "Memo1UhkJRfHyvLMcVucJwxXeuD728EqVDDwQDxFMNo"
COMPUTE_BUDGET_PROGRAM_ID = "ComputeBudget111111111111111111111111111111"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
ADDRESS_LOOKUP_TABLE_PROGRAM_ID = "AddressLookupTab1e1111111111111111111111111"
STAKE_PROGRAM_ID = "Stake11111111111111111111111111111111111111"
VOTE_PROGRAM_ID = "Vote111111111111111111111111111111111111111"
SQUADS_V4_PROGRAM_ID = "SQDS4ep65T869zMMBKyuUq6aD6EgTu8psMjkvj52pCf"

KNOWN_PROGRAM_NAMES: Dict[str, str] = {
    SYSTEM_PROGRAM_ID: "System Program",
    TOKEN_PROGRAM_ID: "Token Program",
    TOKEN_2022_PROGRAM_ID: "Token-2022 Program",
    ASSOCIATED_TOKEN_PROGRAM_ID: "Associated Token Program",
    COMPUTE_BUDGET_PROGRAM_ID: "Compute Budget Program",
    MEMO_PROGRAM_ID: "Memo Program",
    MEMO_LEGACY_PROGRAM_ID: "Memo Program (Legacy)",
    ADDRESS_LOOKUP_TABLE_PROGRAM_ID: "Address Lookup Table Program",
    VOTE_PROGRAM_ID: "Vote Program",
    STAKE_PROGRAM_ID: "Stake Program",
    "Config1111111111111111111111111111111111111": "Config Program",
    "BPFLoaderUpgradeab1e11111111111111111111111": "BPF Upgradeable Loader",
    "BPFLoader2111111111111111111111111111111111": "BPF Loader",
    "BPFLoader1111111111111111111111111111111111": "BPF Loader (Deprecated)",
    "Ed25519SigVerify111111111111111111111111111": "Ed25519 Program",
    "KeccakSecp256k11111111111111111111111111111": "Secp256k1 Program",
    "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4": "Jupiter Aggregator",
    "whirLbMiicVdio4qvUfM5KAg6Ct8VwpYzGff3uctyCc": "Orca Whirlpool",
    "9W959DqEETiGZocYWCQPaJ6sBmUzgfxXfqGeTEdp3aQP": "Orca V2",
    "MERLuDFBMmsHnsBPZw2sDQZHvXFMwp8EdjudcU2HKky": "Mercurial",
    "SSwpkEEcbUqx4vtoEByFjSkhKdCT862DNVb52nZg1UZ": "Saber",
    "EewxydAPCCVuNEyrVN68PuSYdQ7wKn27V9Gjeoi8dy3S": "Lifinity",
    "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK": "Raydium CLMM",
    "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8": "Raydium AMM",
    SQUADS_V4_PROGRAM_ID: "Squads Multisig V4",
}


def known_program_name(program_id: str) -> Optional[str]:
    return KNOWN_PROGRAM_NAMES.get(program_id)


def label_accounts(names: Sequence[str], accounts: Sequence[AccountKey]) -> List[DecodedAccount]:
    """Attach positional role names; slots without a name become "Account <i>"."""
    return [
        DecodedAccount(
            name=names[i] if i < len(names) and names[i] else f"Account {i}",
            address=acc.pubkey,
            is_signer=acc.is_signer,
            is_writable=acc.is_writable,
        )
        for i, acc in enumerate(accounts)
    ]


@dataclass
class LegacyInstruction:
    """What a fixed-layout decoder extracted from one payload."""
    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    account_names: List[str] = field(default_factory=list)
    tag: Optional[int] = None


class ProgramDecoder(ABC):
    """Base class for native program decoders."""

    program_ids: Sequence[str] = ()
    # Short label used in "Unknown <label> Instruction"
    label: str = ""

    def __init__(self, native_symbol: str = "SOL"):
        self.native_symbol = native_symbol

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def parse(self, data: bytes, account_count: int = 0) -> LegacyInstruction:
        """Extract the instruction from raw data. May raise BufferUnderrun."""
        pass

    def summarize(self, parsed: LegacyInstruction,
                  accounts: Sequence[DecodedAccount]) -> Optional[str]:
        """One-line description for transfer-shaped instructions."""
        return None

    def unknown(self, tag: Optional[int] = None) -> LegacyInstruction:
        return LegacyInstruction(name=f"Unknown {self.label} Instruction", tag=tag)

    def program_name(self, program_id: str) -> str:
        return KNOWN_PROGRAM_NAMES.get(program_id, self.name)

    def safe_parse(self, data: bytes, account_count: int = 0) -> LegacyInstruction:
        try:
            return self.parse(data, account_count)
        except DecoderError as e:
            logger.debug("%s payload too short or malformed: %s", self.name, e)
            return self.unknown()

    def account_names(self, data: bytes, account_count: int = 0) -> List[str]:
        return self.safe_parse(data, account_count).account_names

    def summary_for(self, data: bytes, accounts: Sequence[DecodedAccount]) -> Optional[str]:
        return self.summarize(self.safe_parse(data, len(accounts)), accounts)

    def decode(self, program_id: str, data: bytes,
               accounts: Sequence[AccountKey]) -> DecodedInstruction:
        parsed = self.safe_parse(data, len(accounts))
        decoded_accounts = label_accounts(parsed.account_names, accounts)
        return DecodedInstruction(
            program_id=program_id,
            program_name=self.program_name(program_id),
            instruction_name=parsed.name,
            instruction_title=parsed.name,
            accounts=decoded_accounts,
            args=parsed.args,
            raw_data_hex=bytes(data).hex(),
            human_readable_summary=self.summarize(parsed, decoded_accounts),
        )


def account_address(accounts: Sequence[DecodedAccount], index: int) -> str:
    if index < len(accounts):
        return accounts[index].address
    return "Unknown"


class InstructionLayout(NamedTuple):
    """Name, account roles and argument reader for one instruction tag."""
    name: str
    accounts: Sequence[str] = ()
    read_args: Optional[Callable[[ByteReader], Dict[str, Any]]] = None


class TaggedProgramDecoder(ProgramDecoder):
    """Decoder for programs that select the instruction with a leading tag."""

    tag_format = "u8"
    layouts: Dict[int, InstructionLayout] = {}

    def parse(self, data: bytes, account_count: int = 0) -> LegacyInstruction:
        reader = ByteReader(data)
        tag = reader.read_number(self.tag_format)
        layout = self.layouts.get(tag)
        if layout is None:
            return self.unknown(tag)

        args: Dict[str, Any] = {}
        if layout.read_args is not None:
            try:
                args = layout.read_args(reader)
            except (DecoderError, UnicodeDecodeError) as e:
                # Truncated payload: keep the instruction name, drop the fields
                logger.debug("%s: %s too short: %s", self.name, layout.name, e)
        return LegacyInstruction(layout.name, args, list(layout.accounts), tag)

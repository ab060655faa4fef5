"""System program decoder (4-byte tag, bincode fields)."""

from typing import Any, Dict, Optional, Sequence

from ..codec import ByteReader
from ..formatters import format_native_amount
from ..models import DecodedAccount
from .base import (
    InstructionLayout,
    LegacyInstruction,
    SYSTEM_PROGRAM_ID,
    TaggedProgramDecoder,
    account_address,
)


def _seed(reader: ByteReader) -> str:
    # bincode strings carry a u64 length
    return reader.read_string("u64")


def _create_account(reader: ByteReader) -> Dict[str, Any]:
    return {
        "lamports": str(reader.read_u64()),
        "space": str(reader.read_u64()),
        "owner": reader.read_pubkey(),
    }


def _create_account_with_seed(reader: ByteReader) -> Dict[str, Any]:
    return {
        "base": reader.read_pubkey(),
        "seed": _seed(reader),
        "lamports": str(reader.read_u64()),
        "space": str(reader.read_u64()),
        "owner": reader.read_pubkey(),
    }


def _allocate_with_seed(reader: ByteReader) -> Dict[str, Any]:
    return {
        "base": reader.read_pubkey(),
        "seed": _seed(reader),
        "space": str(reader.read_u64()),
        "owner": reader.read_pubkey(),
    }


def _assign_with_seed(reader: ByteReader) -> Dict[str, Any]:
    return {
        "base": reader.read_pubkey(),
        "seed": _seed(reader),
        "owner": reader.read_pubkey(),
    }


def _transfer_with_seed(reader: ByteReader) -> Dict[str, Any]:
    return {
        "lamports": str(reader.read_u64()),
        "fromSeed": _seed(reader),
        "fromOwner": reader.read_pubkey(),
    }


TRANSFER = 2
TRANSFER_WITH_SEED = 11


class SystemProgramDecoder(TaggedProgramDecoder):
    program_ids = (SYSTEM_PROGRAM_ID,)
    label = "System"
    tag_format = "u32"

    layouts = {
        0: InstructionLayout(
            "Create Account", ["Funding Account", "New Account"], _create_account
        ),
        1: InstructionLayout(
            "Assign", ["Assigned Account"], lambda r: {"owner": r.read_pubkey()}
        ),
        TRANSFER: InstructionLayout(
            "Transfer", ["From", "To"], lambda r: {"lamports": str(r.read_u64())}
        ),
        3: InstructionLayout(
            "Create Account With Seed",
            ["Funding Account", "Created Account", "Base Account"],
            _create_account_with_seed,
        ),
        4: InstructionLayout(
            "Advance Nonce Account",
            ["Nonce Account", "Recent Blockhashes Sysvar", "Nonce Authority"],
        ),
        5: InstructionLayout(
            "Withdraw Nonce Account",
            ["Nonce Account", "Recipient", "Recent Blockhashes Sysvar", "Rent Sysvar", "Nonce Authority"],
            lambda r: {"lamports": str(r.read_u64())},
        ),
        6: InstructionLayout(
            "Initialize Nonce Account",
            ["Nonce Account", "Recent Blockhashes Sysvar", "Rent Sysvar"],
            lambda r: {"authority": r.read_pubkey()},
        ),
        7: InstructionLayout(
            "Authorize Nonce Account",
            ["Nonce Account", "Nonce Authority"],
            lambda r: {"newAuthority": r.read_pubkey()},
        ),
        8: InstructionLayout(
            "Allocate", ["New Account"], lambda r: {"space": str(r.read_u64())}
        ),
        9: InstructionLayout(
            "Allocate With Seed", ["Allocated Account", "Base Account"], _allocate_with_seed
        ),
        10: InstructionLayout(
            "Assign With Seed", ["Assigned Account", "Base Account"], _assign_with_seed
        ),
        TRANSFER_WITH_SEED: InstructionLayout(
            "Transfer With Seed",
            ["Funding Account", "Base Account", "Recipient"],
            _transfer_with_seed,
        ),
        12: InstructionLayout("Upgrade Nonce Account", ["Nonce Account"]),
    }

    @property
    def name(self) -> str:
        return "System Program"

    def summarize(self, parsed: LegacyInstruction,
                  accounts: Sequence[DecodedAccount]) -> Optional[str]:
        if "lamports" not in parsed.args:
            return None
        if parsed.tag == TRANSFER:
            source, destination = 0, 1
        elif parsed.tag == TRANSFER_WITH_SEED:
            source, destination = 0, 2
        else:
            return None
        amount = format_native_amount(parsed.args["lamports"], self.native_symbol)
        return (
            f"Transfer {amount} from {account_address(accounts, source)} "
            f"to {account_address(accounts, destination)}"
        )

"""SPL Token and Token-2022 decoder (1-byte tag)."""

from typing import Any, Dict, Optional, Sequence

from ..codec import ByteReader
from ..formatters import format_token_amount
from ..models import DecodedAccount
from .base import (
    InstructionLayout,
    LegacyInstruction,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    TaggedProgramDecoder,
    account_address,
)

AUTHORITY_TYPES = ["MintTokens", "FreezeAccount", "AccountOwner", "CloseAccount"]


def _initialize_mint(reader: ByteReader) -> Dict[str, Any]:
    return {
        "decimals": reader.read_u8(),
        "mintAuthority": reader.read_pubkey(),
        "freezeAuthority": reader.read_option(ByteReader.read_pubkey),
    }


def _set_authority(reader: ByteReader) -> Dict[str, Any]:
    authority_type = reader.read_u8()
    return {
        "authorityType": AUTHORITY_TYPES[authority_type] if authority_type < len(AUTHORITY_TYPES) else "Unknown",
        "newAuthority": reader.read_option(ByteReader.read_pubkey),
    }


def _amount(reader: ByteReader) -> Dict[str, Any]:
    return {"amount": str(reader.read_u64())}


def _amount_checked(reader: ByteReader) -> Dict[str, Any]:
    return {"amount": str(reader.read_u64()), "decimals": reader.read_u8()}


def _owner(reader: ByteReader) -> Dict[str, Any]:
    return {"owner": reader.read_pubkey()}


def _multisig(reader: ByteReader) -> Dict[str, Any]:
    return {"m": reader.read_u8()}


TRANSFER = 3
TRANSFER_CHECKED = 12


class TokenProgramDecoder(TaggedProgramDecoder):
    program_ids = (TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID)
    label = "Token"

    layouts = {
        0: InstructionLayout("Initialize Mint", ["Mint", "Rent Sysvar"], _initialize_mint),
        1: InstructionLayout("Initialize Account", ["Account", "Mint", "Owner", "Rent Sysvar"]),
        2: InstructionLayout("Initialize Multisig", ["Multisig", "Rent Sysvar"], _multisig),
        TRANSFER: InstructionLayout("Transfer", ["Source", "Destination", "Authority"], _amount),
        4: InstructionLayout("Approve", ["Source", "Delegate", "Owner"], _amount),
        5: InstructionLayout("Revoke", ["Source", "Owner"]),
        6: InstructionLayout("Set Authority", ["Account", "Current Authority"], _set_authority),
        7: InstructionLayout("Mint To", ["Mint", "Destination", "Authority"], _amount),
        8: InstructionLayout("Burn", ["Account", "Mint", "Authority"], _amount),
        9: InstructionLayout("Close Account", ["Account", "Destination", "Authority"]),
        10: InstructionLayout("Freeze Account", ["Account", "Mint", "Authority"]),
        11: InstructionLayout("Thaw Account", ["Account", "Mint", "Authority"]),
        TRANSFER_CHECKED: InstructionLayout(
            "Transfer Checked", ["Source", "Mint", "Destination", "Authority"], _amount_checked
        ),
        13: InstructionLayout(
            "Approve Checked", ["Source", "Mint", "Delegate", "Owner"], _amount_checked
        ),
        14: InstructionLayout("Mint To Checked", ["Mint", "Destination", "Authority"], _amount_checked),
        15: InstructionLayout("Burn Checked", ["Account", "Mint", "Authority"], _amount_checked),
        16: InstructionLayout("Initialize Account 2", ["Account", "Mint", "Rent Sysvar"], _owner),
        17: InstructionLayout("Sync Native", ["Account"]),
        18: InstructionLayout("Initialize Account 3", ["Account", "Mint"], _owner),
        19: InstructionLayout("Initialize Multisig 2", ["Multisig"], _multisig),
        20: InstructionLayout("Initialize Mint 2", ["Mint"], _initialize_mint),
    }

    @property
    def name(self) -> str:
        return "Token Program"

    def summarize(self, parsed: LegacyInstruction,
                  accounts: Sequence[DecodedAccount]) -> Optional[str]:
        if "amount" not in parsed.args:
            return None
        if parsed.tag == TRANSFER:
            amount = parsed.args["amount"]
            source, destination = 0, 1
        elif parsed.tag == TRANSFER_CHECKED:
            amount = format_token_amount(parsed.args["amount"], parsed.args["decimals"])
            source, destination = 0, 2
        else:
            return None
        return (
            f"Transfer {amount} tokens from {account_address(accounts, source)} "
            f"to {account_address(accounts, destination)}"
        )

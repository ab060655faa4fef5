"""Vote program decoder (4-byte tag, bincode fields)."""

from typing import Any, Dict

from ..codec import ByteReader
from .base import InstructionLayout, TaggedProgramDecoder, VOTE_PROGRAM_ID

VOTE_AUTHORIZE = ["Voter", "Withdrawer"]


def _vote_authorize(reader: ByteReader) -> str:
    kind = reader.read_u32()
    return VOTE_AUTHORIZE[kind] if kind < len(VOTE_AUTHORIZE) else "Unknown"


def _initialize_account(reader: ByteReader) -> Dict[str, Any]:
    return {
        "nodePubkey": reader.read_pubkey(),
        "authorizedVoter": reader.read_pubkey(),
        "authorizedWithdrawer": reader.read_pubkey(),
        "commission": reader.read_u8(),
    }


def _authorize(reader: ByteReader) -> Dict[str, Any]:
    return {"newAuthority": reader.read_pubkey(), "authorityType": _vote_authorize(reader)}


def _authorize_with_seed(reader: ByteReader) -> Dict[str, Any]:
    return {
        "authorityType": _vote_authorize(reader),
        "currentAuthorityDerivedKeyOwner": reader.read_pubkey(),
        "currentAuthorityDerivedKeySeed": reader.read_string("u64"),
        "newAuthority": reader.read_pubkey(),
    }


def _authorize_checked_with_seed(reader: ByteReader) -> Dict[str, Any]:
    return {
        "authorityType": _vote_authorize(reader),
        "currentAuthorityDerivedKeyOwner": reader.read_pubkey(),
        "currentAuthorityDerivedKeySeed": reader.read_string("u64"),
    }


_AUTHORIZE_ACCOUNTS = ["Vote Account", "Clock Sysvar", "Authority", "New Authority"]
_VOTE_ACCOUNTS = ["Vote Account", "Slot Hashes Sysvar", "Clock Sysvar", "Authority"]


class VoteProgramDecoder(TaggedProgramDecoder):
    program_ids = (VOTE_PROGRAM_ID,)
    label = "Vote"
    tag_format = "u32"

    # Vote state payloads are not expanded; only the variant is named
    layouts = {
        0: InstructionLayout(
            "Initialize Account",
            ["Vote Account", "Rent Sysvar", "Clock Sysvar", "Node Account"],
            _initialize_account,
        ),
        1: InstructionLayout("Authorize", _AUTHORIZE_ACCOUNTS, _authorize),
        2: InstructionLayout("Vote", _VOTE_ACCOUNTS),
        3: InstructionLayout(
            "Withdraw",
            ["Vote Account", "Destination", "Withdraw Authority"],
            lambda r: {"lamports": str(r.read_u64())},
        ),
        4: InstructionLayout(
            "Update Validator Identity",
            ["Vote Account", "New Validator Identity", "Withdraw Authority"],
        ),
        5: InstructionLayout(
            "Update Commission",
            ["Vote Account", "Withdraw Authority"],
            lambda r: {"commission": r.read_u8()},
        ),
        6: InstructionLayout("Vote Switch", _VOTE_ACCOUNTS),
        7: InstructionLayout(
            "Authorize Checked", _AUTHORIZE_ACCOUNTS, lambda r: {"authorityType": _vote_authorize(r)}
        ),
        8: InstructionLayout("Update Vote State", ["Vote Account", "Authority"]),
        9: InstructionLayout("Update Vote State Switch", ["Vote Account", "Authority"]),
        10: InstructionLayout(
            "Authorize With Seed",
            ["Vote Account", "Clock Sysvar", "Base Account"],
            _authorize_with_seed,
        ),
        11: InstructionLayout(
            "Authorize Checked With Seed",
            ["Vote Account", "Clock Sysvar", "Base Account", "New Authority"],
            _authorize_checked_with_seed,
        ),
        12: InstructionLayout("Compact Update Vote State", ["Vote Account", "Authority"]),
        13: InstructionLayout("Compact Update Vote State Switch", ["Vote Account", "Authority"]),
        14: InstructionLayout("Tower Sync", ["Vote Account", "Authority"]),
        15: InstructionLayout("Tower Sync Switch", ["Vote Account", "Authority"]),
    }

    @property
    def name(self) -> str:
        return "Vote Program"

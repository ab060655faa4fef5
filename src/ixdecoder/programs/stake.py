"""Stake program decoder (4-byte tag, bincode fields)."""

from typing import Any, Dict

from ..codec import ByteReader
from .base import (
    InstructionLayout,
    STAKE_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TaggedProgramDecoder,
)

STAKE_AUTHORIZE = ["Staker", "Withdrawer"]


def _stake_authorize(reader: ByteReader) -> str:
    kind = reader.read_u32()
    return STAKE_AUTHORIZE[kind] if kind < len(STAKE_AUTHORIZE) else "Unknown"


def _initialize(reader: ByteReader) -> Dict[str, Any]:
    staker = reader.read_pubkey()
    withdrawer = reader.read_pubkey()
    unix_timestamp = reader.read_i64()
    epoch = reader.read_u64()
    custodian = reader.read_pubkey()
    return {
        "authorized": {"staker": staker, "withdrawer": withdrawer},
        "lockup": {
            "unixTimestamp": str(unix_timestamp),
            "epoch": str(epoch),
            # The all-zero key means no custodian
            "custodian": None if custodian == SYSTEM_PROGRAM_ID else custodian,
        },
    }


def _authorize(reader: ByteReader) -> Dict[str, Any]:
    return {"newAuthority": reader.read_pubkey(), "authorizeType": _stake_authorize(reader)}


def _lamports(reader: ByteReader) -> Dict[str, Any]:
    return {"lamports": str(reader.read_u64())}


def _optional_str(reader: ByteReader, fmt: str):
    value = reader.read_option(lambda r: r.read_number(fmt))
    return None if value is None else str(value)


def _set_lockup(reader: ByteReader) -> Dict[str, Any]:
    return {
        "lockup": {
            "unixTimestamp": _optional_str(reader, "i64"),
            "epoch": _optional_str(reader, "u64"),
            "custodian": reader.read_option(ByteReader.read_pubkey),
        }
    }


def _set_lockup_checked(reader: ByteReader) -> Dict[str, Any]:
    return {
        "lockup": {
            "unixTimestamp": _optional_str(reader, "i64"),
            "epoch": _optional_str(reader, "u64"),
        }
    }


def _authorize_with_seed(reader: ByteReader) -> Dict[str, Any]:
    return {
        "newAuthority": reader.read_pubkey(),
        "authorizeType": _stake_authorize(reader),
        "authoritySeed": reader.read_string("u64"),
        "authorityOwner": reader.read_pubkey(),
    }


def _authorize_checked_with_seed(reader: ByteReader) -> Dict[str, Any]:
    return {
        "authorizeType": _stake_authorize(reader),
        "authoritySeed": reader.read_string("u64"),
        "authorityOwner": reader.read_pubkey(),
    }


class StakeProgramDecoder(TaggedProgramDecoder):
    program_ids = (STAKE_PROGRAM_ID,)
    label = "Stake"
    tag_format = "u32"

    layouts = {
        0: InstructionLayout("Initialize", ["Stake Account", "Rent Sysvar"], _initialize),
        1: InstructionLayout(
            "Authorize", ["Stake Account", "Clock Sysvar", "Authority", "New Authority"], _authorize
        ),
        2: InstructionLayout(
            "Delegate Stake",
            ["Stake Account", "Vote Account", "Clock Sysvar", "Stake History Sysvar",
             "Config Account", "Authority"],
        ),
        3: InstructionLayout("Split", ["Stake Account", "New Stake Account", "Authority"], _lamports),
        4: InstructionLayout(
            "Withdraw",
            ["Stake Account", "Recipient", "Clock Sysvar", "Stake History Sysvar", "Withdrawer"],
            _lamports,
        ),
        5: InstructionLayout("Deactivate", ["Stake Account", "Clock Sysvar", "Authority"]),
        6: InstructionLayout("Set Lockup", ["Stake Account", "Custodian"], _set_lockup),
        7: InstructionLayout(
            "Merge",
            ["Destination Stake", "Source Stake", "Clock Sysvar", "Stake History Sysvar", "Authority"],
        ),
        8: InstructionLayout(
            "Authorize With Seed",
            ["Stake Account", "Authority Base", "Clock Sysvar", "New Authority"],
            _authorize_with_seed,
        ),
        9: InstructionLayout(
            "Initialize Checked", ["Stake Account", "Rent Sysvar", "Staker", "Withdrawer"]
        ),
        10: InstructionLayout(
            "Authorize Checked",
            ["Stake Account", "Clock Sysvar", "Authority", "New Authority"],
            lambda r: {"authorizeType": _stake_authorize(r)},
        ),
        11: InstructionLayout(
            "Authorize Checked With Seed",
            ["Stake Account", "Authority Base", "Clock Sysvar", "New Authority"],
            _authorize_checked_with_seed,
        ),
        12: InstructionLayout(
            "Set Lockup Checked", ["Stake Account", "Custodian", "New Custodian"], _set_lockup_checked
        ),
        13: InstructionLayout("Get Minimum Delegation"),
        14: InstructionLayout(
            "Deactivate Delinquent",
            ["Stake Account", "Delinquent Vote Account", "Reference Vote Account"],
        ),
        15: InstructionLayout(
            "Redelegate",
            ["Stake Account", "Uninitialized Stake Account", "Vote Account", "Config Account", "Authority"],
        ),
        16: InstructionLayout(
            "Move Stake", ["Source Stake", "Destination Stake", "Authority"], _lamports
        ),
        17: InstructionLayout(
            "Move Lamports", ["Source Stake", "Destination Stake", "Authority"], _lamports
        ),
    }

    @property
    def name(self) -> str:
        return "Stake Program"

"""Address Lookup Table program decoder (4-byte tag)."""

from typing import Any, Dict

from ..codec import ByteReader
from .base import ADDRESS_LOOKUP_TABLE_PROGRAM_ID, InstructionLayout, TaggedProgramDecoder


def _extend(reader: ByteReader) -> Dict[str, Any]:
    addresses = reader.read_vec(ByteReader.read_pubkey, "u64")
    return {"numberOfAddresses": len(addresses), "addresses": addresses}


class AddressLookupTableDecoder(TaggedProgramDecoder):
    program_ids = (ADDRESS_LOOKUP_TABLE_PROGRAM_ID,)
    label = "Lookup Table"
    tag_format = "u32"

    layouts = {
        0: InstructionLayout(
            "Create Lookup Table",
            ["Lookup Table", "Authority", "Payer", "System Program"],
            lambda r: {"recentSlot": str(r.read_u64()), "bumpSeed": r.read_u8()},
        ),
        1: InstructionLayout("Freeze Lookup Table", ["Lookup Table", "Authority"]),
        2: InstructionLayout(
            "Extend Lookup Table",
            ["Lookup Table", "Authority", "Payer", "System Program"],
            _extend,
        ),
        3: InstructionLayout("Deactivate Lookup Table", ["Lookup Table", "Authority"]),
        4: InstructionLayout("Close Lookup Table", ["Lookup Table", "Authority", "Recipient"]),
    }

    @property
    def name(self) -> str:
        return "Address Lookup Table Program"

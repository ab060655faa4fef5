"""Compute Budget program decoder (1-byte tag)."""

from .base import COMPUTE_BUDGET_PROGRAM_ID, InstructionLayout, TaggedProgramDecoder

SET_COMPUTE_UNIT_LIMIT = 2


class ComputeBudgetDecoder(TaggedProgramDecoder):
    program_ids = (COMPUTE_BUDGET_PROGRAM_ID,)
    label = "Compute Budget"

    layouts = {
        0: InstructionLayout(
            "Request Units (Deprecated)",
            read_args=lambda r: {"units": r.read_u32(), "additionalFee": r.read_u32()},
        ),
        1: InstructionLayout("Request Heap Frame", read_args=lambda r: {"bytes": r.read_u32()}),
        SET_COMPUTE_UNIT_LIMIT: InstructionLayout(
            "Set Compute Unit Limit", read_args=lambda r: {"units": r.read_u32()}
        ),
        3: InstructionLayout(
            "Set Compute Unit Price",
            read_args=lambda r: {"microLamports": str(r.read_u64())},
        ),
        4: InstructionLayout(
            "Set Loaded Accounts Data Size Limit", read_args=lambda r: {"bytes": r.read_u32()}
        ),
    }

    @property
    def name(self) -> str:
        return "Compute Budget Program"

"""Associated Token Account program decoder."""

from .base import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    InstructionLayout,
    LegacyInstruction,
    TaggedProgramDecoder,
)

_CREATE_ACCOUNTS = [
    "Funding Account",
    "Associated Token Account",
    "Wallet",
    "Token Mint",
    "System Program",
    "Token Program",
]


class AssociatedTokenDecoder(TaggedProgramDecoder):
    program_ids = (ASSOCIATED_TOKEN_PROGRAM_ID,)
    label = "Associated Token"

    layouts = {
        0: InstructionLayout("Create Associated Token Account", _CREATE_ACCOUNTS),
        1: InstructionLayout("Create Idempotent", _CREATE_ACCOUNTS),
        2: InstructionLayout(
            "Recover Nested",
            [
                "Nested Associated Token Account",
                "Nested Token Mint",
                "Destination Associated Token Account",
                "Owner Associated Token Account",
                "Owner Token Mint",
                "Wallet",
                "Token Program",
            ],
        ),
    }

    @property
    def name(self) -> str:
        return "Associated Token Program"

    def parse(self, data: bytes, account_count: int = 0) -> LegacyInstruction:
        # Legacy Create carries no instruction data
        if not data:
            layout = self.layouts[0]
            return LegacyInstruction(layout.name, {}, list(layout.accounts), 0)
        return super().parse(data, account_count)

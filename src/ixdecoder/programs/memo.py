"""Memo program decoder. The whole payload is the memo text."""

from .base import LegacyInstruction, MEMO_LEGACY_PROGRAM_ID, MEMO_PROGRAM_ID, ProgramDecoder


class MemoProgramDecoder(ProgramDecoder):
    program_ids = (MEMO_PROGRAM_ID, MEMO_LEGACY_PROGRAM_ID)
    label = "Memo"

    @property
    def name(self) -> str:
        return "Memo Program"

    def parse(self, data: bytes, account_count: int = 0) -> LegacyInstruction:
        data = bytes(data)
        try:
            memo = data.decode("utf-8")
        except UnicodeDecodeError:
            memo = data.hex()
        return LegacyInstruction(
            name="Memo",
            args={"memo": memo, "hexData": data.hex()},
            account_names=[f"Signer {i + 1}" for i in range(account_count)],
        )

"""
Data models for decoded instructions and transactions.

Every decode call builds fresh instances. to_dict() renders the camelCase
form consumed by display code.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class AccountKey:
    """A resolved account reference as it appears in a transaction."""
    pubkey: str
    is_signer: bool = False
    is_writable: bool = False


@dataclass
class DecodedAccount:
    """An instruction account with its role name."""
    name: str
    address: str
    is_signer: bool = False
    is_writable: bool = False

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "address": self.address,
            "isSigner": self.is_signer,
            "isWritable": self.is_writable,
        }


@dataclass
class DecodedInstruction:
    """One decoded instruction."""
    program_id: str
    program_name: str
    instruction_name: str
    accounts: List[DecodedAccount] = field(default_factory=list)
    args: Dict[str, Any] = field(default_factory=dict)
    raw_data_hex: str = ""
    instruction_title: Optional[str] = None
    human_readable_summary: Optional[str] = None
    inner_instructions: Optional[List["DecodedInstruction"]] = None

    def to_dict(self) -> Dict:
        result = {
            "programId": self.program_id,
            "programName": self.program_name,
            "instructionName": self.instruction_name,
            "instructionTitle": self.instruction_title,
            "accounts": [acc.to_dict() for acc in self.accounts],
            "args": self.args,
            "rawDataHex": self.raw_data_hex,
            "humanReadableSummary": self.human_readable_summary,
        }
        if self.inner_instructions is not None:
            result["innerInstructions"] = [ix.to_dict() for ix in self.inner_instructions]
        return result


@dataclass(frozen=True)
class DecodedTransaction:
    """A decoded multisig transaction. error is set when nothing could be decoded."""
    instructions: List[DecodedInstruction] = field(default_factory=list)
    signers: List[str] = field(default_factory=list)
    fee_payer: Optional[str] = None
    recent_blockhash: Optional[str] = None
    compute_units: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "DecodedTransaction":
        return cls(error=error)

    def to_dict(self) -> Dict:
        return {
            "instructions": [ix.to_dict() for ix in self.instructions],
            "signers": self.signers,
            "feePayer": self.fee_payer,
            "recentBlockhash": self.recent_blockhash,
            "computeUnits": self.compute_units,
            "error": self.error,
        }

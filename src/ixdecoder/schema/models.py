"""
Data models for compiled instruction schemas.

These models are built once per registered schema and shared read-only by
every decode call.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional


@dataclass(frozen=True)
class AccountSpec:
    """An account slot declared by an instruction."""
    name: str
    is_signer: bool = False
    is_writable: bool = False
    is_optional: bool = False


@dataclass(frozen=True)
class ArgumentSpec:
    """An instruction argument and its wire type."""
    name: str
    type_node: Any  # Raw type description from the schema document
    omitted: bool = False  # Default value is used, no bytes on the wire
    default_value: Any = None


@dataclass(frozen=True)
class InstructionSchema:
    """One instruction as declared by a schema."""
    name: str
    index: int
    discriminator: Optional[bytes] = None
    accounts: List[AccountSpec] = field(default_factory=list)
    arguments: List[ArgumentSpec] = field(default_factory=list)

    @property
    def account_names(self) -> List[str]:
        return [acc.name for acc in self.accounts]


@dataclass
class InstructionMatch:
    """Result of matching raw instruction data against a schema."""
    name: str
    fields: Dict[str, Any] = field(default_factory=dict)


class ParseResult(NamedTuple):
    """Decoded value plus the number of bytes it consumed."""
    value: Any
    bytes_consumed: int

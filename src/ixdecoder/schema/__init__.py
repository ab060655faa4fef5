"""Schema formats, parsers and the program schema registry."""

from .anchor import AnchorInstructionCoder
from .codama import CodamaInstructionParser, CodamaTypeParser, PARSE_ERROR
from .formats import SchemaFormat, SchemaInfo, detect_schema_format, is_anchor_compatible
from .models import AccountSpec, ArgumentSpec, InstructionMatch, InstructionSchema, ParseResult
from .registry import SchemaEntry, SchemaRegistry

__all__ = [
    "AnchorInstructionCoder",
    "CodamaInstructionParser",
    "CodamaTypeParser",
    "PARSE_ERROR",
    "SchemaFormat",
    "SchemaInfo",
    "detect_schema_format",
    "is_anchor_compatible",
    "AccountSpec",
    "ArgumentSpec",
    "InstructionMatch",
    "InstructionSchema",
    "ParseResult",
    "SchemaEntry",
    "SchemaRegistry",
]

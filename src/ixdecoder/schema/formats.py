"""
Schema format detection.

Classifies a parsed schema document. The checks run in a fixed order and the
first match wins.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class SchemaFormat(Enum):
    """Known instruction schema formats."""
    CODAMA = "codama"  # Codama / Kinobi rootNode tree
    ANCHOR_V01 = "anchor_v01"  # Anchor IDL with metadata.spec 0.1.0
    ANCHOR_V02 = "anchor_v02"  # Anchor IDL with a top-level version only
    SHANK = "shank"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SchemaInfo:
    format: SchemaFormat
    name: Optional[str] = None
    version: Optional[str] = None


def detect_schema_format(document: Any) -> SchemaInfo:
    """Detect the format of a schema document."""
    if not isinstance(document, dict):
        return SchemaInfo(SchemaFormat.UNKNOWN)

    program = document.get("program")
    if document.get("kind") == "rootNode" and isinstance(program, dict):
        return SchemaInfo(
            SchemaFormat.CODAMA,
            name=program.get("name") or "Unknown",
            version=program.get("version"),
        )

    metadata = document.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}

    if isinstance(document.get("instructions"), list):
        if metadata.get("spec") == "0.1.0" or document.get("spec") == "0.1.0":
            return SchemaInfo(
                SchemaFormat.ANCHOR_V01,
                name=document.get("name") or metadata.get("name"),
                version=document.get("version") or metadata.get("version"),
            )

        if document.get("version") and not metadata.get("spec"):
            return SchemaInfo(
                SchemaFormat.ANCHOR_V02,
                name=document.get("name"),
                version=document.get("version"),
            )

        # Anything else carrying an instruction list is read as v0.1.
        return SchemaInfo(
            SchemaFormat.ANCHOR_V01,
            name=document.get("name"),
            version=document.get("version"),
        )

    if document.get("instructions") and document.get("shankVersion"):
        return SchemaInfo(
            SchemaFormat.SHANK,
            name=document.get("name"),
            version=document.get("shankVersion"),
        )

    return SchemaInfo(SchemaFormat.UNKNOWN)


def is_anchor_compatible(schema_format: SchemaFormat) -> bool:
    """True when the Anchor instruction coder can handle the format."""
    return schema_format in (SchemaFormat.ANCHOR_V01, SchemaFormat.ANCHOR_V02)

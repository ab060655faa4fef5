"""
Schema registry.

Maps program ids to registered schema documents. The registry is filled once
when the application starts and only read afterwards.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from ..errors import SchemaError
from .codama import CodamaInstructionParser
from .formats import SchemaFormat, detect_schema_format

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaEntry:
    """A registered schema for one program."""
    program_id: str
    name: str
    raw_schema: Any
    format: SchemaFormat
    parser: Optional[CodamaInstructionParser] = None  # Only for Codama documents


def schema_program_id(document: Any) -> Optional[str]:
    """Program id declared inside a schema document, if any."""
    if not isinstance(document, dict):
        return None
    metadata = document.get("metadata")
    program = document.get("program")
    return (
        document.get("address")
        or (metadata.get("address") if isinstance(metadata, dict) else None)
        or (program.get("publicKey") if isinstance(program, dict) else None)
    )


class SchemaRegistry:
    """Program id to SchemaEntry lookup."""

    def __init__(self):
        self._entries: Dict[str, SchemaEntry] = {}

    def register(self, program_id: str, name: str, raw_schema: Any) -> SchemaEntry:
        """Register a schema document. A later registration replaces an earlier one."""
        info = detect_schema_format(raw_schema)
        parser = None
        if info.format == SchemaFormat.CODAMA:
            parser = CodamaInstructionParser(raw_schema)

        entry = SchemaEntry(
            program_id=program_id,
            name=name,
            raw_schema=raw_schema,
            format=info.format,
            parser=parser,
        )
        if program_id in self._entries:
            logger.debug("Replacing schema for %s", program_id)
        self._entries[program_id] = entry
        logger.debug("Registered %s schema %s for %s", info.format.value, name, program_id)
        return entry

    def register_file(self, path: Union[str, Path], program_id: Optional[str] = None,
                      name: Optional[str] = None) -> SchemaEntry:
        """Load a JSON schema file and register it."""
        path = Path(path)
        if not path.exists():
            raise SchemaError(f"Schema file not found: {path}")

        try:
            with open(path, "r") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise SchemaError(f"Invalid JSON in {path}: {e}") from e

        program_id = program_id or schema_program_id(document)
        if not program_id:
            raise SchemaError(f"No program id in {path}; pass one explicitly")

        info = detect_schema_format(document)
        return self.register(program_id, name or info.name or path.stem, document)

    def load_directory(self, path: Union[str, Path]) -> List[SchemaEntry]:
        """Register every *.json schema in a directory."""
        path = Path(path)
        if not path.is_dir():
            raise SchemaError(f"Schema directory not found: {path}")
        return [self.register_file(file) for file in sorted(path.glob("*.json"))]

    def lookup(self, program_id: str) -> Optional[SchemaEntry]:
        return self._entries.get(program_id)

    def list_all(self) -> List[SchemaEntry]:
        return list(self._entries.values())

    def program_name(self, program_id: str) -> Optional[str]:
        entry = self._entries.get(program_id)
        return entry.name if entry else None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, program_id: object) -> bool:
        return program_id in self._entries

    def __iter__(self) -> Iterator[SchemaEntry]:
        return iter(list(self._entries.values()))

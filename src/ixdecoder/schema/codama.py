"""
Codama (formerly Kinobi) schema parser.

Codama documents describe every argument as a tree of type nodes, so any
instruction can be decoded without per-program code. The parser compiles the
instruction list once and then walks the type tree against raw bytes.
"""

import base64
import logging
from typing import Any, Callable, Dict, List, Optional

from base58 import b58decode

from ..codec import ByteReader
from ..errors import DecoderError
from .models import (
    AccountSpec,
    ArgumentSpec,
    InstructionMatch,
    InstructionSchema,
    ParseResult,
)

logger = logging.getLogger(__name__)

PARSE_ERROR = "Parse error"

# 64-bit and wider integers are rendered as decimal strings
_WIDE_NUMBERS = {"u64", "i64", "u128", "i128"}
_NUMBER_FORMATS = {
    "u8", "u16", "u32", "u64", "u128",
    "i8", "i16", "i32", "i64", "i128",
    "f32", "f64",
}


def literal_value(node: Any) -> Any:
    """Extract the plain value of a Codama value node."""
    if not isinstance(node, dict):
        return node
    for key in ("number", "value", "boolean", "string", "data"):
        if key in node:
            return node[key]
    return None


def decode_bytes_value(node: Dict[str, Any]) -> Optional[bytes]:
    """Decode a bytesValueNode into raw bytes."""
    data = node.get("data")
    if not isinstance(data, str):
        return None
    encoding = node.get("encoding", "base16")
    if encoding == "base16":
        return bytes.fromhex(data)
    if encoding == "base64":
        return base64.b64decode(data)
    if encoding == "utf8":
        return data.encode("utf-8")
    if encoding == "base58":
        return b58decode(data)
    logger.warning("Unsupported bytes encoding in discriminator: %s", encoding)
    return None


def _map_key(key: Any) -> Any:
    if key is None or isinstance(key, (str, int, bool)):
        return key
    return str(key)


class CodamaTypeParser:
    """Walks Codama type nodes against a byte buffer."""

    def __init__(self, defined_types: Optional[Dict[str, Any]] = None):
        self.defined_types = defined_types or {}
        self._handlers = {
            "numberTypeNode": self._read_number,
            "publicKeyTypeNode": self._read_public_key,
            "stringTypeNode": self._read_string,
            "boolTypeNode": self._read_bool,
            "booleanTypeNode": self._read_bool,
            "optionTypeNode": self._read_option,
            "structTypeNode": self._read_struct,
            "arrayTypeNode": self._read_array,
            "bytesTypeNode": self._read_bytes,
            "sizePrefixTypeNode": self._read_size_prefix,
            "fixedSizeTypeNode": self._read_fixed_size,
            "definedTypeLinkNode": self._read_defined_type,
            "enumTypeNode": self._read_enum,
            "tupleTypeNode": self._read_tuple,
            "amountTypeNode": self._read_amount,
            "solAmountTypeNode": self._read_amount,
            "dateTimeTypeNode": self._read_amount,
            "mapTypeNode": self._read_map,
            "setTypeNode": self._read_set,
        }

    def parse(self, node: Any, data: bytes, offset: int = 0) -> ParseResult:
        """Parse one type node at offset, returning value and bytes consumed."""
        reader = ByteReader(data, offset)
        value = self.read(node, reader)
        return ParseResult(value, reader.offset - offset)

    def read(self, node: Any, reader: ByteReader) -> Any:
        if not isinstance(node, dict) or not node.get("kind"):
            return None
        handler = self._handlers.get(node["kind"])
        if handler is None:
            # Leave the offset where it is so later fields stay aligned.
            logger.warning("Unknown type kind: %s", node["kind"])
            return None
        return handler(node, reader)

    def _read_number(self, node: Dict[str, Any], reader: ByteReader) -> Any:
        fmt = node.get("format", "u32")
        if fmt not in _NUMBER_FORMATS:
            logger.warning("Unknown number format: %s", fmt)
            return None
        value = reader.read_number(fmt, node.get("endian", "le"))
        if fmt in _WIDE_NUMBERS:
            return str(value)
        return value

    def _read_public_key(self, node: Dict[str, Any], reader: ByteReader) -> str:
        return reader.read_pubkey()

    def _read_string(self, node: Dict[str, Any], reader: ByteReader) -> str:
        length = reader.read_u32()
        return self._render_string(node, reader.read_bytes(length))

    def _render_string(self, node: Dict[str, Any], raw: bytes) -> str:
        encoding = node.get("encoding", "utf8")
        if encoding == "base16":
            return raw.hex()
        if encoding == "base64":
            return base64.b64encode(raw).decode("ascii")
        return raw.decode("utf-8")

    def _read_bool(self, node: Dict[str, Any], reader: ByteReader) -> bool:
        size = node.get("size")
        if isinstance(size, dict):
            return int(self.read(size, reader) or 0) != 0
        return reader.read_bool()

    def _read_option(self, node: Dict[str, Any], reader: ByteReader) -> Any:
        prefix = node.get("prefix")
        if prefix:
            present = self.read(prefix, reader)
        else:
            present = reader.read_u8()
        if not int(present or 0):
            return None
        return self.read(node.get("item"), reader)

    def _read_struct(self, node: Dict[str, Any], reader: ByteReader) -> Dict[str, Any]:
        result = {}
        for field in node.get("fields") or []:
            result[field.get("name")] = self.read(field.get("type"), reader)
        return result

    def _read_items(self, count_node: Any, read_item: Callable[[ByteReader], Any],
                    reader: ByteReader) -> List[Any]:
        """Read a counted sequence; stops early on items that consume no bytes."""
        count_node = count_node or {}
        kind = count_node.get("kind")
        if kind == "remainderCountNode":
            count = None
        elif kind == "fixedCountNode":
            count = int(count_node.get("value", 0))
        elif kind == "prefixedCountNode":
            count = int(self.read(count_node.get("prefix"), reader) or 0)
        else:
            count = 0

        items = []
        while (not reader.at_end()) if count is None else len(items) < count:
            start = reader.offset
            items.append(read_item(reader))
            if reader.offset == start:
                if count is not None and len(items) < count:
                    logger.warning("Item consumed no bytes, stopping after %d of %d", len(items), count)
                break
        return items

    def _read_array(self, node: Dict[str, Any], reader: ByteReader) -> List[Any]:
        item = node.get("item")
        return self._read_items(node.get("count"), lambda r: self.read(item, r), reader)

    def _read_set(self, node: Dict[str, Any], reader: ByteReader) -> List[Any]:
        return self._read_array(node, reader)

    def _read_map(self, node: Dict[str, Any], reader: ByteReader) -> Dict[Any, Any]:
        key_node, value_node = node.get("key"), node.get("value")
        entries = self._read_items(
            node.get("count"),
            lambda r: (self.read(key_node, r), self.read(value_node, r)),
            reader,
        )
        return {_map_key(key): value for key, value in entries}

    def _read_bytes(self, node: Dict[str, Any], reader: ByteReader) -> str:
        size = node.get("size")
        if size is None:
            return reader.read_rest().hex()
        if isinstance(size, int):
            n = size
        elif size.get("kind") == "fixedSizeNode":
            n = size.get("value", 0)
        elif size.get("kind") == "prefixedSizeNode":
            n = self.read(size.get("prefix"), reader)
        else:
            n = 0
        return reader.read_bytes(int(n or 0)).hex()

    def _read_sized(self, inner: Dict[str, Any], window: ByteReader,
                    strip_padding: bool) -> Any:
        if isinstance(inner, dict) and inner.get("kind") == "stringTypeNode":
            raw = window.read_rest()
            if strip_padding:
                raw = raw.rstrip(b"\x00")
            return self._render_string(inner, raw)
        return self.read(inner, window)

    def _read_size_prefix(self, node: Dict[str, Any], reader: ByteReader) -> Any:
        size = self.read(node.get("prefix"), reader)
        window = reader.window(int(size or 0))
        return self._read_sized(node.get("type"), window, strip_padding=False)

    def _read_fixed_size(self, node: Dict[str, Any], reader: ByteReader) -> Any:
        window = reader.window(int(node.get("size", 0)))
        return self._read_sized(node.get("type"), window, strip_padding=True)

    def _read_defined_type(self, node: Dict[str, Any], reader: ByteReader) -> Any:
        target = self.defined_types.get(node.get("name"))
        if target is None:
            logger.warning("Unresolved defined type: %s", node.get("name"))
            return None
        return self.read(target, reader)

    def _read_enum(self, node: Dict[str, Any], reader: ByteReader) -> Any:
        size = node.get("size")
        index = self.read(size, reader) if size else reader.read_u8()
        variants = node.get("variants") or []
        if index is None or not 0 <= int(index) < len(variants):
            raise ValueError(f"invalid enum variant index {index}")
        variant = variants[int(index)]
        name = variant.get("name")
        kind = variant.get("kind")
        if kind == "enumStructVariantTypeNode":
            return {name: self.read(variant.get("struct"), reader)}
        if kind == "enumTupleVariantTypeNode":
            return {name: self.read(variant.get("tuple"), reader)}
        return name

    def _read_tuple(self, node: Dict[str, Any], reader: ByteReader) -> List[Any]:
        return [self.read(item, reader) for item in node.get("items") or []]

    def _read_amount(self, node: Dict[str, Any], reader: ByteReader) -> Any:
        return self.read(node.get("number"), reader)


class CodamaInstructionParser:
    """
    Compiled Codama instruction set.

    Instructions are indexed by name, by discriminator bytes and by declared
    position. Lookup order is fixed: a single-byte discriminator match wins
    over an 8-byte match, and the positional index is the last resort.
    """

    def __init__(self, document: Dict[str, Any]):
        self.document = document
        program = document.get("program") or {}
        self.program_name: Optional[str] = program.get("name")

        defined_types = {}
        for defined in program.get("definedTypes") or []:
            if isinstance(defined, dict) and defined.get("name"):
                defined_types[defined["name"]] = defined.get("type")
        self.types = CodamaTypeParser(defined_types)

        self._by_name: Dict[str, InstructionSchema] = {}
        self._by_discriminator: Dict[bytes, InstructionSchema] = {}
        self._by_index: Dict[int, InstructionSchema] = {}

        for index, raw in enumerate(program.get("instructions") or []):
            instruction = self._compile_instruction(raw, index)
            self._by_name[instruction.name] = instruction
            if instruction.discriminator:
                self._by_discriminator[instruction.discriminator] = instruction
            self._by_index[index] = instruction

    def _compile_instruction(self, raw: Dict[str, Any], index: int) -> InstructionSchema:
        accounts = [
            AccountSpec(
                name=acc.get("name", f"account{i}"),
                is_signer=bool(acc.get("isSigner")),
                is_writable=bool(acc.get("isWritable") or acc.get("isMut")),
                is_optional=bool(acc.get("isOptional")),
            )
            for i, acc in enumerate(raw.get("accounts") or [])
        ]
        arguments = [
            ArgumentSpec(
                name=arg.get("name"),
                type_node=arg.get("type"),
                omitted=arg.get("defaultValueStrategy") == "omitted",
                default_value=literal_value(arg.get("defaultValue")),
            )
            for arg in raw.get("arguments") or []
        ]
        return InstructionSchema(
            name=raw.get("name", f"instruction{index}"),
            index=index,
            discriminator=self._extract_discriminator(raw),
            accounts=accounts,
            arguments=arguments,
        )

    def _extract_discriminator(self, raw: Dict[str, Any]) -> Optional[bytes]:
        declared = raw.get("discriminator")
        if declared:
            if isinstance(declared, list):
                return bytes(declared)
            if isinstance(declared, dict) and declared.get("value") is not None:
                value = declared["value"]
                return bytes(value if isinstance(value, list) else [value])

        for disc in raw.get("discriminators") or []:
            kind = disc.get("kind")
            if kind == "fieldDiscriminatorNode" and disc.get("name"):
                arg = next(
                    (a for a in raw.get("arguments") or [] if a.get("name") == disc["name"]),
                    None,
                )
                if arg is not None:
                    found = self._value_bytes(arg.get("defaultValue"), arg.get("type"))
                    if found:
                        return found
            elif kind == "constantDiscriminatorNode" and not disc.get("offset"):
                constant = disc.get("constant") or {}
                found = self._value_bytes(constant.get("value"), constant.get("type"))
                if found:
                    return found
        return None

    @staticmethod
    def _value_bytes(value: Any, type_node: Any) -> Optional[bytes]:
        if not isinstance(value, dict):
            return None
        if value.get("kind") == "bytesValueNode":
            return decode_bytes_value(value)
        if value.get("number") is not None:
            # Number discriminators always occupy one byte
            return bytes([int(value["number"]) & 0xFF])
        if value.get("value") is not None:
            raw = value["value"]
            return bytes(raw if isinstance(raw, list) else [raw])
        return None

    def decode_instruction(self, data: bytes) -> Optional[InstructionMatch]:
        """Match data to an instruction and decode its arguments."""
        if not data:
            return None

        instruction = self._by_discriminator.get(bytes(data[:1]))
        if instruction:
            return InstructionMatch(instruction.name, self._parse_arguments(instruction, data, 1))

        if len(data) >= 8:
            instruction = self._by_discriminator.get(bytes(data[:8]))
            if instruction:
                return InstructionMatch(instruction.name, self._parse_arguments(instruction, data, 8))

        instruction = self._by_index.get(data[0])
        if instruction:
            return InstructionMatch(instruction.name, self._parse_arguments(instruction, data, 1))

        return None

    def _parse_arguments(self, instruction: InstructionSchema, data: bytes,
                         offset: int) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        reader = ByteReader(data, offset)

        for arg in instruction.arguments:
            if arg.omitted:
                result[arg.name] = arg.default_value
                continue

            start = reader.offset
            try:
                result[arg.name] = self.types.read(arg.type_node, reader)
            except (DecoderError, ValueError, TypeError, UnicodeDecodeError) as e:
                logger.warning("Failed to parse argument %s of %s: %s",
                               arg.name, instruction.name, e)
                result[arg.name] = PARSE_ERROR
                reader.seek(start)

        return result

    def parse_type(self, node: Any, data: bytes, offset: int = 0) -> ParseResult:
        return self.types.parse(node, data, offset)

    def get_instruction(self, name: str) -> Optional[InstructionSchema]:
        return self._by_name.get(name)

    def get_all_instructions(self) -> List[InstructionSchema]:
        return list(self._by_name.values())

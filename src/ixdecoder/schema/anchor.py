"""
Anchor instruction coder.

Decodes instruction data for Anchor IDLs, both the 0.1.0 layout
(snake_case names, explicit discriminators, "pubkey") and the legacy layout
(camelCase names, "publicKey", discriminators derived from the name).

Borsh decoding is done by anchorpy's InstructionCoder. anchorpy reads the
legacy layout only, so every IDL is rewritten into that layout first; this
module keeps the discriminator lookup, the account table and the mapping of
decoded values back onto IDL argument names.
"""

import hashlib
import json
import logging
import re
from dataclasses import fields as dataclass_fields, is_dataclass
from typing import Any, Dict, List, Optional

from anchorpy import Idl
from anchorpy.coder.instruction import InstructionCoder
from construct import ConstructError
from solders.pubkey import Pubkey

from ..errors import DecoderError, SchemaError
from .models import AccountSpec, ArgumentSpec, InstructionMatch, InstructionSchema

logger = logging.getLogger(__name__)

DISCRIMINATOR_LENGTH = 8

_WIDE_NUMBERS = {"u64", "i64", "u128", "i128"}


def snake_case(name: str) -> str:
    """Convert an IDL name to snake_case (transferChecked -> transfer_checked)."""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


def sighash(namespace: str, name: str) -> bytes:
    """Anchor discriminator: first 8 bytes of sha256("<namespace>:<name>")."""
    preimage = f"{namespace}:{snake_case(name)}"
    return hashlib.sha256(preimage.encode("utf-8")).digest()[:DISCRIMINATOR_LENGTH]


def _defined_name(type_def: Any) -> Optional[str]:
    if isinstance(type_def, dict) and "defined" in type_def:
        defined = type_def["defined"]
        if isinstance(defined, dict):
            return defined.get("name")
        return defined
    return None


def _is_named(fields: List[Any]) -> bool:
    return bool(fields) and isinstance(fields[0], dict) and "name" in fields[0]


def legacy_type(type_def: Any) -> Any:
    """Rewrite a 0.1.0 IDL type into the legacy form anchorpy parses."""
    if isinstance(type_def, str):
        return "publicKey" if type_def == "pubkey" else type_def
    if not isinstance(type_def, dict):
        return type_def
    name = _defined_name(type_def)
    if name is not None:
        return {"defined": name}
    for key in ("vec", "option", "coption"):
        if key in type_def:
            return {key: legacy_type(type_def[key])}
    if "array" in type_def:
        item, length = type_def["array"]
        return {"array": [legacy_type(item), length]}
    return type_def


def _legacy_fields(fields: List[Any]) -> List[Any]:
    if _is_named(fields):
        return [{"name": f["name"], "type": legacy_type(f["type"])} for f in fields]
    return [legacy_type(f) for f in fields]


def _legacy_body(body: Dict[str, Any]) -> Dict[str, Any]:
    kind = body.get("kind")
    if kind == "struct":
        return {"kind": "struct", "fields": _legacy_fields(body.get("fields") or [])}
    if kind == "enum":
        variants = []
        for variant in body.get("variants") or []:
            entry = {"name": variant["name"]}
            if variant.get("fields"):
                entry["fields"] = _legacy_fields(variant["fields"])
            variants.append(entry)
        return {"kind": "enum", "variants": variants}
    if kind == "alias":
        return {"kind": "alias", "value": legacy_type(body.get("value"))}
    return body


def _values(value: Any) -> List[Any]:
    """Field values of a decoded struct, in declaration order."""
    if is_dataclass(value):
        return [getattr(value, f.name) for f in dataclass_fields(value)]
    if isinstance(value, dict):
        return [v for k, v in value.items() if not str(k).startswith("_")]
    if isinstance(value, (list, tuple)):
        return list(value)
    attrs = getattr(type(value), "__attrs_attrs__", None)
    if attrs is not None:
        return [getattr(value, a.name) for a in attrs]
    if hasattr(value, "__dict__"):
        return [v for k, v in vars(value).items() if not k.startswith("_")]
    return [value]


def _member(value: Any, name: str, index: int) -> Any:
    for key in (name, snake_case(name)):
        if isinstance(value, dict) and key in value:
            return value[key]
        if not isinstance(value, dict) and hasattr(value, key):
            return getattr(value, key)
    return _values(value)[index]


def _plain(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Pubkey):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items() if not str(k).startswith("_")}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if is_dataclass(value):
        return {f.name: _plain(getattr(value, f.name)) for f in dataclass_fields(value)}
    return str(value)


def _squash(name: str) -> str:
    return name.replace("_", "").lower()


class AnchorInstructionCoder:
    """
    Instruction decoder built from an Anchor IDL.

    Construction checks that every argument type resolves and builds the
    anchorpy coder. With inline_types set, definitions declared under the IDL
    "accounts" table are also accepted, which covers older IDLs that keep
    shared structs next to their account types.
    """

    def __init__(self, idl: Dict[str, Any], inline_types: bool = False):
        if not isinstance(idl, dict):
            raise SchemaError("IDL must be a JSON object")
        self.idl = idl
        metadata = idl.get("metadata") or {}
        self.name = idl.get("name") or metadata.get("name")
        self.version = idl.get("version") or metadata.get("version") or "0.0.0"

        self.types: Dict[str, Dict[str, Any]] = {}
        for type_def in idl.get("types") or []:
            if isinstance(type_def, dict) and type_def.get("name"):
                self.types[type_def["name"]] = type_def.get("type") or {}
        if inline_types:
            for acc in idl.get("accounts") or []:
                if isinstance(acc, dict) and acc.get("type") and acc.get("name"):
                    self.types.setdefault(acc["name"], acc["type"])

        self.instructions: List[InstructionSchema] = []
        for index, ix in enumerate(idl.get("instructions") or []):
            schema = self._compile_instruction(ix, index)
            for arg in schema.arguments:
                self._check_type(arg.type_node, schema.name)
            self.instructions.append(schema)

        self.coder = self._build_coder()

    @classmethod
    def compile(cls, idl: Dict[str, Any]) -> "AnchorInstructionCoder":
        """Build a coder, retrying with account types merged in on failure."""
        try:
            return cls(idl)
        except SchemaError as e:
            logger.warning("Anchor coder failed for %s, retrying with inlined types: %s",
                           idl.get("name") if isinstance(idl, dict) else None, e)
            return cls(idl, inline_types=True)

    def _compile_instruction(self, ix: Dict[str, Any], index: int) -> InstructionSchema:
        name = ix.get("name")
        if not name:
            raise SchemaError(f"instruction {index} has no name")

        discriminator = ix.get("discriminator")
        if isinstance(discriminator, list):
            discriminator = bytes(discriminator)
        else:
            discriminator = sighash("global", name)

        return InstructionSchema(
            name=name,
            index=index,
            discriminator=discriminator,
            accounts=self._flatten_accounts(ix.get("accounts") or []),
            arguments=[
                ArgumentSpec(name=arg.get("name", f"arg{i}"), type_node=arg.get("type"))
                for i, arg in enumerate(ix.get("args") or [])
            ],
        )

    def _flatten_accounts(self, accounts: List[Dict[str, Any]]) -> List[AccountSpec]:
        """Flatten nested account groups into the on-wire account order."""
        flat = []
        for acc in accounts:
            if isinstance(acc.get("accounts"), list):
                flat.extend(self._flatten_accounts(acc["accounts"]))
                continue
            # Old format: isMut, isSigner. New format: writable, signer
            flat.append(AccountSpec(
                name=acc.get("name", "unknown"),
                is_signer=bool(acc.get("signer", acc.get("isSigner", False))),
                is_writable=bool(acc.get("writable", acc.get("isMut", False))),
                is_optional=bool(acc.get("optional", acc.get("isOptional", False))),
            ))
        return flat

    def _check_type(self, type_def: Any, where: str) -> None:
        if isinstance(type_def, str):
            return
        if not isinstance(type_def, dict):
            raise SchemaError(f"{where}: malformed type {type_def!r}")
        name = _defined_name(type_def)
        if name is not None:
            if name not in self.types:
                raise SchemaError(f"{where}: undefined type {name}")
            return
        for key in ("vec", "option", "coption"):
            if key in type_def:
                self._check_type(type_def[key], where)
                return
        if "array" in type_def:
            self._check_type(type_def["array"][0], where)
            return
        raise SchemaError(f"{where}: unsupported type {type_def!r}")

    @staticmethod
    def _wire_name(schema: InstructionSchema) -> str:
        return snake_case(schema.name)

    def to_legacy_idl(self) -> Dict[str, Any]:
        """The IDL in the layout anchorpy's Idl.from_json accepts."""
        return {
            "version": str(self.version),
            "name": snake_case(self.name or "program"),
            "instructions": [
                {
                    "name": self._wire_name(schema),
                    "accounts": [
                        {"name": acc.name, "isMut": acc.is_writable, "isSigner": acc.is_signer}
                        for acc in schema.accounts
                    ],
                    "args": [
                        {"name": arg.name, "type": legacy_type(arg.type_node)}
                        for arg in schema.arguments
                    ],
                }
                for schema in self.instructions
            ],
            "types": [
                {"name": name, "type": _legacy_body(body)}
                for name, body in self.types.items()
            ],
        }

    def _build_coder(self) -> InstructionCoder:
        try:
            return InstructionCoder(Idl.from_json(json.dumps(self.to_legacy_idl())))
        except Exception as e:  # anchorpy raises several error types for IDLs it cannot lay out
            raise SchemaError(f"anchorpy rejected IDL {self.name}: {e}") from e

    def find_instruction(self, data: bytes) -> Optional[InstructionSchema]:
        for schema in self.instructions:
            disc = schema.discriminator
            if disc and data[:len(disc)] == disc:
                return schema
        return None

    def decode(self, data: bytes) -> Optional[InstructionMatch]:
        """Decode instruction data, or None when no discriminator matches."""
        schema = self.find_instruction(data)
        if schema is None:
            return None
        # anchorpy dispatches on the name-derived sighash, explicit discriminators included
        payload = sighash("global", self._wire_name(schema)) + bytes(data[len(schema.discriminator):])
        try:
            parsed = self.coder.parse(payload)
        except ConstructError as e:
            raise DecoderError(f"{schema.name}: malformed instruction data: {e}") from e

        values = _values(parsed.data)
        fields = {
            arg.name: self.render(arg.type_node, value)
            for arg, value in zip(schema.arguments, values)
        }
        return InstructionMatch(schema.name, fields)

    def get_instruction(self, name: str) -> Optional[InstructionSchema]:
        for schema in self.instructions:
            if schema.name == name:
                return schema
        return None

    def account_names(self, name: str) -> List[str]:
        schema = self.get_instruction(name)
        return schema.account_names if schema else []

    def render(self, type_def: Any, value: Any) -> Any:
        """Turn one decoded value into plain JSON data, guided by its IDL type."""
        if value is None:
            return None
        if isinstance(type_def, str):
            if type_def in _WIDE_NUMBERS:
                return str(value)
            if type_def in ("pubkey", "publicKey"):
                return str(value)
            if type_def == "bytes":
                return bytes(value).hex()
            return _plain(value)
        if not isinstance(type_def, dict):
            return _plain(value)

        name = _defined_name(type_def)
        if name is not None:
            body = self.types.get(name)
            return self._render_body(body, value) if body else _plain(value)
        if "vec" in type_def:
            return [self.render(type_def["vec"], v) for v in value]
        for key in ("option", "coption"):
            if key in type_def:
                return self.render(type_def[key], value)
        if "array" in type_def:
            item, _ = type_def["array"]
            if item == "u8":
                return bytes(value).hex()
            return [self.render(item, v) for v in value]
        return _plain(value)

    def _render_body(self, body: Dict[str, Any], value: Any) -> Any:
        kind = body.get("kind")
        if kind == "struct":
            return self._render_fields(body.get("fields") or [], value)
        if kind == "enum":
            variant = self._enum_variant(body, value)
            if variant is None:
                return _plain(value)
            if not variant.get("fields"):
                return variant["name"]
            return {variant["name"]: self._render_fields(variant["fields"], value)}
        if kind == "alias":
            return self.render(body.get("value"), value)
        return _plain(value)

    @staticmethod
    def _enum_variant(body: Dict[str, Any], value: Any) -> Optional[Dict[str, Any]]:
        # Decoded variants are instances of per-variant classes
        candidates = {_squash(type(value).__name__)}
        if isinstance(value, str):
            candidates.add(_squash(value))
        for variant in body.get("variants") or []:
            if _squash(variant["name"]) in candidates:
                return variant
        return None

    def _render_fields(self, fields: List[Any], value: Any) -> Any:
        # Named fields render to a dict, tuple fields to a list
        if _is_named(fields):
            return {
                f["name"]: self.render(f["type"], _member(value, f["name"], i))
                for i, f in enumerate(fields)
            }
        values = _values(value)
        if len(values) == 1 and len(fields) != 1 and isinstance(values[0], (list, tuple)):
            values = list(values[0])
        return [self.render(f, v) for f, v in zip(fields, values)]

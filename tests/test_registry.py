import json

import pytest

from ixdecoder.errors import SchemaError
from ixdecoder.schema import SchemaFormat, SchemaRegistry
from ixdecoder.schema.registry import schema_program_id

from builders import key

CODAMA_DOC = {
    "kind": "rootNode",
    "program": {"kind": "programNode", "name": "vault", "publicKey": key(30), "instructions": []},
}
ANCHOR_DOC = {
    "address": key(31),
    "metadata": {"name": "payments", "version": "0.1.0", "spec": "0.1.0"},
    "instructions": [],
}


def write(path, document):
    path.write_text(json.dumps(document))
    return path


def test_register_codama_builds_parser(registry):
    entry = registry.register(key(30), "vault", CODAMA_DOC)
    assert entry.format == SchemaFormat.CODAMA
    assert entry.parser is not None
    assert registry.lookup(key(30)) is entry
    assert registry.program_name(key(30)) == "vault"


def test_register_anchor_has_no_codama_parser(registry):
    entry = registry.register(key(31), "payments", ANCHOR_DOC)
    assert entry.format == SchemaFormat.ANCHOR_V01
    assert entry.parser is None


def test_later_registration_replaces(registry):
    registry.register(key(31), "first", ANCHOR_DOC)
    registry.register(key(31), "second", ANCHOR_DOC)
    assert len(registry) == 1
    assert registry.program_name(key(31)) == "second"


def test_lookup_misses(registry):
    assert registry.lookup(key(99)) is None
    assert registry.program_name(key(99)) is None
    assert key(99) not in registry


@pytest.mark.parametrize("document,expected", [
    (ANCHOR_DOC, key(31)),
    ({"metadata": {"address": key(32)}}, key(32)),
    (CODAMA_DOC, key(30)),
    ({"instructions": []}, None),
    ("not a document", None),
])
def test_schema_program_id(document, expected):
    assert schema_program_id(document) == expected


def test_register_file(registry, tmp_path):
    entry = registry.register_file(write(tmp_path / "payments.json", ANCHOR_DOC))
    assert entry.program_id == key(31)
    assert entry.name == "payments"


def test_register_file_falls_back_to_file_stem(registry, tmp_path):
    document = {"address": key(33), "instructions": []}
    entry = registry.register_file(write(tmp_path / "mystery.json", document))
    assert entry.name == "mystery"


def test_register_file_with_explicit_program_id(registry, tmp_path):
    path = write(tmp_path / "nameless.json", {"instructions": []})
    entry = registry.register_file(path, program_id=key(34), name="custom")
    assert entry.program_id == key(34)
    assert entry.name == "custom"


def test_register_file_errors(registry, tmp_path):
    with pytest.raises(SchemaError, match="not found"):
        registry.register_file(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(SchemaError, match="Invalid JSON"):
        registry.register_file(bad)

    with pytest.raises(SchemaError, match="No program id"):
        registry.register_file(write(tmp_path / "anon.json", {"instructions": []}))


def test_load_directory(registry, tmp_path):
    write(tmp_path / "b.json", ANCHOR_DOC)
    write(tmp_path / "a.json", CODAMA_DOC)
    (tmp_path / "notes.txt").write_text("ignored")

    entries = registry.load_directory(tmp_path)
    assert [e.name for e in entries] == ["vault", "payments"]
    assert len(registry) == 2
    assert {e.program_id for e in registry} == {key(30), key(31)}
    assert len(registry.list_all()) == 2


def test_load_missing_directory(registry, tmp_path):
    with pytest.raises(SchemaError):
        registry.load_directory(tmp_path / "nope")

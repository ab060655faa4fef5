import json

import pytest

from ixdecoder import cli
from ixdecoder.programs.base import SYSTEM_PROGRAM_ID

from builders import key, u32, u64


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("IXDECODER_SCHEMA_DIR", raising=False)
    monkeypatch.delenv("IXDECODER_NATIVE_SYMBOL", raising=False)


def test_parse_account_flags():
    account = cli.parse_account(f"{key(1)}:sw")
    assert account.pubkey == key(1)
    assert account.is_signer and account.is_writable
    assert not cli.parse_account(key(2)).is_signer


def test_instruction_json(capsys):
    data = (u32(2) + u64(1_000_000_000)).hex()
    code = cli.main(["--json", "instruction", SYSTEM_PROGRAM_ID, data,
                     "-a", f"{key(1)}:sw", "-a", f"{key(2)}:w"])
    assert code == 0
    result = json.loads(capsys.readouterr().out)
    assert result["instructionName"] == "Transfer"
    assert result["args"] == {"lamports": "1000000000"}
    assert [a["name"] for a in result["accounts"]] == ["From", "To"]
    assert result["accounts"][0]["isSigner"] is True


def test_instruction_bad_hex():
    assert cli.main(["instruction", SYSTEM_PROGRAM_ID, "zz"]) == 1


def test_instruction_table_output(capsys):
    data = (u32(2) + u64(5)).hex()
    assert cli.main(["instruction", SYSTEM_PROGRAM_ID, data, "-a", key(1), "-a", key(2)]) == 0


def test_schema_command(tmp_path, capsys):
    idl = {
        "address": key(20),
        "metadata": {"name": "payments", "version": "0.1.0", "spec": "0.1.0"},
        "instructions": [{
            "name": "pay",
            "discriminator": [1, 2, 3, 4, 5, 6, 7, 8],
            "accounts": [{"name": "payer"}],
            "args": [{"name": "amount", "type": "u64"}],
        }],
    }
    path = tmp_path / "payments.json"
    path.write_text(json.dumps(idl))

    assert cli.main(["--json", "schema", str(path)]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["format"] == "anchor_v01"
    assert result["instructions"] == [{
        "name": "pay",
        "discriminator": "0102030405060708",
        "accounts": ["payer"],
        "arguments": ["amount"],
    }]


def test_schema_command_missing_file(tmp_path):
    assert cli.main(["schema", str(tmp_path / "missing.json")]) == 1


def test_instruction_with_schema_dir(tmp_path, capsys):
    schemas = tmp_path / "schemas"
    schemas.mkdir()
    (schemas / "counter.json").write_text(json.dumps({
        "kind": "rootNode",
        "program": {
            "name": "counter",
            "publicKey": key(21),
            "instructions": [{
                "name": "increment",
                "arguments": [{"name": "by", "type": {"kind": "numberTypeNode", "format": "u8"}}],
            }],
        },
    }))
    assert cli.main(["--json", "--schemas", str(schemas), "instruction", key(21), "0005"]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["programName"] == "counter"
    assert result["instructionName"] == "Increment"
    assert result["args"] == {"by": 5}


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()

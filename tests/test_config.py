import os

import pytest

from ixdecoder.config import DEFAULT_RPC_URL, DecoderConfig, load_env
from ixdecoder.programs.base import SQUADS_V4_PROGRAM_ID

ENV_KEYS = [
    "IXDECODER_RPC_URL",
    "IXDECODER_MULTISIG_PROGRAM_ID",
    "IXDECODER_SCHEMA_DIR",
    "IXDECODER_NATIVE_SYMBOL",
    "IXDECODER_TIMEOUT",
    "IXDECODER_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_KEYS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults():
    config = DecoderConfig.from_env(load_dotenv=False)
    assert config.rpc_url == DEFAULT_RPC_URL
    assert config.multisig_program_id == SQUADS_V4_PROGRAM_ID
    assert config.schema_dir is None
    assert config.native_symbol == "SOL"
    assert config.request_timeout == 30.0
    assert config.log_level == "WARNING"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("IXDECODER_RPC_URL", "http://localhost:8899")
    monkeypatch.setenv("IXDECODER_SCHEMA_DIR", "/schemas")
    monkeypatch.setenv("IXDECODER_NATIVE_SYMBOL", "XNT")
    monkeypatch.setenv("IXDECODER_TIMEOUT", "2.5")
    monkeypatch.setenv("IXDECODER_LOG_LEVEL", "debug")

    config = DecoderConfig.from_env(load_dotenv=False)
    assert config.rpc_url == "http://localhost:8899"
    assert config.schema_dir == "/schemas"
    assert config.native_symbol == "XNT"
    assert config.request_timeout == 2.5
    assert config.log_level == "DEBUG"


def test_dotenv_in_parent_directory(monkeypatch, tmp_path):
    (tmp_path / ".env").write_text(
        "# decoder settings\n"
        "IXDECODER_NATIVE_SYMBOL=XNT\n"
        "IXDECODER_RPC_URL = http://from-file\n"
    )
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)
    monkeypatch.setenv("IXDECODER_RPC_URL", "http://from-env")
    # Register the variable so the value loaded from the file is undone afterwards
    monkeypatch.setenv("IXDECODER_NATIVE_SYMBOL", "")
    monkeypatch.delenv("IXDECODER_NATIVE_SYMBOL")

    config = DecoderConfig.from_env()
    assert config.native_symbol == "XNT"
    # Existing environment wins over the file
    assert config.rpc_url == "http://from-env"


def test_load_env_without_file(tmp_path):
    before = dict(os.environ)
    load_env()
    assert "IXDECODER_RPC_URL" not in os.environ
    assert dict(os.environ) == before

"""Runtime configuration read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .programs.base import SQUADS_V4_PROGRAM_ID

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"


def load_env():
    """Load .env file from parent directories."""
    current = Path.cwd()
    for _ in range(5):  # Check up to 5 parent dirs
        env_file = current / ".env"
        if env_file.exists():
            with open(env_file) as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, value = line.split("=", 1)
                        os.environ.setdefault(key.strip(), value.strip())
            break
        current = current.parent


@dataclass
class DecoderConfig:
    """Settings shared by the CLI and the decoder factory."""
    rpc_url: str = DEFAULT_RPC_URL
    multisig_program_id: str = SQUADS_V4_PROGRAM_ID
    schema_dir: Optional[str] = None  # Directory of *.json schemas to register
    native_symbol: str = "SOL"
    request_timeout: float = 30.0  # Seconds
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, load_dotenv: bool = True) -> "DecoderConfig":
        """Build a config from IXDECODER_* variables."""
        if load_dotenv:
            load_env()
        env = os.environ
        return cls(
            rpc_url=env.get("IXDECODER_RPC_URL", DEFAULT_RPC_URL),
            multisig_program_id=env.get("IXDECODER_MULTISIG_PROGRAM_ID", SQUADS_V4_PROGRAM_ID),
            schema_dir=env.get("IXDECODER_SCHEMA_DIR") or None,
            native_symbol=env.get("IXDECODER_NATIVE_SYMBOL", "SOL"),
            request_timeout=float(env.get("IXDECODER_TIMEOUT", "30")),
            log_level=env.get("IXDECODER_LOG_LEVEL", "WARNING").upper(),
        )

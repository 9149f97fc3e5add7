"""
Runtime configuration.

Environment variables drive everything; ``~/.crunner/.env`` can seed them.
Variables already set in the process environment take precedence over
the file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .chain.rpc import DEFAULT_TIMEOUT
from .errors import InputValidationError

# Default config directory
CRUNNER_DIR = Path.home() / ".crunner"
CRUNNER_ENV = CRUNNER_DIR / ".env"

SECRET_KEY_VAR = "CRUNNER_SETTER_SECRETKEY"
RPC_URL_VAR = "CRUNNER_RPC_URL"
RPC_TIMEOUT_VAR = "CRUNNER_RPC_TIMEOUT"
LOG_LEVEL_VAR = "CRUNNER_LOG_LEVEL"


def load_env_file(env_path: Optional[Path] = None) -> bool:
    """
    Load variables from the dotenv file, if it exists.

    Returns:
        True if a file was found and loaded
    """
    env_path = env_path or CRUNNER_ENV
    if not env_path.exists():
        return False
    return load_dotenv(env_path, override=False)


def chain_rpc_var(chain: str) -> str:
    """Name of the per-chain endpoint override, e.g. ``CRUNNER_BSC_RPC``."""
    return f"CRUNNER_{chain.upper()}_RPC"


def rpc_timeout() -> float:
    raw = os.environ.get(RPC_TIMEOUT_VAR)
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise InputValidationError(f"{RPC_TIMEOUT_VAR} must be a number of seconds, got '{raw}'") from exc
    if timeout <= 0:
        raise InputValidationError(f"{RPC_TIMEOUT_VAR} must be positive, got '{raw}'")
    return timeout

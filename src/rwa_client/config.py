"""
Runtime configuration.

Values come from the environment, optionally seeded from
``~/.rwa_client/.env``. Every getter has a testnet default so the library
works without any configuration.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Default config directory
RWA_DIR = Path.home() / ".rwa_client"
RWA_ENV = RWA_DIR / ".env"

DEFAULT_NODE_URL = "https://json-rpc.testnet.concordium.com"
DEFAULT_CCDSCAN_URL = "https://testnet.ccdscan.io"
DEFAULT_POLL_INTERVAL = 0.5  # seconds between status polls
DEFAULT_RPC_TIMEOUT = 30.0


def load_env(env_path: Optional[Path] = None) -> Optional[Path]:
    """
    Load settings from a .env file without overriding the environment.

    Returns:
        The loaded path, or None if the file does not exist
    """
    env_path = env_path or RWA_ENV
    if not env_path.exists():
        return None
    load_dotenv(env_path, override=False)
    return env_path


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def get_node_url() -> str:
    """Get the node JSON-RPC URL from environment or default."""
    return os.environ.get("CONCORDIUM_NODE_URL", DEFAULT_NODE_URL)


def get_poll_interval() -> float:
    return _float_env("RWA_POLL_INTERVAL", DEFAULT_POLL_INTERVAL)


def get_rpc_timeout() -> float:
    return _float_env("RWA_RPC_TIMEOUT", DEFAULT_RPC_TIMEOUT)


def get_ccdscan_url() -> str:
    return os.environ.get("CCDSCAN_URL", DEFAULT_CCDSCAN_URL).rstrip("/")


def get_artifacts_dir() -> Optional[Path]:
    """Directory holding generated contract artifacts, if configured."""
    raw = os.environ.get("RWA_ARTIFACTS_DIR")
    return Path(raw).expanduser() if raw else None


def transaction_link(txn_hash: str) -> str:
    """CCDScan explorer link for a transaction."""
    return f"{get_ccdscan_url()}/?dcount=1&dentity=transaction&dhash={txn_hash}"

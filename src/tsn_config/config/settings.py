"""Runtime settings from environment variables.

Environment Variables:
    TSNCONF_MAX_WORKERS: Concurrent pushes per orchestration run (default: 8)
    TSNCONF_RPC_TIMEOUT: NETCONF RPC reply timeout in seconds (default: 30)
    TSNCONF_CONNECT_TIMEOUT: SSH connect timeout in seconds (default: 10)
    TSNCONF_CONNECT_RETRIES: Session establishment attempts (default: 3)
    TSNCONF_INVENTORY: Path to the YAML inventory
    TSNCONF_AUDIT_DIR: Directory for the push audit log (default: ~/.tsn-config)
"""
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_NETCONF_PORT = 830


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


@dataclass
class Settings:
    """Settings shared by the engine, backends and transport."""
    max_workers: int = 8
    rpc_timeout: float = 30
    connect_timeout: float = 10
    connect_retries: int = 3
    retry_min_wait: float = 1
    retry_max_wait: float = 10
    inventory_path: Optional[str] = None
    audit_dir: Optional[str] = None

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.connect_retries < 1:
            raise ValueError("connect_retries must be at least 1")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            max_workers=_env_int("TSNCONF_MAX_WORKERS", 8),
            rpc_timeout=_env_float("TSNCONF_RPC_TIMEOUT", 30),
            connect_timeout=_env_float("TSNCONF_CONNECT_TIMEOUT", 10),
            connect_retries=_env_int("TSNCONF_CONNECT_RETRIES", 3),
            inventory_path=os.environ.get("TSNCONF_INVENTORY") or None,
            audit_dir=os.environ.get("TSNCONF_AUDIT_DIR") or None,
        )

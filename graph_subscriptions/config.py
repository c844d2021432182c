import os
import logging
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError

DEFAULT_RPC_URL = "http://localhost:8545"


def _get_int(name: str, default: Optional[int] = None) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


@dataclass
class Settings:
    """Deployment settings, read from the process environment."""

    rpc_url: str = DEFAULT_RPC_URL
    private_key: Optional[str] = None
    mnemonic: Optional[str] = None
    accounts_count: int = 1
    chain_id: Optional[int] = None
    gas_limit: Optional[int] = None
    tx_timeout: int = 120
    artifacts_dir: str = "artifacts"
    deployments_file: Optional[str] = "deployment.json"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(f"LOG_LEVEL must be a logging level name, got {self.log_level!r}")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            rpc_url=os.getenv("RPC_URL", DEFAULT_RPC_URL),
            private_key=os.getenv("PRIVATE_KEY") or None,
            mnemonic=os.getenv("MNEMONIC") or None,
            accounts_count=_get_int("ACCOUNTS_COUNT", 1),
            chain_id=_get_int("CHAIN_ID"),
            gas_limit=_get_int("GAS_LIMIT"),
            tx_timeout=_get_int("TX_TIMEOUT", 120),
            artifacts_dir=os.getenv("ARTIFACTS_DIR", "artifacts"),
            # An empty DEPLOYMENTS_FILE turns recording off
            deployments_file=os.getenv("DEPLOYMENTS_FILE", "deployment.json") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("LOG_FILE") or None,
        )

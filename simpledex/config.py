"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from simpledex.constants import DEFAULT_ENGINE_ADDRESS
from simpledex.models.types import normalize_address


@dataclass(frozen=True)
class DexConfig:
    """Centralized configuration for the engine.

    Attributes:
        engine_address: Account that holds pooled assets in the asset ledger.
            Providers and traders approve this address as spender.
        log_level: Minimum level for structlog output (e.g. "INFO", "DEBUG")
        event_log_size: Number of committed events SimpleDex.events retains;
            older events are dropped (subscribers still see every event)
    """

    engine_address: str = DEFAULT_ENGINE_ADDRESS
    log_level: str = "INFO"
    event_log_size: int = 10_000

    def __post_init__(self) -> None:
        object.__setattr__(self, "engine_address", normalize_address(self.engine_address, validate=True))
        object.__setattr__(self, "log_level", self.log_level.upper())
        if self.event_log_size <= 0:
            raise ValueError(f"event_log_size must be positive, got {self.event_log_size}")

    @classmethod
    def from_env(cls) -> DexConfig:
        """Build a config from environment variables.

        - SIMPLEDEX_ENGINE_ADDRESS: engine account (default: DEFAULT_ENGINE_ADDRESS)
        - SIMPLEDEX_LOG_LEVEL: log level (default: INFO)
        - SIMPLEDEX_EVENT_LOG_SIZE: retained event count (default: 10000)
        """
        return cls(
            engine_address=os.environ.get("SIMPLEDEX_ENGINE_ADDRESS", DEFAULT_ENGINE_ADDRESS),
            log_level=os.environ.get("SIMPLEDEX_LOG_LEVEL", "INFO"),
            event_log_size=int(os.environ.get("SIMPLEDEX_EVENT_LOG_SIZE", "10000")),
        )


# Default configuration instance
DEFAULT_DEX_CONFIG = DexConfig()

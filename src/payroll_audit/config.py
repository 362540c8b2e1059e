"""Configuration management for the payroll audit service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from payroll_audit.detection.config import DetectionConfig


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    tax_rules_path: str
    engine_version: str
    host: str
    port: int
    debug: bool
    log_level: str
    history_min_records: int
    history_window: int

    @property
    def HOST(self) -> str:
        """Alias for host."""
        return self.host

    @property
    def PORT(self) -> int:
        """Alias for port."""
        return self.port

    @property
    def DEBUG(self) -> bool:
        """Alias for debug."""
        return self.debug

    def detection_config(self) -> DetectionConfig:
        """Detection thresholds with the history tunables applied."""
        return DetectionConfig(
            min_history_records=self.history_min_records,
            history_window=self.history_window,
        )

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv(
                "DATABASE_URL",
                "sqlite+aiosqlite:///./payroll_audit.db",
            ),
            tax_rules_path=os.getenv("TAX_RULES_PATH", "config/tax_rules.json"),
            engine_version=os.getenv("ENGINE_VERSION", "1.0.0"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            history_min_records=int(os.getenv("HISTORY_MIN_RECORDS", "3")),
            history_window=int(os.getenv("HISTORY_WINDOW", "6")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()

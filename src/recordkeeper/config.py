"""Application settings resolved from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from recordkeeper.metadata.loader import DEFAULT_METADATA_PATH
from recordkeeper.persistence.config import DatabaseConfig

DEV_SECRET_KEY = "dev-secret-key-change-in-production"


def _split_emails(raw: str | None) -> frozenset[str]:
    if not raw:
        return frozenset()
    return frozenset(e.strip().lower() for e in raw.split(",") if e.strip())


@dataclass
class Settings:
    """Runtime configuration for the API and CLI.

    Attributes:
        database: Record Store connection configuration
        secret_key: Key used to sign access tokens
        metadata_path: Directory holding ``record_types/*.yaml``
        admin_emails: Emails that are granted ADMIN on login
        log_level: Root logging level name
        token_ttl: Access token lifetime in seconds
        port: Port for ``recordkeeper serve``
    """

    database: DatabaseConfig
    secret_key: str = DEV_SECRET_KEY
    metadata_path: Path = DEFAULT_METADATA_PATH
    admin_emails: frozenset[str] = field(default_factory=frozenset)
    log_level: str = "INFO"
    token_ttl: int = 3600
    port: int = 8000

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> Settings:
        """Build settings from ``RECORDKEEPER_*`` environment variables."""
        metadata_path = os.environ.get("RECORDKEEPER_METADATA_PATH")
        return cls(
            database=DatabaseConfig.from_env(base_path),
            secret_key=os.environ.get("RECORDKEEPER_SECRET_KEY", DEV_SECRET_KEY),
            metadata_path=Path(metadata_path) if metadata_path else DEFAULT_METADATA_PATH,
            admin_emails=_split_emails(os.environ.get("RECORDKEEPER_ADMIN_EMAILS")),
            log_level=os.environ.get("RECORDKEEPER_LOG_LEVEL", "INFO").upper(),
            token_ttl=int(os.environ.get("RECORDKEEPER_TOKEN_TTL", "3600")),
            port=int(os.environ.get("RECORDKEEPER_PORT", "8000")),
        )

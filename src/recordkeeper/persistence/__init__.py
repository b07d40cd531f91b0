"""Persistence layer - Record Store adapters."""

from recordkeeper.persistence.adapter import PersistenceAdapter
from recordkeeper.persistence.config import DatabaseConfig, create_adapter

__all__ = ["PersistenceAdapter", "DatabaseConfig", "create_adapter"]

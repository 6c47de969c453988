"""SQLAlchemy adapter package for rosterkeep."""

from __future__ import annotations

from .mappings import create_all_tables, documents_table, metadata
from .store import SqlAlchemyDocumentStore

__all__ = [
    "SqlAlchemyDocumentStore",
    "create_all_tables",
    "documents_table",
    "metadata",
]

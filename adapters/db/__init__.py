"""
데이터베이스 어댑터

SQLite WAL 모드 연결 관리 및 원장 저장소.
"""

from adapters.db.ledger_repository import SQLiteLedgerRepository
from adapters.db.sqlite_adapter import (
    LEDGER_TABLES,
    SQLiteAdapter,
    create_connection,
    init_schema,
)

__all__ = [
    "LEDGER_TABLES",
    "SQLiteAdapter",
    "SQLiteLedgerRepository",
    "create_connection",
    "init_schema",
]

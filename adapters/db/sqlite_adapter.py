"""
SQLite 어댑터

그룹 원장 DB 연결 관리 (WAL 모드).
조회용 읽기 전용 연결과 정산 기록용 쓰기 연결이 같은 파일을 동시에 사용.

주의: SQLite alias로 time, count 사용 금지 (예약어)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

logger = logging.getLogger(__name__)

# 연결마다 적용하는 PRAGMA (순서대로 실행)
CONNECTION_PRAGMAS: tuple[str, ...] = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA busy_timeout=30000",  # 쓰기 잠금 대기 30초
    "PRAGMA foreign_keys=ON",  # 명부/지출/정산 → groups 참조 무결성
)

# init_schema가 생성하는 테이블
LEDGER_TABLES: tuple[str, ...] = (
    "groups",
    "group_members",
    "expenses",
    "expense_shares",
    "settlements",
)


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """원장 DB 연결 생성

    Args:
        db_path: DB 파일 경로 (상위 디렉토리는 자동 생성)
        readonly: True면 mode=ro URI로 연결 (잔액 조회 전용)

    Returns:
        PRAGMA가 적용된 aiosqlite 연결
    """
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if readonly:
        conn = await aiosqlite.connect(f"file:{path}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(str(path))

    for pragma in CONNECTION_PRAGMAS:
        await conn.execute(pragma)

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": str(path), "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """원장 DB 어댑터

    연결 수명, 단순 조회 헬퍼, 트랜잭션 컨텍스트 매니저 제공.
    SQLiteLedgerRepository가 이 어댑터 위에서 동작.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (조회 API용 연결)

    사용 예시:
    ```python
    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)

        async with db.transaction() as conn:
            await conn.execute("UPDATE groups SET ledger_version = ledger_version + 1 ...")
            await conn.execute("INSERT INTO settlements ...")
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        return self._conn

    async def connect(self) -> None:
        """연결 생성 (이미 연결되어 있으면 무시)"""
        if self._conn is None:
            self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None
        logger.info("SQLite 연결 종료", extra={"db_path": str(self.db_path)})

    # -------------------------------------------------------------------------
    # 실행 / 조회
    # -------------------------------------------------------------------------

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행 (커밋은 호출자 책임)"""
        conn = self._require_conn()
        if parameters:
            return await conn.execute(sql, parameters)
        return await conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        return await self._require_conn().executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchall()

    async def fetchval(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
        default: Any = None,
    ) -> Any:
        """첫 행의 첫 컬럼 (행이 없으면 default)

        사용 예시:
        ```python
        total = await db.fetchval("SELECT COUNT(*) FROM settlements WHERE group_id = ?", (gid,), 0)
        ```
        """
        row = await self.fetchone(sql, parameters)
        return row[0] if row is not None else default

    async def commit(self) -> None:
        if self._conn is not None:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        블록이 정상 종료되면 커밋, 예외가 나면 롤백 후 예외 재발생.
        ledger_version 증가와 레코드 저장을 하나의 단위로 묶는 데 사용.
        """
        conn = self._require_conn()
        try:
            yield conn
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    금액 컬럼은 모두 INTEGER 최소 단위.
    멤버는 정규화 키(user:<id> / email:<addr>)로 저장.

    Args:
        adapter: 연결된 SQLiteAdapter
    """
    # groups
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS groups (
            group_id         TEXT PRIMARY KEY,
            name             TEXT,
            currency         TEXT NOT NULL,
            ledger_version   INTEGER NOT NULL DEFAULT 0,

            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # group_members (명부)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS group_members (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            group_id         TEXT NOT NULL,
            member_key       TEXT NOT NULL,
            member_kind      TEXT NOT NULL,
            identifier       TEXT NOT NULL,
            email            TEXT,
            display_name     TEXT,
            status           TEXT NOT NULL DEFAULT 'active',
            position         INTEGER NOT NULL DEFAULT 0,

            joined_at        TEXT NOT NULL DEFAULT (datetime('now')),

            UNIQUE(group_id, member_key),
            FOREIGN KEY (group_id) REFERENCES groups(group_id)
        )
    """)

    # expenses
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS expenses (
            expense_id       TEXT PRIMARY KEY,
            group_id         TEXT NOT NULL,
            amount           INTEGER NOT NULL CHECK (amount > 0),
            currency         TEXT NOT NULL,
            payer_key        TEXT NOT NULL,
            split_type       TEXT NOT NULL DEFAULT 'equal',
            description      TEXT,
            is_void          INTEGER NOT NULL DEFAULT 0,
            ts               TEXT NOT NULL,

            created_at       TEXT NOT NULL DEFAULT (datetime('now')),

            FOREIGN KEY (group_id) REFERENCES groups(group_id)
        )
    """)

    # expense_shares (split_type='equal'이면 share_amount NULL)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS expense_shares (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            expense_id       TEXT NOT NULL,
            member_key       TEXT NOT NULL,
            share_amount     INTEGER,

            UNIQUE(expense_id, member_key),
            FOREIGN KEY (expense_id) REFERENCES expenses(expense_id)
        )
    """)

    # settlements
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS settlements (
            seq              INTEGER PRIMARY KEY AUTOINCREMENT,
            settlement_id    TEXT NOT NULL UNIQUE,
            group_id         TEXT NOT NULL,
            from_key         TEXT NOT NULL,
            to_key           TEXT NOT NULL,
            amount           INTEGER NOT NULL CHECK (amount > 0),
            currency         TEXT NOT NULL,
            status           TEXT NOT NULL DEFAULT 'completed',
            payment_method   TEXT,
            comments         TEXT,
            idempotency_key  TEXT,
            ts               TEXT NOT NULL,

            created_at       TEXT NOT NULL DEFAULT (datetime('now')),

            UNIQUE(group_id, idempotency_key),
            FOREIGN KEY (group_id) REFERENCES groups(group_id)
        )
    """)

    # 인덱스 생성
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_group_members_group
        ON group_members(group_id, position)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_expenses_group
        ON expenses(group_id, ts)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_settlements_group
        ON settlements(group_id, ts DESC)
    """)

    await adapter.commit()

    logger.info("원장 스키마 초기화 완료", extra={"tables": list(LEDGER_TABLES)})

"""
SQLite 원장 저장소

ILedgerReader / ILedgerWriter 구현.
그룹 명부, 지출, 정산을 SQLite에 저장하고 불변 레코드로 변환하여 반환.

원장에 영향을 주는 모든 쓰기(멤버 추가, 지출 저장/무효화, 정산)는
같은 트랜잭션 안에서 groups.ledger_version을 1 증가시킴.
"""

import logging
import sqlite3
from typing import Any

import aiosqlite

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import GroupNotFoundError
from core.ledger.members import MemberDirectory
from core.ledger.records import ExpenseRecord, GroupInfo, SettlementRecord
from core.money import normalize_currency
from core.types import Member, MemberStatus, SettlementStatus
from core.utils.timezone import parse_iso, to_iso

logger = logging.getLogger(__name__)

_SETTLEMENT_COLUMNS = """
    settlement_id, from_key, to_key, amount, currency,
    status, payment_method, comments, ts
"""


class SQLiteLedgerRepository:
    """SQLite 원장 저장소

    Args:
        adapter: 연결 및 스키마 초기화된 SQLite 어댑터

    사용 예시:
    ```python
    repo = SQLiteLedgerRepository(adapter)

    await repo.create_group("trip", "INR", name="Goa Trip")
    await repo.add_member("trip", Member.registered("u-1", "alice@x.com"))
    await repo.insert_expense("trip", expense)

    engine = BalanceEngine(repo)
    ```
    """

    def __init__(self, adapter: SQLiteAdapter):
        self.adapter = adapter

    # -------------------------------------------------------------------------
    # 내부 헬퍼
    # -------------------------------------------------------------------------

    @staticmethod
    async def _bump_version(conn: aiosqlite.Connection, group_id: str) -> None:
        cursor = await conn.execute(
            """
            UPDATE groups
            SET ledger_version = ledger_version + 1,
                updated_at = datetime('now')
            WHERE group_id = ?
            """,
            (group_id,),
        )
        if cursor.rowcount == 0:
            raise GroupNotFoundError(group_id)

    async def _members(self, group_id: str) -> tuple[Member, ...]:
        rows = await self.adapter.fetchall(
            """
            SELECT member_key, email, display_name
            FROM group_members
            WHERE group_id = ?
            ORDER BY position, id
            """,
            (group_id,),
        )
        members = []
        for member_key, email, display_name in rows:
            base = Member.from_key(member_key)
            members.append(
                Member(
                    kind=base.kind,
                    identifier=base.identifier,
                    email=email,
                    display_name=display_name,
                )
            )
        return tuple(members)

    async def _directory(self, group_id: str) -> MemberDirectory:
        return MemberDirectory(group_id, await self._members(group_id))

    @staticmethod
    def _lookup(directory: MemberDirectory, key: str) -> Member:
        """저장된 키를 명부 Member로 해석

        초대 이메일 키(email:<addr>)는 같은 이메일의 가입 멤버로 해석.
        명부에서 빠진 멤버의 과거 레코드는 키만으로 복원.
        """
        return directory.find(key) or Member.from_key(key)

    def _row_to_settlement(self, row: tuple[Any, ...], directory: MemberDirectory) -> SettlementRecord:
        (
            settlement_id, from_key, to_key, amount, currency,
            status, payment_method, comments, ts,
        ) = row
        return SettlementRecord(
            settlement_id=settlement_id,
            amount=amount,
            from_member=self._lookup(directory, from_key),
            to_member=self._lookup(directory, to_key),
            currency=currency,
            ts=parse_iso(ts),
            status=SettlementStatus(status),
            payment_method=payment_method,
            comments=comments,
        )

    # -------------------------------------------------------------------------
    # ILedgerReader
    # -------------------------------------------------------------------------

    async def get_group(self, group_id: str) -> GroupInfo:
        """그룹 정보 조회

        Raises:
            GroupNotFoundError: 그룹 없음
        """
        row = await self.adapter.fetchone(
            "SELECT group_id, name, currency, ledger_version FROM groups WHERE group_id = ?",
            (group_id,),
        )
        if row is None:
            raise GroupNotFoundError(group_id)

        return GroupInfo(
            group_id=row[0],
            name=row[1],
            currency=row[2],
            ledger_version=row[3],
            members=await self._members(group_id),
        )

    async def list_expenses(self, group_id: str) -> list[ExpenseRecord]:
        """무효 처리되지 않은 지출 목록"""
        directory = await self._directory(group_id)

        expense_rows = await self.adapter.fetchall(
            """
            SELECT expense_id, amount, currency, payer_key, split_type, description, ts
            FROM expenses
            WHERE group_id = ? AND is_void = 0
            ORDER BY ts, expense_id
            """,
            (group_id,),
        )
        share_rows = await self.adapter.fetchall(
            """
            SELECT s.expense_id, s.member_key, s.share_amount
            FROM expense_shares s
            JOIN expenses e ON e.expense_id = s.expense_id
            WHERE e.group_id = ? AND e.is_void = 0
            ORDER BY s.id
            """,
            (group_id,),
        )

        shares_by_expense: dict[str, list[tuple[str, int | None]]] = {}
        for expense_id, member_key, share_amount in share_rows:
            shares_by_expense.setdefault(expense_id, []).append((member_key, share_amount))

        expenses = []
        for expense_id, amount, currency, payer_key, split_type, description, ts in expense_rows:
            share_list = shares_by_expense.get(expense_id, [])
            beneficiaries = tuple(self._lookup(directory, key) for key, _ in share_list)
            shares = None
            if split_type == "exact":
                shares = tuple(
                    (self._lookup(directory, key), share_amount)
                    for key, share_amount in share_list
                )

            expenses.append(
                ExpenseRecord(
                    expense_id=expense_id,
                    amount=amount,
                    payer=self._lookup(directory, payer_key),
                    beneficiaries=beneficiaries,
                    currency=currency,
                    ts=parse_iso(ts),
                    shares=shares,
                    description=description,
                )
            )
        return expenses

    async def list_completed_settlements(self, group_id: str) -> list[SettlementRecord]:
        """완료된 정산 목록"""
        directory = await self._directory(group_id)
        rows = await self.adapter.fetchall(
            f"""
            SELECT {_SETTLEMENT_COLUMNS}
            FROM settlements
            WHERE group_id = ? AND status = ?
            ORDER BY seq
            """,
            (group_id, SettlementStatus.COMPLETED.value),
        )
        return [self._row_to_settlement(row, directory) for row in rows]

    async def resolve_member(self, group_id: str, reference: str) -> Member:
        """user id / 이메일 / 정규화 키를 명부 Member로 해석

        Raises:
            GroupNotFoundError: 그룹 없음
            MemberNotFoundError: 명부에 없음
        """
        group = await self.get_group(group_id)
        return MemberDirectory(group_id, group.members).resolve(reference)

    # -------------------------------------------------------------------------
    # ILedgerWriter
    # -------------------------------------------------------------------------

    async def get_settlement_by_idempotency_key(
        self, group_id: str, key: str
    ) -> SettlementRecord | None:
        """그룹 내 idempotency_key로 정산 조회 (키는 그룹 단위로 유일)"""
        row = await self.adapter.fetchone(
            f"""
            SELECT {_SETTLEMENT_COLUMNS}
            FROM settlements
            WHERE group_id = ? AND idempotency_key = ?
            """,
            (group_id, key),
        )
        if row is None:
            return None
        return self._row_to_settlement(row, await self._directory(group_id))

    async def insert_settlement(
        self,
        group_id: str,
        record: SettlementRecord,
        idempotency_key: str | None = None,
    ) -> SettlementRecord:
        """정산 저장 + ledger_version 증가 (하나의 트랜잭션)

        같은 그룹에 같은 idempotency_key가 이미 있으면 저장하지 않고 기존 레코드 반환.
        멤버는 명부 기준으로 정규화하여 저장.

        Raises:
            GroupNotFoundError: 그룹 없음 (롤백)
        """
        if idempotency_key:
            existing = await self.get_settlement_by_idempotency_key(group_id, idempotency_key)
            if existing is not None:
                logger.debug(f"Settlement duplicate: {idempotency_key}")
                return existing

        record = (await self._directory(group_id)).canonicalize(record)

        try:
            async with self.adapter.transaction() as conn:
                # 그룹이 없으면 여기서 GroupNotFoundError (롤백)
                await self._bump_version(conn, group_id)
                await conn.execute(
                    """
                    INSERT INTO settlements (
                        settlement_id, group_id, from_key, to_key, amount, currency,
                        status, payment_method, comments, idempotency_key, ts
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.settlement_id,
                        group_id,
                        record.from_member.key,
                        record.to_member.key,
                        record.amount,
                        record.currency,
                        record.status.value,
                        record.payment_method,
                        record.comments,
                        idempotency_key,
                        to_iso(record.ts),
                    ),
                )
        except sqlite3.IntegrityError:
            # 동시 요청이 같은 키로 먼저 커밋한 경우
            if idempotency_key:
                existing = await self.get_settlement_by_idempotency_key(group_id, idempotency_key)
                if existing is not None:
                    return existing
            raise

        logger.debug(
            f"Settlement inserted: {record.settlement_id}",
            extra={"group_id": group_id, "amount": record.amount},
        )
        return record

    async def list_settlements(
        self,
        group_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> list[SettlementRecord]:
        """정산 이력 (최신순, 상태 무관)"""
        directory = await self._directory(group_id)
        rows = await self.adapter.fetchall(
            f"""
            SELECT {_SETTLEMENT_COLUMNS}
            FROM settlements
            WHERE group_id = ?
            ORDER BY ts DESC, seq DESC
            LIMIT ? OFFSET ?
            """,
            (group_id, limit, offset),
        )
        return [self._row_to_settlement(row, directory) for row in rows]

    async def count_settlements(self, group_id: str) -> int:
        """정산 이력 총 개수"""
        return await self.adapter.fetchval(
            "SELECT COUNT(*) FROM settlements WHERE group_id = ?",
            (group_id,),
            default=0,
        )

    # -------------------------------------------------------------------------
    # 그룹/명부/지출 (외부 서비스 소유 데이터의 적재용)
    # -------------------------------------------------------------------------

    async def create_group(
        self,
        group_id: str,
        currency: str,
        name: str | None = None,
    ) -> GroupInfo:
        """그룹 생성

        Raises:
            ValidationError: 통화 코드가 잘못된 경우
        """
        code = normalize_currency(currency)
        async with self.adapter.transaction() as conn:
            await conn.execute(
                "INSERT INTO groups (group_id, name, currency) VALUES (?, ?, ?)",
                (group_id, name, code),
            )
        logger.info(f"Group created: {group_id} ({code})", extra={"group_id": group_id})
        return await self.get_group(group_id)

    async def add_member(
        self,
        group_id: str,
        member: Member,
        status: MemberStatus = MemberStatus.ACTIVE,
    ) -> None:
        """명부에 멤버 추가 (이미 있으면 무시)

        Raises:
            GroupNotFoundError: 그룹 없음
        """
        await self.get_group(group_id)

        async with self.adapter.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT OR IGNORE INTO group_members (
                    group_id, member_key, member_kind, identifier,
                    email, display_name, status, position
                ) VALUES (
                    ?, ?, ?, ?, ?, ?, ?,
                    (SELECT COUNT(*) FROM group_members WHERE group_id = ?)
                )
                """,
                (
                    group_id,
                    member.key,
                    member.kind.value,
                    member.identifier,
                    member.email,
                    member.display_name,
                    status.value,
                    group_id,
                ),
            )
            if cursor.rowcount > 0:
                await self._bump_version(conn, group_id)

    async def insert_expense(self, group_id: str, expense: ExpenseRecord) -> None:
        """지출 저장 (수혜자/분담액 포함)

        멤버는 명부 기준으로 정규화하여 저장.

        Raises:
            GroupNotFoundError: 그룹 없음 (롤백)
        """
        expense = (await self._directory(group_id)).canonicalize(expense)
        split_type = "exact" if expense.shares is not None else "equal"
        if expense.shares is not None:
            share_params = [
                (expense.expense_id, member.key, amount)
                for member, amount in expense.shares
            ]
        else:
            share_params = [
                (expense.expense_id, member.key, None)
                for member in expense.beneficiaries
            ]

        async with self.adapter.transaction() as conn:
            await self._bump_version(conn, group_id)
            await conn.execute(
                """
                INSERT INTO expenses (
                    expense_id, group_id, amount, currency, payer_key,
                    split_type, description, is_void, ts
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    expense.expense_id,
                    group_id,
                    expense.amount,
                    expense.currency,
                    expense.payer.key,
                    split_type,
                    expense.description,
                    1 if expense.is_void else 0,
                    to_iso(expense.ts),
                ),
            )
            await conn.executemany(
                """
                INSERT INTO expense_shares (expense_id, member_key, share_amount)
                VALUES (?, ?, ?)
                """,
                share_params,
            )

    async def void_expense(self, group_id: str, expense_id: str) -> bool:
        """지출 무효 처리

        Returns:
            True: 무효 처리됨, False: 없거나 이미 무효
        """
        async with self.adapter.transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE expenses SET is_void = 1
                WHERE group_id = ? AND expense_id = ? AND is_void = 0
                """,
                (group_id, expense_id),
            )
            voided = cursor.rowcount > 0
            if voided:
                await self._bump_version(conn, group_id)
        return voided

"""
잔액 엔진

원장 조회 → 잔액 계산 → {채무 그래프, 단순화} 흐름을 묶는 진입점.
외부 협력자(Web 라우트 등)는 이 클래스만 사용.

계산 단계는 모두 스냅샷에 대한 순수 함수이며 쓰기 작업 없음.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Iterable

from core.errors import ValidationError
from core.ledger.balance import calculate_balances
from core.ledger.cache import BalanceCache
from core.ledger.graph import DebtEdge, balance_between, build_debt_graph
from core.ledger.members import MemberDirectory
from core.ledger.records import ExpenseRecord, GroupInfo, LedgerSnapshot, SettlementRecord
from core.ledger.simplifier import DebtAnalysis, analyze
from core.ledger.what_if import HypotheticalRecord, WhatIfResult, simulate
from core.types import BalanceStatus, Member
from core.utils.timezone import ensure_utc

if TYPE_CHECKING:
    from adapters.interfaces import ILedgerReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemberBalance:
    """멤버 한 명의 잔액 뷰"""

    member: Member
    balance: int
    status: BalanceStatus
    owes_total: int
    owed_total: int
    suggestions: list[DebtEdge]
    currency: str


class BalanceEngine:
    """그룹 잔액/채무 엔진

    Args:
        reader: 원장 조회 어댑터
        cache: 채무 분석 캐시 (None이면 캐시 미사용)

    사용 예시:
    ```python
    engine = BalanceEngine(SQLiteLedgerRepository(db), cache)

    balances = await engine.compute_balances("trip-2026")
    suggestions = await engine.compute_settlement_suggestions("trip-2026")
    ```
    """

    def __init__(self, reader: ILedgerReader, cache: BalanceCache | None = None):
        self.reader = reader
        self.cache = cache

    # -------------------------------------------------------------------------
    # 스냅샷
    # -------------------------------------------------------------------------

    async def _snapshot_for(self, group: GroupInfo) -> LedgerSnapshot:
        expenses = await self.reader.list_expenses(group.group_id)
        settlements = await self.reader.list_completed_settlements(group.group_id)
        # 저장소가 다른 형태로 기록한 멤버도 명부 멤버로 합산
        directory = MemberDirectory(group.group_id, group.members)
        return LedgerSnapshot(
            group=group,
            expenses=tuple(directory.canonicalize(e) for e in expenses),
            settlements=tuple(directory.canonicalize(s) for s in settlements),
        )

    async def load_snapshot(self, group_id: str) -> LedgerSnapshot:
        """그룹 원장 스냅샷 조회

        Raises:
            GroupNotFoundError: 그룹 없음 (협력자 예외 그대로 전파)
        """
        group = await self.reader.get_group(group_id)
        return await self._snapshot_for(group)

    async def get_group(self, group_id: str) -> GroupInfo:
        """그룹 정보 (통화, 명부, ledger_version)"""
        return await self.reader.get_group(group_id)

    async def _resolve(self, group_id: str, reference: str | Member) -> Member:
        if isinstance(reference, Member):
            reference = reference.key
        return await self.reader.resolve_member(group_id, reference)

    # -------------------------------------------------------------------------
    # 잔액 / 단순화
    # -------------------------------------------------------------------------

    async def analyze(self, group_id: str) -> DebtAnalysis:
        """그룹 채무 분석 (캐시 사용)

        캐시 키는 (group_id, ledger_version).
        """
        group = await self.reader.get_group(group_id)

        if self.cache is not None:
            cached = self.cache.get(group_id, group.ledger_version)
            if cached is not None:
                return cached

        snapshot = await self._snapshot_for(group)
        balances = calculate_balances(snapshot)
        analysis = analyze(
            balances,
            group_id=group_id,
            ledger_version=group.ledger_version,
            currency=group.currency,
        )

        if self.cache is not None:
            self.cache.put(analysis)

        logger.info(
            f"Group analyzed: {group_id} (v{group.ledger_version})",
            extra={
                "group_id": group_id,
                "ledger_version": group.ledger_version,
                "transaction_count": analysis.summary.transaction_count,
            },
        )
        return analysis

    async def compute_balances(self, group_id: str) -> dict[Member, int]:
        """멤버별 순잔액 (최소 단위 정수, 합계 0)"""
        analysis = await self.analyze(group_id)
        return dict(analysis.balances)

    async def compute_settlement_suggestions(self, group_id: str) -> list[DebtEdge]:
        """단순화된 정산 제안 (결정적 순서)"""
        analysis = await self.analyze(group_id)
        return list(analysis.suggestions)

    async def get_member_balance(self, group_id: str, reference: str | Member) -> MemberBalance:
        """멤버 한 명의 잔액과 관련 정산 제안

        Raises:
            MemberNotFoundError: 명부에 없는 멤버
        """
        member = await self._resolve(group_id, reference)
        analysis = await self.analyze(group_id)

        balance = analysis.balances.get(member, 0)
        involved = [
            edge for edge in analysis.suggestions
            if member in (edge.from_member, edge.to_member)
        ]

        return MemberBalance(
            member=member,
            balance=balance,
            status=BalanceStatus.of(balance),
            owes_total=-balance if balance < 0 else 0,
            owed_total=balance if balance > 0 else 0,
            suggestions=involved,
            currency=analysis.currency,
        )

    # -------------------------------------------------------------------------
    # 상세 채무
    # -------------------------------------------------------------------------

    async def compute_detailed_debts(
        self,
        group_id: str,
        member_ref: str | Member | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[DebtEdge]:
        """원본 이력 기준 상세 채무 (단순화 전)

        Args:
            group_id: 그룹 ID
            member_ref: 지정 시 해당 멤버 관련 간선만
            start: 이 시각 이후 레코드만 (포함)
            end: 이 시각 이전 레코드만 (포함)

        Raises:
            ValidationError: start가 end보다 늦은 경우
        """
        start = ensure_utc(start) if start is not None else None
        end = ensure_utc(end) if end is not None else None
        if start is not None and end is not None and start > end:
            raise ValidationError("start must not be later than end")

        member = await self._resolve(group_id, member_ref) if member_ref is not None else None
        snapshot = await self.load_snapshot(group_id)
        return build_debt_graph(snapshot, member=member, start=start, end=end)

    async def balance_between(
        self,
        group_id: str,
        reference_a: str | Member,
        reference_b: str | Member,
    ) -> int:
        """두 멤버 간 순채무 (양수면 b가 a에게 빚짐)"""
        a = await self._resolve(group_id, reference_a)
        b = await self._resolve(group_id, reference_b)
        snapshot = await self.load_snapshot(group_id)
        return balance_between(snapshot, a, b)

    # -------------------------------------------------------------------------
    # What-If
    # -------------------------------------------------------------------------

    async def simulate_what_if(
        self,
        group_id: str,
        hypothetical: HypotheticalRecord | Iterable[HypotheticalRecord],
    ) -> WhatIfResult:
        """가상 지출/정산 적용 결과 (저장/캐시 변경 없음)

        가상 레코드의 멤버는 명부 기준으로 정규화한 뒤 시뮬레이션.
        """
        snapshot = await self.load_snapshot(group_id)
        directory = MemberDirectory(group_id, snapshot.members)

        if isinstance(hypothetical, (ExpenseRecord, SettlementRecord)):
            hypothetical = (hypothetical,)
        records = tuple(directory.canonicalize(record) for record in hypothetical)

        return simulate(snapshot, records)


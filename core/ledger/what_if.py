"""
What-If 시뮬레이터

가상 지출/정산을 더한 스냅샷으로 계산기와 단순화를 다시 실행.
원본 스냅샷, 캐시, 저장소에는 어떤 영향도 주지 않음 (완전 격리).
"""

import logging
from dataclasses import dataclass, replace
from typing import Iterable

from core.errors import ValidationError
from core.ledger.balance import calculate_balances, check_currency
from core.ledger.graph import DebtEdge
from core.ledger.members import MemberDirectory
from core.ledger.records import ExpenseRecord, LedgerSnapshot, SettlementRecord
from core.ledger.simplifier import simplify_debts
from core.types import Member, SettlementStatus

logger = logging.getLogger(__name__)

HypotheticalRecord = ExpenseRecord | SettlementRecord


@dataclass(frozen=True)
class WhatIfResult:
    """What-If 결과"""

    current_balances: dict[Member, int]
    projected_balances: dict[Member, int]
    suggestions: list[DebtEdge]
    hypothetical: tuple[HypotheticalRecord, ...]

    @property
    def remaining_debts(self) -> int:
        """가정 적용 후 잔액이 0이 아닌 멤버 수"""
        return sum(1 for balance in self.projected_balances.values() if balance != 0)


def _normalize_records(
    hypothetical: HypotheticalRecord | Iterable[HypotheticalRecord],
) -> tuple[HypotheticalRecord, ...]:
    if isinstance(hypothetical, (ExpenseRecord, SettlementRecord)):
        return (hypothetical,)
    return tuple(hypothetical)


def _validate(snapshot: LedgerSnapshot, records: tuple[HypotheticalRecord, ...]) -> None:
    """가상 레코드 검증 (명부 소속, 통화)"""
    directory = MemberDirectory(snapshot.group_id, snapshot.members)

    for record in records:
        check_currency(record, snapshot.currency)
        outsiders = [m.key for m in record.members if m not in directory]
        if outsiders:
            raise ValidationError(
                f"Hypothetical record references non-members of group "
                f"{snapshot.group_id}: {sorted(outsiders)}"
            )
        if isinstance(record, ExpenseRecord) and record.is_void:
            raise ValidationError("Hypothetical expense cannot be void")


def simulate(
    snapshot: LedgerSnapshot,
    hypothetical: HypotheticalRecord | Iterable[HypotheticalRecord],
) -> WhatIfResult:
    """가상 레코드를 적용한 잔액과 정산 제안 계산

    가상 정산은 상태와 무관하게 완료된 것으로 취급.

    Args:
        snapshot: 현재 그룹 스냅샷 (변경되지 않음)
        hypothetical: 가상 지출/정산 1건 또는 여러 건

    Returns:
        WhatIfResult

    Raises:
        ValidationError: 비멤버 참조, 통화 불일치, 빈 입력
        ConsistencyError: 계산 불변식 위반
    """
    records = _normalize_records(hypothetical)
    if not records:
        raise ValidationError("At least one hypothetical record is required")

    _validate(snapshot, records)

    records = tuple(
        replace(r, status=SettlementStatus.COMPLETED)
        if isinstance(r, SettlementRecord) and not r.is_completed
        else r
        for r in records
    )

    current = calculate_balances(snapshot)
    projected_snapshot = snapshot.with_records(records)
    projected = calculate_balances(projected_snapshot)
    suggestions = simplify_debts(projected, snapshot.group_id)

    logger.debug(
        f"What-if simulated: group={snapshot.group_id}, records={len(records)}",
        extra={"group_id": snapshot.group_id, "record_count": len(records)},
    )

    return WhatIfResult(
        current_balances=current,
        projected_balances=projected,
        suggestions=suggestions,
        hypothetical=records,
    )

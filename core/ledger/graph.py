"""
채무 그래프 생성기

원본 거래 이력을 다시 순회하여 (채무자, 채권자) 쌍별 상세 채무를 계산.
단순화 전의 "누가 누구에게 얼마" 상세 뷰에 사용.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from core.errors import ConsistencyError, ValidationError
from core.ledger.balance import calculate_balances, check_currency, split_expense
from core.ledger.records import LedgerSnapshot
from core.logging import CONSISTENCY_LOGGER_NAME
from core.types import Member

logger = logging.getLogger(__name__)
consistency_logger = logging.getLogger(CONSISTENCY_LOGGER_NAME)


@dataclass(frozen=True)
class DebtEdge:
    """채무 간선 (from_member가 to_member에게 amount만큼 빚짐)"""

    from_member: Member
    to_member: Member
    amount: int

    def __post_init__(self) -> None:
        if self.from_member == self.to_member:
            raise ValidationError(f"Self-loop debt edge: {self.from_member.key}")
        if self.amount <= 0:
            raise ValidationError(f"Debt edge amount must be positive: {self.amount}")


def _in_window(ts: datetime, start: datetime | None, end: datetime | None) -> bool:
    if start is not None and ts < start:
        return False
    if end is not None and ts > end:
        return False
    return True


def _pairwise_totals(
    snapshot: LedgerSnapshot,
    start: datetime | None = None,
    end: datetime | None = None,
) -> dict[tuple[Member, Member], int]:
    """정렬된 멤버 쌍 (a, b)별 부호 있는 채무

    a.key < b.key 이고 값이 양수면 a가 b에게 빚짐, 음수면 b가 a에게 빚짐.
    """
    totals: dict[tuple[Member, Member], int] = {}

    def add_debt(debtor: Member, creditor: Member, amount: int) -> None:
        if debtor == creditor:
            return
        if debtor.key < creditor.key:
            pair, signed = (debtor, creditor), amount
        else:
            pair, signed = (creditor, debtor), -amount
        totals[pair] = totals.get(pair, 0) + signed

    for expense in snapshot.active_expenses:
        if not _in_window(expense.ts, start, end):
            continue
        check_currency(expense, snapshot.currency)
        for member, share in split_expense(expense):
            add_debt(member, expense.payer, share)

    for settlement in snapshot.completed_settlements:
        if not _in_window(settlement.ts, start, end):
            continue
        check_currency(settlement, snapshot.currency)
        # 지급자의 수령자에 대한 채무 감소 == 수령자가 지급자에게 빚지는 방향으로 이동
        add_debt(settlement.to_member, settlement.from_member, settlement.amount)

    return totals


def build_debt_graph(
    snapshot: LedgerSnapshot,
    member: Member | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[DebtEdge]:
    """상세 채무 간선 목록

    양방향 채무는 하나의 간선으로 상계, 0인 쌍은 제외.
    (from.key, to.key) 오름차순 정렬.

    Args:
        snapshot: 그룹 원장 스냅샷
        member: 지정 시 해당 멤버가 포함된 간선만 반환
        start: 이 시각 이후 레코드만 (포함)
        end: 이 시각 이전 레코드만 (포함)

    Returns:
        DebtEdge 목록

    Raises:
        ConsistencyError: 필터 없는 그래프가 순잔액과 맞지 않는 경우
    """
    totals = _pairwise_totals(snapshot, start, end)

    edges: list[DebtEdge] = []
    for (a, b), signed in totals.items():
        if signed > 0:
            edges.append(DebtEdge(from_member=a, to_member=b, amount=signed))
        elif signed < 0:
            edges.append(DebtEdge(from_member=b, to_member=a, amount=-signed))

    if start is None and end is None:
        _verify_against_balances(snapshot, edges)

    if member is not None:
        edges = [e for e in edges if member in (e.from_member, e.to_member)]

    edges.sort(key=lambda e: (e.from_member.key, e.to_member.key))
    return edges


def _verify_against_balances(snapshot: LedgerSnapshot, edges: list[DebtEdge]) -> None:
    """간선 합산이 계산기의 순잔액과 일치하는지 교차 검증"""
    balances = calculate_balances(snapshot)

    derived: dict[Member, int] = {}
    for edge in edges:
        derived[edge.to_member] = derived.get(edge.to_member, 0) + edge.amount
        derived[edge.from_member] = derived.get(edge.from_member, 0) - edge.amount

    for member in set(balances) | set(derived):
        if balances.get(member, 0) != derived.get(member, 0):
            consistency_logger.error(
                f"Debt graph disagrees with net balance for {member.key} "
                f"in group {snapshot.group_id}",
                extra={
                    "group_id": snapshot.group_id,
                    "member": member.key,
                    "balance": balances.get(member, 0),
                    "graph": derived.get(member, 0),
                },
            )
            raise ConsistencyError(
                f"Debt graph of group {snapshot.group_id} disagrees with "
                f"net balance of {member.key}"
            )


def balance_between(snapshot: LedgerSnapshot, a: Member, b: Member) -> int:
    """두 멤버 사이의 순채무

    Returns:
        양수면 b가 a에게 빚짐, 음수면 a가 b에게 빚짐, 0이면 정산 완료
    """
    if a == b:
        return 0

    totals = _pairwise_totals(snapshot)
    if a.key < b.key:
        # 양수 = a가 b에게 빚짐
        return -totals.get((a, b), 0)
    return totals.get((b, a), 0)

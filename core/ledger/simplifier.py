"""
채무 단순화

순잔액만으로 최소에 가까운 정산 거래 목록을 계산.
가장 큰 채권자와 가장 큰 채무자를 반복 매칭하는 결정적 greedy 알고리즘.

보장:
- 제안을 순서대로 모두 적용하면 모든 잔액이 0
- 거래 수 <= 채권자 수 + 채무자 수 - 1
- 같은 입력이면 같은 출력 (동점은 Member.key 오름차순)

전역 최소 거래 수는 보장하지 않음 (NP-hard).
"""

import heapq
import logging
from dataclasses import dataclass, field
from decimal import Decimal

from core.errors import ConsistencyError
from core.ledger.graph import DebtEdge
from core.logging import CONSISTENCY_LOGGER_NAME
from core.types import Member

logger = logging.getLogger(__name__)
consistency_logger = logging.getLogger(CONSISTENCY_LOGGER_NAME)


@dataclass(frozen=True)
class SettlementSummary:
    """단순화 요약 통계"""

    total_owed: int
    total_credit: int
    is_balanced: bool
    transaction_count: int
    original_possible_transactions: int
    transactions_saved: int
    efficiency_improvement: str


@dataclass(frozen=True)
class DebtAnalysis:
    """그룹 채무 분석 결과

    캐시 단위. balances는 계산기 결과, suggestions는 단순화 결과.
    """

    group_id: str
    ledger_version: int
    balances: dict[Member, int]
    creditors: list[tuple[Member, int]]
    debtors: list[tuple[Member, int]]
    suggestions: list[DebtEdge]
    summary: SettlementSummary
    currency: str = field(default="")


def partition(balances: dict[Member, int]) -> tuple[list[tuple[Member, int]], list[tuple[Member, int]]]:
    """채권자/채무자 분리

    Returns:
        (채권자 목록, 채무자 목록). 채무자 금액은 절댓값.
        각각 금액 내림차순, 동점은 Member.key 오름차순. 잔액 0은 제외.
    """
    creditors = [(m, b) for m, b in balances.items() if b > 0]
    debtors = [(m, -b) for m, b in balances.items() if b < 0]
    creditors.sort(key=lambda item: (-item[1], item[0].key))
    debtors.sort(key=lambda item: (-item[1], item[0].key))
    return creditors, debtors


def simplify_debts(balances: dict[Member, int], group_id: str = "") -> list[DebtEdge]:
    """순잔액을 정산 제안 목록으로 단순화

    1. 잔액 > 0 채권자, < 0 채무자로 분리 (0 제외)
    2. 가장 큰 채권자와 가장 큰 채무자 선택 (동점은 key 오름차순)
    3. min(채권, 채무)만큼 채무자 → 채권자 거래 생성
    4. 0이 된 쪽은 파티션에서 제거, 나머지는 남은 금액으로 재삽입
    5. 양쪽 파티션이 동시에 비어야 성공

    Args:
        balances: Member -> 순잔액 (최소 단위 정수)
        group_id: 로그용 그룹 ID

    Returns:
        정산 제안 (DebtEdge 목록, 실행 순서)

    Raises:
        ConsistencyError: 합계가 0이 아니거나 한쪽 파티션만 남은 경우
    """
    total = sum(balances.values())
    if total != 0:
        consistency_logger.error(
            f"Simplifier received unbalanced input for group {group_id}: sum={total}",
            extra={"group_id": group_id, "sum": total},
        )
        raise ConsistencyError(
            f"Cannot simplify debts of group {group_id}: balances sum to {total}"
        )

    # (-잔액, key, Member) 최소 힙 = 잔액 최대 + key 최소 우선
    creditor_heap: list[tuple[int, str, Member]] = []
    debtor_heap: list[tuple[int, str, Member]] = []
    for member, balance in balances.items():
        if balance > 0:
            creditor_heap.append((-balance, member.key, member))
        elif balance < 0:
            debtor_heap.append((balance, member.key, member))
    heapq.heapify(creditor_heap)
    heapq.heapify(debtor_heap)

    suggestions: list[DebtEdge] = []

    while creditor_heap and debtor_heap:
        neg_credit, credit_key, creditor = heapq.heappop(creditor_heap)
        neg_debt, debt_key, debtor = heapq.heappop(debtor_heap)

        credit = -neg_credit
        debt = -neg_debt
        amount = min(credit, debt)

        suggestions.append(DebtEdge(from_member=debtor, to_member=creditor, amount=amount))

        if credit > amount:
            heapq.heappush(creditor_heap, (-(credit - amount), credit_key, creditor))
        if debt > amount:
            heapq.heappush(debtor_heap, (-(debt - amount), debt_key, debtor))

    if creditor_heap or debtor_heap:
        leftover = [m.key for _, _, m in creditor_heap + debtor_heap]
        consistency_logger.error(
            f"Simplifier left unmatched members in group {group_id}: {leftover}",
            extra={"group_id": group_id, "leftover": leftover},
        )
        raise ConsistencyError(
            f"Debt simplification of group {group_id} did not settle: {leftover}"
        )

    logger.debug(
        f"Debts simplified: group={group_id}, transactions={len(suggestions)}",
        extra={"group_id": group_id, "transaction_count": len(suggestions)},
    )

    return suggestions


def apply_suggestions(balances: dict[Member, int], suggestions: list[DebtEdge]) -> dict[Member, int]:
    """정산 제안을 적용한 잔액 (입력 불변)

    채무자는 지급한 만큼 증가, 채권자는 받은 만큼 감소.
    """
    result = dict(balances)
    for edge in suggestions:
        result[edge.from_member] = result.get(edge.from_member, 0) + edge.amount
        result[edge.to_member] = result.get(edge.to_member, 0) - edge.amount
    return result


def summarize(
    creditors: list[tuple[Member, int]],
    debtors: list[tuple[Member, int]],
    suggestions: list[DebtEdge],
) -> SettlementSummary:
    """단순화 요약 통계 계산

    original_possible_transactions는 모든 채무자가 모든 채권자에게 직접 지급하는 경우의 수.
    """
    total_owed = sum(amount for _, amount in debtors)
    total_credit = sum(amount for _, amount in creditors)

    direct_count = len(creditors) * len(debtors)
    optimized_count = len(suggestions)
    saved = max(0, direct_count - optimized_count)

    if direct_count > 0:
        ratio = (Decimal(saved) * 100 / Decimal(direct_count)).quantize(Decimal("0.1"))
        efficiency = f"{ratio}%"
    else:
        efficiency = "0%"

    return SettlementSummary(
        total_owed=total_owed,
        total_credit=total_credit,
        is_balanced=total_owed == total_credit,
        transaction_count=optimized_count,
        original_possible_transactions=direct_count,
        transactions_saved=saved,
        efficiency_improvement=efficiency,
    )


def analyze(
    balances: dict[Member, int],
    group_id: str = "",
    ledger_version: int = 0,
    currency: str = "",
) -> DebtAnalysis:
    """순잔액 분석 (분리 + 단순화 + 요약)"""
    creditors, debtors = partition(balances)
    suggestions = simplify_debts(balances, group_id)

    return DebtAnalysis(
        group_id=group_id,
        ledger_version=ledger_version,
        balances=dict(balances),
        creditors=creditors,
        debtors=debtors,
        suggestions=suggestions,
        summary=summarize(creditors, debtors, suggestions),
        currency=currency,
    )

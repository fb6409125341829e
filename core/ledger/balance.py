"""
잔액 계산기

지출/정산 이력을 멤버별 부호 있는 순잔액으로 축약.
양수 = 그룹이 이 멤버에게 빚짐, 음수 = 이 멤버가 그룹에 빚짐.

불변식: 모든 순잔액의 합은 정확히 0 (보존 법칙)
"""

import logging

from core.errors import ConsistencyError, CurrencyMismatchError
from core.ledger.records import ExpenseRecord, LedgerSnapshot, SettlementRecord
from core.logging import CONSISTENCY_LOGGER_NAME
from core.types import Member

logger = logging.getLogger(__name__)
consistency_logger = logging.getLogger(CONSISTENCY_LOGGER_NAME)


def split_expense(expense: ExpenseRecord) -> list[tuple[Member, int]]:
    """지출을 수혜자별 분담액으로 분할

    명시적 shares가 있으면 그대로 사용.
    균등 분할 시 나머지 최소 단위는 Member.key 오름차순으로 앞에서부터 1씩 배정.

    Args:
        expense: 지출 레코드

    Returns:
        (Member, 분담액) 목록 (Member.key 오름차순). 합계 == expense.amount

    Example:
        100을 A, B, C에 분할 → A=34, B=33, C=33
    """
    if expense.shares is not None:
        return sorted(expense.shares, key=lambda item: item[0].key)

    ordered = sorted(expense.beneficiaries, key=lambda m: m.key)
    base, remainder = divmod(expense.amount, len(ordered))
    return [
        (member, base + 1 if index < remainder else base)
        for index, member in enumerate(ordered)
    ]


def check_currency(record: ExpenseRecord | SettlementRecord, group_currency: str) -> None:
    """레코드 통화 검증

    Raises:
        CurrencyMismatchError: 그룹 통화와 다른 경우 (자동 변환하지 않음)
    """
    if record.currency.upper() != group_currency.upper():
        record_id = (
            record.expense_id if isinstance(record, ExpenseRecord) else record.settlement_id
        )
        raise CurrencyMismatchError(record_id, record.currency, group_currency)


def assert_conserved(balances: dict[Member, int], group_id: str) -> None:
    """보존 법칙 검증

    Raises:
        ConsistencyError: 잔액 합계가 0이 아닌 경우
    """
    total = sum(balances.values())
    if total != 0:
        consistency_logger.error(
            f"Conservation violated for group {group_id}: sum={total}",
            extra={"group_id": group_id, "sum": total, "members": len(balances)},
        )
        raise ConsistencyError(
            f"Net balances of group {group_id} sum to {total}, expected 0"
        )


def calculate_balances(snapshot: LedgerSnapshot) -> dict[Member, int]:
    """그룹 순잔액 계산

    1. 명부의 모든 멤버를 0으로 초기화
    2. 지출: 지불자 +전액, 수혜자 -분담액 (지불자가 수혜자면 자연 상쇄)
    3. 완료 정산: 지급자 +금액, 수령자 -금액

    Args:
        snapshot: 그룹 원장 스냅샷

    Returns:
        Member -> 순잔액 (최소 단위 정수). 명부 순서, 이후 등장 멤버는 등장 순서

    Raises:
        CurrencyMismatchError: 통화가 다른 레코드가 있는 경우
        ConsistencyError: 합계가 0이 아닌 경우
    """
    balances: dict[Member, int] = {member: 0 for member in snapshot.members}

    for expense in snapshot.active_expenses:
        check_currency(expense, snapshot.currency)

        balances[expense.payer] = balances.get(expense.payer, 0) + expense.amount
        for member, share in split_expense(expense):
            balances[member] = balances.get(member, 0) - share

    for settlement in snapshot.completed_settlements:
        check_currency(settlement, snapshot.currency)

        balances[settlement.from_member] = (
            balances.get(settlement.from_member, 0) + settlement.amount
        )
        balances[settlement.to_member] = (
            balances.get(settlement.to_member, 0) - settlement.amount
        )

    assert_conserved(balances, snapshot.group_id)

    logger.debug(
        f"Balances calculated: group={snapshot.group_id}",
        extra={
            "group_id": snapshot.group_id,
            "expense_count": len(snapshot.expenses),
            "settlement_count": len(snapshot.settlements),
        },
    )

    return balances

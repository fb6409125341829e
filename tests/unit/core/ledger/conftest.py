"""
잔액 엔진 테스트 픽스처

레코드/스냅샷 팩토리 제공.
"""

import itertools
from datetime import datetime

import pytest

from core.ledger.records import ExpenseRecord, GroupInfo, LedgerSnapshot, SettlementRecord
from core.types import Member, SettlementStatus


@pytest.fixture
def a() -> Member:
    return Member.registered("A")


@pytest.fixture
def b() -> Member:
    return Member.registered("B")


@pytest.fixture
def c() -> Member:
    return Member.registered("C")


@pytest.fixture
def d() -> Member:
    return Member.registered("D")


@pytest.fixture
def make_expense():
    """지출 팩토리 (shares는 {Member: 금액} dict)"""
    counter = itertools.count(1)

    def _make(
        payer: Member,
        amount: int,
        beneficiaries,
        currency: str = "INR",
        shares: dict[Member, int] | None = None,
        ts: datetime | None = None,
        is_void: bool = False,
    ) -> ExpenseRecord:
        extra = {"ts": ts} if ts is not None else {}
        return ExpenseRecord(
            expense_id=f"e{next(counter)}",
            amount=amount,
            payer=payer,
            beneficiaries=tuple(beneficiaries),
            currency=currency,
            shares=tuple(shares.items()) if shares is not None else None,
            is_void=is_void,
            **extra,
        )

    return _make


@pytest.fixture
def make_settlement():
    """정산 팩토리"""
    counter = itertools.count(1)

    def _make(
        from_member: Member,
        to_member: Member,
        amount: int,
        currency: str = "INR",
        status: SettlementStatus = SettlementStatus.COMPLETED,
        ts: datetime | None = None,
    ) -> SettlementRecord:
        extra = {"ts": ts} if ts is not None else {}
        return SettlementRecord(
            settlement_id=f"s{next(counter)}",
            amount=amount,
            from_member=from_member,
            to_member=to_member,
            currency=currency,
            status=status,
            **extra,
        )

    return _make


@pytest.fixture
def make_snapshot():
    """스냅샷 팩토리"""

    def _make(
        members,
        expenses=(),
        settlements=(),
        currency: str = "INR",
        group_id: str = "g1",
        version: int = 0,
    ) -> LedgerSnapshot:
        return LedgerSnapshot(
            group=GroupInfo(
                group_id=group_id,
                currency=currency,
                members=tuple(members),
                ledger_version=version,
            ),
            expenses=tuple(expenses),
            settlements=tuple(settlements),
        )

    return _make

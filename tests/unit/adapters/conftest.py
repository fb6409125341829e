"""
어댑터 테스트 픽스처

공통 테스트 설정 및 픽스처 제공.
"""

from datetime import datetime, timezone

import pytest

from adapters.mock.ledger import InMemoryLedger
from core.ledger.records import ExpenseRecord, SettlementRecord
from core.types import Member


# -------------------------------------------------------------------------
# 공통 데이터 픽스처
# -------------------------------------------------------------------------

@pytest.fixture
def sample_expense(alice: Member, bob: Member, carol: Member) -> ExpenseRecord:
    """샘플 지출 (alice가 90.00 지불, 3명 균등)"""
    return ExpenseRecord(
        expense_id="exp-1",
        amount=9000,
        payer=alice,
        beneficiaries=(alice, bob, carol),
        currency="INR",
        ts=datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc),
        description="Hotel",
    )


@pytest.fixture
def sample_settlement(alice: Member, bob: Member) -> SettlementRecord:
    """샘플 정산 (bob → alice 30.00)"""
    return SettlementRecord(
        settlement_id="stl-1",
        amount=3000,
        from_member=bob,
        to_member=alice,
        currency="INR",
        ts=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
        payment_method="UPI",
    )


# -------------------------------------------------------------------------
# Mock 픽스처
# -------------------------------------------------------------------------

@pytest.fixture
def memory_ledger(
    alice: Member, bob: Member, carol: Member, sample_expense: ExpenseRecord
) -> InMemoryLedger:
    """지출 1건이 적재된 메모리 원장"""
    ledger = InMemoryLedger()
    ledger.create_group("trip", "INR", [alice, bob, carol], name="Goa Trip")
    ledger.add_expense("trip", sample_expense)
    return ledger

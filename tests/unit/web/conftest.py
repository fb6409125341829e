"""
Web 테스트 픽스처

InMemoryLedger를 원장 어댑터로 주입한 TestClient 제공.
lifespan(DB 스키마 초기화)은 실행하지 않음.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from adapters.mock.ledger import InMemoryLedger
from core.ledger.cache import BalanceCache
from core.ledger.records import ExpenseRecord
from core.types import Member
from web.app import app
from web.dependencies import get_balance_cache, get_ledger_reader, get_ledger_writer


@pytest.fixture
def ledger(alice: Member, bob: Member, carol: Member) -> InMemoryLedger:
    """alice가 90.00 지불 (3명 균등)"""
    ledger = InMemoryLedger()
    ledger.create_group("trip", "INR", [alice, bob, carol], name="Goa Trip")
    ledger.add_expense(
        "trip",
        ExpenseRecord(
            expense_id="exp-1",
            amount=9000,
            payer=alice,
            beneficiaries=(alice, bob, carol),
            currency="INR",
            ts=datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc),
            description="Hotel",
        ),
    )
    return ledger


@pytest.fixture
def cache() -> BalanceCache:
    return BalanceCache(max_entries=8)


@pytest.fixture
def client(ledger: InMemoryLedger, cache: BalanceCache) -> TestClient:
    """의존성 오버라이드된 TestClient"""
    app.dependency_overrides[get_ledger_reader] = lambda: ledger
    app.dependency_overrides[get_ledger_writer] = lambda: ledger
    app.dependency_overrides[get_balance_cache] = lambda: cache
    yield TestClient(app)
    app.dependency_overrides.clear()

"""
BalanceEngine 테스트 (InMemoryLedger 사용)
"""

import asyncio
from datetime import datetime, timezone

import pytest

from adapters.mock.ledger import InMemoryLedger
from core.errors import GroupNotFoundError, MemberNotFoundError, ValidationError
from core.ledger.cache import BalanceCache
from core.ledger.engine import BalanceEngine
from core.ledger.graph import DebtEdge
from core.ledger.recorder import SettlementRecorder
from core.types import BalanceStatus, Member


@pytest.fixture
def ledger(make_expense, alice: Member, bob: Member, carol: Member) -> InMemoryLedger:
    """alice가 300 지불 (3명 균등)"""
    ledger = InMemoryLedger()
    ledger.create_group("trip", "INR", [alice, bob, carol])
    ledger.add_expense(
        "trip",
        make_expense(alice, 300, [alice, bob, carol], ts=datetime(2026, 3, 1, tzinfo=timezone.utc)),
    )
    return ledger


@pytest.fixture
def cache() -> BalanceCache:
    return BalanceCache(max_entries=8)


@pytest.fixture
def engine(ledger: InMemoryLedger, cache: BalanceCache) -> BalanceEngine:
    return BalanceEngine(ledger, cache)


class TestBalances:
    """잔액 / 정산 제안"""

    @pytest.mark.asyncio
    async def test_compute_balances(
        self, engine: BalanceEngine, alice: Member, bob: Member, carol: Member
    ) -> None:
        balances = await engine.compute_balances("trip")

        assert balances == {alice: 200, bob: -100, carol: -100}

    @pytest.mark.asyncio
    async def test_suggestions(
        self, engine: BalanceEngine, alice: Member, bob: Member, carol: Member
    ) -> None:
        suggestions = await engine.compute_settlement_suggestions("trip")

        # "email:bob..." < "user:u-carol"
        assert suggestions == [DebtEdge(bob, alice, 100), DebtEdge(carol, alice, 100)]

    @pytest.mark.asyncio
    async def test_cached_by_version(self, engine: BalanceEngine, cache: BalanceCache) -> None:
        first = await engine.analyze("trip")
        second = await engine.analyze("trip")

        assert first is second
        assert cache.hits == 1

    @pytest.mark.asyncio
    async def test_new_version_recomputed(
        self, engine: BalanceEngine, ledger: InMemoryLedger, make_expense, bob: Member, carol: Member
    ) -> None:
        """레코드 추가 시 ledger_version 증가 → 재계산"""
        await engine.compute_balances("trip")
        ledger.add_expense("trip", make_expense(bob, 100, [carol]))

        balances = await engine.compute_balances("trip")

        assert balances[bob] == 0
        assert balances[carol] == -200

    @pytest.mark.asyncio
    async def test_returns_copy(self, engine: BalanceEngine, alice: Member) -> None:
        balances = await engine.compute_balances("trip")
        balances[alice] = 0

        assert (await engine.compute_balances("trip"))[alice] == 200

    @pytest.mark.asyncio
    async def test_without_cache(self, ledger: InMemoryLedger, alice: Member) -> None:
        engine = BalanceEngine(ledger)

        assert (await engine.compute_balances("trip"))[alice] == 200

    @pytest.mark.asyncio
    async def test_group_not_found(self, engine: BalanceEngine) -> None:
        with pytest.raises(GroupNotFoundError):
            await engine.compute_balances("missing")


class TestMemberBalance:
    """get_member_balance / balance_between"""

    @pytest.mark.asyncio
    async def test_creditor(self, engine: BalanceEngine, alice: Member) -> None:
        view = await engine.get_member_balance("trip", "alice@example.com")

        assert view.member == alice
        assert view.balance == 200
        assert view.status == BalanceStatus.OWED
        assert view.owed_total == 200
        assert view.owes_total == 0
        assert len(view.suggestions) == 2
        assert view.currency == "INR"

    @pytest.mark.asyncio
    async def test_debtor_by_member(self, engine: BalanceEngine, bob: Member, alice: Member) -> None:
        view = await engine.get_member_balance("trip", Member.invited("BOB@example.com"))

        assert view.member == bob
        assert view.status == BalanceStatus.OWES
        assert view.owes_total == 100
        assert view.suggestions == [DebtEdge(bob, alice, 100)]

    @pytest.mark.asyncio
    async def test_unknown_member(self, engine: BalanceEngine) -> None:
        with pytest.raises(MemberNotFoundError):
            await engine.get_member_balance("trip", "nobody@example.com")

    @pytest.mark.asyncio
    async def test_balance_between(self, engine: BalanceEngine) -> None:
        assert await engine.balance_between("trip", "u-alice", "bob@example.com") == 100
        assert await engine.balance_between("trip", "u-carol", "u-alice") == -100
        assert await engine.balance_between("trip", "u-carol", "bob@example.com") == 0


class TestDetailedDebts:
    """compute_detailed_debts"""

    @pytest.mark.asyncio
    async def test_all(self, engine: BalanceEngine, alice: Member, bob: Member, carol: Member) -> None:
        edges = await engine.compute_detailed_debts("trip")

        assert edges == [DebtEdge(bob, alice, 100), DebtEdge(carol, alice, 100)]

    @pytest.mark.asyncio
    async def test_member_filter(self, engine: BalanceEngine, alice: Member, carol: Member) -> None:
        edges = await engine.compute_detailed_debts("trip", member_ref="u-carol")

        assert edges == [DebtEdge(carol, alice, 100)]

    @pytest.mark.asyncio
    async def test_window_excludes(self, engine: BalanceEngine) -> None:
        edges = await engine.compute_detailed_debts("trip", start=datetime(2026, 4, 1))

        assert edges == []

    @pytest.mark.asyncio
    async def test_invalid_window(self, engine: BalanceEngine) -> None:
        with pytest.raises(ValidationError):
            await engine.compute_detailed_debts(
                "trip",
                start=datetime(2026, 4, 1, tzinfo=timezone.utc),
                end=datetime(2026, 3, 1, tzinfo=timezone.utc),
            )


class TestWhatIf:
    """simulate_what_if"""

    @pytest.mark.asyncio
    async def test_isolated(
        self,
        engine: BalanceEngine,
        ledger: InMemoryLedger,
        cache: BalanceCache,
        make_settlement,
        alice: Member,
        bob: Member,
        carol: Member,
    ) -> None:
        """시뮬레이션 후 저장소/캐시/잔액 불변"""
        before = await engine.compute_balances("trip")
        version = (await ledger.get_group("trip")).ledger_version

        result = await engine.simulate_what_if("trip", make_settlement(bob, alice, 100))

        assert result.projected_balances == {alice: 100, bob: 0, carol: -100}
        assert result.suggestions == [DebtEdge(carol, alice, 100)]
        assert ledger.write_count == 0
        assert (await ledger.get_group("trip")).ledger_version == version
        assert await engine.compute_balances("trip") == before
        assert ("trip", version) in cache

    @pytest.mark.asyncio
    async def test_members_canonicalized(
        self, engine: BalanceEngine, make_expense, alice: Member, bob: Member, carol: Member
    ) -> None:
        """이메일로 지정한 등록 멤버도 명부의 멤버로 취급"""
        result = await engine.simulate_what_if(
            "trip",
            make_expense(Member.invited("alice@example.com"), 100, [bob]),
        )

        assert result.projected_balances[alice] == 300
        assert result.projected_balances[bob] == -200
        assert Member.invited("alice@example.com") not in result.projected_balances

    @pytest.mark.asyncio
    async def test_concurrent_with_real_settlements(
        self,
        engine: BalanceEngine,
        ledger: InMemoryLedger,
        cache: BalanceCache,
        make_expense,
        make_settlement,
        alice: Member,
        bob: Member,
        carol: Member,
    ) -> None:
        """동시 시뮬레이션은 서로/실제 정산과 간섭 없음"""
        recorder = SettlementRecorder(ledger, ledger, cache)
        base = {alice: 200, bob: -100, carol: -100}
        after_carol = {alice: 100, bob: -100, carol: 0}
        after_bob = {alice: 160, bob: -60, carol: -100}
        after_both = {alice: 60, bob: -60, carol: 0}

        settle_what_if, _, expense_what_if, _ = await asyncio.gather(
            engine.simulate_what_if("trip", make_settlement(bob, alice, 100)),
            recorder.record_settlement("trip", "u-carol", "u-alice", 100),
            engine.simulate_what_if("trip", make_expense(carol, 300, [alice, bob, carol])),
            recorder.record_settlement("trip", "bob@example.com", "u-alice", 40),
        )

        for result in (settle_what_if, expense_what_if):
            assert result.current_balances in (base, after_carol, after_bob, after_both)

        current = settle_what_if.current_balances
        assert settle_what_if.projected_balances == {
            alice: current[alice] - 100,
            bob: current[bob] + 100,
            carol: current[carol],
        }
        current = expense_what_if.current_balances
        assert expense_what_if.projected_balances == {
            alice: current[alice] - 100,
            bob: current[bob] - 100,
            carol: current[carol] + 200,
        }

        assert ledger.write_count == 2
        assert await engine.compute_balances("trip") == after_both

"""
채무 그래프 테스트
"""

from datetime import datetime, timezone

import pytest

from core.errors import ValidationError
from core.ledger.graph import DebtEdge, balance_between, build_debt_graph
from core.types import Member


def ts(day: int) -> datetime:
    return datetime(2026, 3, day, 12, 0, tzinfo=timezone.utc)


class TestDebtEdge:
    """DebtEdge 검증"""

    def test_self_loop_rejected(self, a: Member) -> None:
        with pytest.raises(ValidationError):
            DebtEdge(from_member=a, to_member=a, amount=10)

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_rejected(self, a: Member, b: Member, amount: int) -> None:
        with pytest.raises(ValidationError):
            DebtEdge(from_member=a, to_member=b, amount=amount)


class TestBuildDebtGraph:
    """build_debt_graph 테스트"""

    def test_settlement_reduces_edge(
        self, make_snapshot, make_expense, make_settlement, a: Member, b: Member, c: Member
    ) -> None:
        """A 90 지불 (A/B/C), B가 30 정산 → C→A 30만 남음"""
        snapshot = make_snapshot(
            [a, b, c],
            expenses=[make_expense(a, 90, [a, b, c])],
            settlements=[make_settlement(b, a, 30)],
        )

        assert build_debt_graph(snapshot) == [DebtEdge(c, a, 30)]

    def test_bidirectional_debts_netted(self, make_snapshot, make_expense, a: Member, b: Member) -> None:
        """A가 B 몫 100, B가 A 몫 40 → B→A 60 하나"""
        snapshot = make_snapshot(
            [a, b],
            expenses=[make_expense(a, 100, [b]), make_expense(b, 40, [a])],
        )

        assert build_debt_graph(snapshot) == [DebtEdge(b, a, 60)]

    def test_fully_offset_pair_omitted(self, make_snapshot, make_expense, a: Member, b: Member) -> None:
        snapshot = make_snapshot(
            [a, b],
            expenses=[make_expense(a, 50, [b]), make_expense(b, 50, [a])],
        )

        assert build_debt_graph(snapshot) == []

    def test_sorted_edges(self, make_snapshot, make_expense, a: Member, b: Member, c: Member) -> None:
        snapshot = make_snapshot(
            [a, b, c],
            expenses=[make_expense(c, 300, [a, b, c]), make_expense(a, 60, [b])],
        )

        edges = build_debt_graph(snapshot)

        assert edges == [DebtEdge(a, c, 100), DebtEdge(b, a, 60), DebtEdge(b, c, 100)]

    def test_member_filter(self, make_snapshot, make_expense, a: Member, b: Member, c: Member) -> None:
        snapshot = make_snapshot(
            [a, b, c],
            expenses=[make_expense(a, 50, [b]), make_expense(c, 20, [b])],
        )

        edges = build_debt_graph(snapshot, member=c)

        assert edges == [DebtEdge(b, c, 20)]

    def test_date_window(self, make_snapshot, make_expense, a: Member, b: Member) -> None:
        """기간 경계 포함"""
        snapshot = make_snapshot(
            [a, b],
            expenses=[
                make_expense(a, 10, [b], ts=ts(1)),
                make_expense(a, 20, [b], ts=ts(5)),
                make_expense(a, 40, [b], ts=ts(10)),
            ],
        )

        assert build_debt_graph(snapshot, start=ts(5), end=ts(10)) == [DebtEdge(b, a, 60)]
        assert build_debt_graph(snapshot, end=ts(4)) == [DebtEdge(b, a, 10)]

    def test_graph_matches_balances(
        self, make_snapshot, make_expense, make_settlement, a: Member, b: Member, c: Member, d: Member
    ) -> None:
        """간선 합산 == 순잔액"""
        snapshot = make_snapshot(
            [a, b, c, d],
            expenses=[
                make_expense(a, 1000, [a, b, c, d]),
                make_expense(b, 333, [c, d]),
                make_expense(d, 77, [a, b, c]),
            ],
            settlements=[make_settlement(c, a, 100)],
        )

        edges = build_debt_graph(snapshot)

        net: dict[Member, int] = {}
        for edge in edges:
            net[edge.to_member] = net.get(edge.to_member, 0) + edge.amount
            net[edge.from_member] = net.get(edge.from_member, 0) - edge.amount
        assert sum(net.values()) == 0
        assert all(edge.from_member != edge.to_member for edge in edges)


class TestBalanceBetween:
    """balance_between 테스트"""

    def test_sign(self, make_snapshot, make_expense, a: Member, b: Member) -> None:
        snapshot = make_snapshot([a, b], expenses=[make_expense(a, 100, [b])])

        # 양수 = 두 번째 멤버가 첫 번째에게 빚짐
        assert balance_between(snapshot, a, b) == 100
        assert balance_between(snapshot, b, a) == -100

    def test_settled_pair(self, make_snapshot, make_expense, make_settlement, a: Member, b: Member) -> None:
        snapshot = make_snapshot(
            [a, b],
            expenses=[make_expense(a, 100, [b])],
            settlements=[make_settlement(b, a, 100)],
        )

        assert balance_between(snapshot, a, b) == 0

    def test_same_member(self, make_snapshot, a: Member) -> None:
        assert balance_between(make_snapshot([a]), a, a) == 0

"""
잔액 서비스

BalanceEngine 결과를 API 응답 스키마로 변환.
금액은 그룹 통화 기준 10진수 문자열로 직렬화.
"""

import logging
from datetime import datetime

from core.errors import ValidationError
from core.ledger.engine import BalanceEngine
from core.ledger.graph import DebtEdge
from core.ledger.members import MemberDirectory
from core.ledger.records import ExpenseRecord, SettlementRecord
from core.ledger.simplifier import SettlementSummary
from core.money import from_minor_units, normalize_currency, to_minor_units
from core.types import BalanceStatus, Member
from web.models.requests import WhatIfExpenseRequest, WhatIfRequest, WhatIfSettlementRequest
from web.models.responses import (
    BalanceBetweenResponse,
    DebtEdgeResponse,
    DebtListResponse,
    GroupBalancesResponse,
    MemberAmountResponse,
    MemberBalanceResponse,
    MemberResponse,
    SettlementSummaryResponse,
    SimplifiedDebtsResponse,
    SuggestionListResponse,
    WhatIfResponse,
)

logger = logging.getLogger(__name__)


# =========================================================================
# 직렬화 헬퍼
# =========================================================================

def amount_str(minor: int, currency: str) -> str:
    """최소 단위 정수 → 10진수 문자열 (예: 1234 → "12.34")"""
    return str(from_minor_units(minor, currency))


def member_response(member: Member) -> MemberResponse:
    return MemberResponse(
        key=member.key,
        kind=member.kind.value,
        identifier=member.identifier,
        email=member.email,
        name=member.name,
    )


def member_amount_response(member: Member, minor: int, currency: str) -> MemberAmountResponse:
    return MemberAmountResponse(
        member=member_response(member),
        amount=amount_str(minor, currency),
        amount_minor=minor,
        status=BalanceStatus.of(minor).value,
    )


def edge_response(edge: DebtEdge, currency: str) -> DebtEdgeResponse:
    return DebtEdgeResponse(
        from_member=member_response(edge.from_member),
        to_member=member_response(edge.to_member),
        amount=amount_str(edge.amount, currency),
        amount_minor=edge.amount,
    )


def summary_response(summary: SettlementSummary, currency: str) -> SettlementSummaryResponse:
    return SettlementSummaryResponse(
        total_owed=amount_str(summary.total_owed, currency),
        total_credit=amount_str(summary.total_credit, currency),
        is_balanced=summary.is_balanced,
        transaction_count=summary.transaction_count,
        original_possible_transactions=summary.original_possible_transactions,
        transactions_saved=summary.transactions_saved,
        efficiency_improvement=summary.efficiency_improvement,
    )


def balances_response(balances: dict[Member, int], currency: str) -> list[MemberAmountResponse]:
    """순잔액 목록 (Member.key 오름차순)"""
    return [
        member_amount_response(member, balances[member], currency)
        for member in sorted(balances, key=lambda m: m.key)
    ]


# =========================================================================
# 서비스
# =========================================================================

class BalanceService:
    """잔액 서비스

    Args:
        engine: 잔액 엔진
    """

    def __init__(self, engine: BalanceEngine):
        self.engine = engine

    async def get_group_balances(self, group_id: str) -> GroupBalancesResponse:
        """그룹 전체 순잔액"""
        analysis = await self.engine.analyze(group_id)
        currency = analysis.currency

        return GroupBalancesResponse(
            group_id=group_id,
            currency=currency,
            ledger_version=analysis.ledger_version,
            balances=balances_response(analysis.balances, currency),
            summary=summary_response(analysis.summary, currency),
        )

    async def get_member_balance(self, group_id: str, member_ref: str) -> MemberBalanceResponse:
        """멤버 한 명의 잔액"""
        view = await self.engine.get_member_balance(group_id, member_ref)
        currency = view.currency

        return MemberBalanceResponse(
            group_id=group_id,
            currency=currency,
            member=member_response(view.member),
            balance=amount_str(view.balance, currency),
            balance_minor=view.balance,
            status=view.status.value,
            owes_total=amount_str(view.owes_total, currency),
            owed_total=amount_str(view.owed_total, currency),
            suggestions=[edge_response(e, currency) for e in view.suggestions],
        )

    async def get_detailed_debts(
        self,
        group_id: str,
        member_ref: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> DebtListResponse:
        """상세 채무 (단순화 전)"""
        group = await self.engine.get_group(group_id)
        edges = await self.engine.compute_detailed_debts(
            group_id, member_ref=member_ref, start=start, end=end
        )

        return DebtListResponse(
            group_id=group_id,
            currency=group.currency,
            debts=[edge_response(e, group.currency) for e in edges],
            member=member_ref,
            start=start,
            end=end,
        )

    async def get_balance_between(
        self,
        group_id: str,
        reference_a: str,
        reference_b: str,
    ) -> BalanceBetweenResponse:
        """두 멤버 간 순채무"""
        group = await self.engine.get_group(group_id)
        directory = MemberDirectory(group_id, group.members)
        a = directory.resolve(reference_a)
        b = directory.resolve(reference_b)

        amount = await self.engine.balance_between(group_id, a, b)

        debtor = creditor = None
        if amount > 0:
            debtor, creditor = b, a
        elif amount < 0:
            debtor, creditor = a, b

        return BalanceBetweenResponse(
            group_id=group_id,
            currency=group.currency,
            member_a=member_response(a),
            member_b=member_response(b),
            amount=amount_str(amount, group.currency),
            amount_minor=amount,
            debtor=member_response(debtor) if debtor else None,
            creditor=member_response(creditor) if creditor else None,
        )

    async def get_simplified_debts(self, group_id: str) -> SimplifiedDebtsResponse:
        """단순화 분석 (채권자, 채무자, 정산 제안, 요약)"""
        analysis = await self.engine.analyze(group_id)
        currency = analysis.currency

        return SimplifiedDebtsResponse(
            group_id=group_id,
            currency=currency,
            ledger_version=analysis.ledger_version,
            creditors=[member_amount_response(m, a, currency) for m, a in analysis.creditors],
            # 채무자는 음수 잔액으로 표시
            debtors=[member_amount_response(m, -a, currency) for m, a in analysis.debtors],
            suggestions=[edge_response(e, currency) for e in analysis.suggestions],
            summary=summary_response(analysis.summary, currency),
        )

    async def get_suggestions(self, group_id: str) -> SuggestionListResponse:
        """정산 제안 목록"""
        analysis = await self.engine.analyze(group_id)
        return SuggestionListResponse(
            group_id=group_id,
            currency=analysis.currency,
            suggestions=[edge_response(e, analysis.currency) for e in analysis.suggestions],
        )

    async def simulate_what_if(self, group_id: str, request: WhatIfRequest) -> WhatIfResponse:
        """What-If 시뮬레이션

        요청의 멤버 참조는 명부 기준으로 해석하며, 명부에 없으면 ValidationError.
        """
        group = await self.engine.get_group(group_id)
        directory = MemberDirectory(group_id, group.members)

        def member(reference: str) -> Member:
            found = directory.find(reference)
            if found is None:
                raise ValidationError(
                    f"Hypothetical record references a non-member of group {group_id}: {reference}"
                )
            return found

        def currency_of(requested: str | None) -> str:
            return normalize_currency(requested) if requested else group.currency

        records: list[ExpenseRecord | SettlementRecord] = []
        for index, item in enumerate(request.expenses, start=1):
            records.append(_hypothetical_expense(index, item, member, currency_of(item.currency)))
        for index, item in enumerate(request.settlements, start=1):
            currency = currency_of(item.currency)
            records.append(
                SettlementRecord(
                    settlement_id=f"what-if-settlement-{index}",
                    amount=to_minor_units(item.amount, currency),
                    from_member=member(item.from_member),
                    to_member=member(item.to_member),
                    currency=currency,
                )
            )

        result = await self.engine.simulate_what_if(group_id, records)

        return WhatIfResponse(
            group_id=group_id,
            currency=group.currency,
            current_balances=balances_response(result.current_balances, group.currency),
            projected_balances=balances_response(result.projected_balances, group.currency),
            suggestions=[edge_response(e, group.currency) for e in result.suggestions],
            remaining_debts=result.remaining_debts,
        )


def _hypothetical_expense(index, item: WhatIfExpenseRequest, member, currency: str) -> ExpenseRecord:
    shares = None
    if item.shares is not None:
        shares = tuple(
            (member(reference), to_minor_units(value, currency))
            for reference, value in item.shares.items()
        )

    return ExpenseRecord(
        expense_id=f"what-if-expense-{index}",
        amount=to_minor_units(item.amount, currency),
        payer=member(item.payer),
        beneficiaries=tuple(member(reference) for reference in item.beneficiaries),
        currency=currency,
        shares=shares,
        description=item.description,
    )

"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
금액은 10진수 문자열(amount)과 최소 단위 정수(amount_minor)를 함께 제공.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    mode: str = Field(..., description="실행 모드 (development/production)")
    version: str = Field(..., description="API 버전")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class ErrorResponse(BaseModel):
    """에러 응답"""

    detail: str = Field(..., description="에러 메시지")
    error: str = Field(..., description="에러 분류 (예외 클래스 이름)")


class MemberResponse(BaseModel):
    """멤버"""

    key: str = Field(..., description="정규화 키 (user:<id> / email:<addr>)")
    kind: str = Field(..., description="멤버 종류 (user/email)")
    identifier: str = Field(..., description="user id 또는 이메일")
    email: str | None = Field(default=None, description="이메일")
    name: str = Field(..., description="표시 이름")


class MemberAmountResponse(BaseModel):
    """멤버별 금액 (순잔액, 채권, 채무)"""

    member: MemberResponse
    amount: str = Field(..., description="금액 (부호 포함)")
    amount_minor: int = Field(..., description="금액 (최소 단위)")
    status: str = Field(..., description="owed / owes / settled")


class DebtEdgeResponse(BaseModel):
    """채무 간선 (from_member가 to_member에게 amount 지급)"""

    from_member: MemberResponse
    to_member: MemberResponse
    amount: str = Field(..., description="금액")
    amount_minor: int = Field(..., description="금액 (최소 단위)")


class SettlementSummaryResponse(BaseModel):
    """단순화 요약"""

    total_owed: str = Field(..., description="채무 합계")
    total_credit: str = Field(..., description="채권 합계")
    is_balanced: bool = Field(..., description="채무 합계 == 채권 합계")
    transaction_count: int = Field(..., description="정산 거래 수")
    original_possible_transactions: int = Field(..., description="직접 정산 시 거래 수 (채권자 x 채무자)")
    transactions_saved: int = Field(..., description="절감된 거래 수")
    efficiency_improvement: str = Field(..., description="절감률 (예: 50.0%)")


class GroupBalancesResponse(BaseModel):
    """그룹 순잔액 응답"""

    group_id: str
    currency: str
    ledger_version: int
    balances: list[MemberAmountResponse] = Field(default_factory=list)
    summary: SettlementSummaryResponse


class MemberBalanceResponse(BaseModel):
    """멤버 잔액 응답"""

    group_id: str
    currency: str
    member: MemberResponse
    balance: str = Field(..., description="순잔액 (양수 = 받을 돈)")
    balance_minor: int
    status: str = Field(..., description="owed / owes / settled")
    owes_total: str = Field(..., description="갚을 금액")
    owed_total: str = Field(..., description="받을 금액")
    suggestions: list[DebtEdgeResponse] = Field(default_factory=list, description="이 멤버 관련 정산 제안")


class DebtListResponse(BaseModel):
    """상세 채무 응답 (단순화 전)"""

    group_id: str
    currency: str
    debts: list[DebtEdgeResponse] = Field(default_factory=list)
    member: str | None = Field(default=None, description="멤버 필터")
    start: datetime | None = Field(default=None, description="시작 시각 필터")
    end: datetime | None = Field(default=None, description="종료 시각 필터")


class BalanceBetweenResponse(BaseModel):
    """두 멤버 간 순채무 응답"""

    group_id: str
    currency: str
    member_a: MemberResponse
    member_b: MemberResponse
    amount: str = Field(..., description="순채무 (양수면 b가 a에게 빚짐)")
    amount_minor: int
    debtor: MemberResponse | None = Field(default=None, description="채무자 (정산 완료면 None)")
    creditor: MemberResponse | None = Field(default=None, description="채권자 (정산 완료면 None)")


class SimplifiedDebtsResponse(BaseModel):
    """단순화 분석 응답"""

    group_id: str
    currency: str
    ledger_version: int
    creditors: list[MemberAmountResponse] = Field(default_factory=list)
    debtors: list[MemberAmountResponse] = Field(default_factory=list)
    suggestions: list[DebtEdgeResponse] = Field(default_factory=list)
    summary: SettlementSummaryResponse


class SuggestionListResponse(BaseModel):
    """정산 제안 목록 응답"""

    group_id: str
    currency: str
    suggestions: list[DebtEdgeResponse] = Field(default_factory=list)


class WhatIfResponse(BaseModel):
    """What-If 응답"""

    group_id: str
    currency: str
    current_balances: list[MemberAmountResponse] = Field(default_factory=list)
    projected_balances: list[MemberAmountResponse] = Field(default_factory=list)
    suggestions: list[DebtEdgeResponse] = Field(default_factory=list)
    remaining_debts: int = Field(..., description="가정 적용 후 잔액이 남은 멤버 수")


class SettlementResponse(BaseModel):
    """정산 레코드 응답"""

    settlement_id: str
    from_member: MemberResponse
    to_member: MemberResponse
    amount: str
    amount_minor: int
    currency: str
    status: str
    payment_method: str | None = None
    comments: str | None = None
    ts: datetime


class SettlementListResponse(BaseModel):
    """정산 이력 응답"""

    settlements: list[SettlementResponse] = Field(default_factory=list)
    total_count: int = Field(default=0, description="전체 정산 수")
    limit: int = Field(default=20, description="조회 제한")
    offset: int = Field(default=0, description="조회 시작 위치")

"""
채무 라우트

상세 채무, 두 멤버 간 채무, 단순화 정산 제안, What-If API
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Path, Query

from web.dependencies import get_balance_service
from web.models.requests import WhatIfRequest
from web.models.responses import (
    BalanceBetweenResponse,
    DebtListResponse,
    SimplifiedDebtsResponse,
    SuggestionListResponse,
    WhatIfResponse,
)
from web.services.balance_service import BalanceService

router = APIRouter(prefix="/api/groups", tags=["Debts"])


@router.get("/{group_id}/debts", response_model=DebtListResponse)
async def get_detailed_debts(
    group_id: str = Path(..., description="그룹 ID"),
    member: str | None = Query(default=None, description="멤버 필터 (user id 또는 이메일)"),
    start: datetime | None = Query(default=None, description="시작 시각 (ISO 8601, 포함)"),
    end: datetime | None = Query(default=None, description="종료 시각 (ISO 8601, 포함)"),
    service: BalanceService = Depends(get_balance_service),
) -> DebtListResponse:
    """상세 채무 조회 (단순화 전)

    원본 지출/정산 이력 기준 "누가 누구에게 얼마".
    """
    return await service.get_detailed_debts(group_id, member_ref=member, start=start, end=end)


@router.get("/{group_id}/debts/between", response_model=BalanceBetweenResponse)
async def get_balance_between(
    group_id: str = Path(..., description="그룹 ID"),
    a: str = Query(..., description="멤버 A"),
    b: str = Query(..., description="멤버 B"),
    service: BalanceService = Depends(get_balance_service),
) -> BalanceBetweenResponse:
    """두 멤버 간 순채무 (양수면 B가 A에게 빚짐)"""
    return await service.get_balance_between(group_id, a, b)


@router.get("/{group_id}/debts/simplified", response_model=SimplifiedDebtsResponse)
async def get_simplified_debts(
    group_id: str = Path(..., description="그룹 ID"),
    service: BalanceService = Depends(get_balance_service),
) -> SimplifiedDebtsResponse:
    """단순화 분석

    채권자/채무자 목록, 정산 제안, 최적화 통계.
    """
    return await service.get_simplified_debts(group_id)


@router.get("/{group_id}/debts/suggestions", response_model=SuggestionListResponse)
async def get_settlement_suggestions(
    group_id: str = Path(..., description="그룹 ID"),
    service: BalanceService = Depends(get_balance_service),
) -> SuggestionListResponse:
    """정산 제안 목록 (실행 순서)"""
    return await service.get_suggestions(group_id)


@router.post("/{group_id}/debts/what-if", response_model=WhatIfResponse)
async def simulate_what_if(
    request: WhatIfRequest,
    group_id: str = Path(..., description="그룹 ID"),
    service: BalanceService = Depends(get_balance_service),
) -> WhatIfResponse:
    """What-If 시뮬레이션

    가상 지출/정산을 적용한 잔액과 정산 제안. 아무것도 저장하지 않음.
    """
    return await service.simulate_what_if(group_id, request)

"""
잔액 라우트

그룹 순잔액 및 멤버별 잔액 조회 API
"""

from fastapi import APIRouter, Depends, Path

from web.dependencies import get_balance_service
from web.models.responses import GroupBalancesResponse, MemberBalanceResponse
from web.services.balance_service import BalanceService

router = APIRouter(prefix="/api/groups", tags=["Balances"])


@router.get("/{group_id}/balances", response_model=GroupBalancesResponse)
async def get_group_balances(
    group_id: str = Path(..., description="그룹 ID"),
    service: BalanceService = Depends(get_balance_service),
) -> GroupBalancesResponse:
    """그룹 순잔액 조회

    양수 = 받을 돈이 있음, 음수 = 갚을 돈이 있음. 합계는 항상 0.
    """
    return await service.get_group_balances(group_id)


@router.get("/{group_id}/balances/{member_ref}", response_model=MemberBalanceResponse)
async def get_member_balance(
    group_id: str = Path(..., description="그룹 ID"),
    member_ref: str = Path(..., description="user id, 이메일 또는 정규화 키"),
    service: BalanceService = Depends(get_balance_service),
) -> MemberBalanceResponse:
    """멤버 잔액 조회

    잔액, 상태(owed/owes/settled), 이 멤버가 포함된 정산 제안.
    """
    return await service.get_member_balance(group_id, member_ref)

"""
정산 라우트

정산 기록 및 이력 조회 API
"""

from fastapi import APIRouter, Depends, Path, Query

from core.constants import Defaults
from web.dependencies import get_settlement_service
from web.models.requests import SettlementCreateRequest
from web.models.responses import SettlementListResponse, SettlementResponse
from web.services.settlement_service import SettlementService

router = APIRouter(prefix="/api/groups", tags=["Settlements"])


@router.post("/{group_id}/settlements", response_model=SettlementResponse, status_code=201)
async def record_settlement(
    request: SettlementCreateRequest,
    group_id: str = Path(..., description="그룹 ID"),
    service: SettlementService = Depends(get_settlement_service),
) -> SettlementResponse:
    """정산 기록

    커밋 후 그룹 잔액 캐시를 무효화하므로 응답 이후 조회는 항상 새 잔액을 반환.
    같은 idempotency_key로 재요청하면 기존 정산을 그대로 반환.
    """
    return await service.record_settlement(group_id, request)


@router.get("/{group_id}/settlements", response_model=SettlementListResponse)
async def get_settlements(
    group_id: str = Path(..., description="그룹 ID"),
    limit: int = Query(default=Defaults.HISTORY_PAGE_SIZE, ge=1, le=100, description="조회 제한"),
    offset: int = Query(default=0, ge=0, description="조회 시작 위치"),
    service: SettlementService = Depends(get_settlement_service),
) -> SettlementListResponse:
    """정산 이력 조회 (최신순)"""
    return await service.get_settlements(group_id, limit=limit, offset=offset)

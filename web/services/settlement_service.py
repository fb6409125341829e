"""
정산 서비스

정산 기록 요청을 최소 단위로 변환하여 SettlementRecorder에 위임하고,
정산 이력을 페이지 단위로 조회.
"""

import logging

from adapters.interfaces import ILedgerWriter
from core.ledger.recorder import SettlementRecorder
from core.ledger.records import SettlementRecord
from core.money import normalize_currency, to_minor_units
from web.models.requests import SettlementCreateRequest
from web.models.responses import SettlementListResponse, SettlementResponse
from web.services.balance_service import amount_str, member_response

logger = logging.getLogger(__name__)


def settlement_response(record: SettlementRecord) -> SettlementResponse:
    return SettlementResponse(
        settlement_id=record.settlement_id,
        from_member=member_response(record.from_member),
        to_member=member_response(record.to_member),
        amount=amount_str(record.amount, record.currency),
        amount_minor=record.amount,
        currency=record.currency,
        status=record.status.value,
        payment_method=record.payment_method,
        comments=record.comments,
        ts=record.ts,
    )


class SettlementService:
    """정산 서비스

    Args:
        recorder: 정산 기록기
        writer: 정산 이력 조회용 원장 어댑터
    """

    def __init__(self, recorder: SettlementRecorder, writer: ILedgerWriter):
        self.recorder = recorder
        self.writer = writer

    async def record_settlement(
        self,
        group_id: str,
        request: SettlementCreateRequest,
    ) -> SettlementResponse:
        """정산 기록"""
        group = await self.recorder.reader.get_group(group_id)
        currency = normalize_currency(request.currency) if request.currency else group.currency

        record = await self.recorder.record_settlement(
            group_id,
            request.from_member,
            request.to_member,
            to_minor_units(request.amount, currency),
            currency=currency,
            payment_method=request.payment_method,
            comments=request.comments,
            idempotency_key=request.idempotency_key,
            ts=request.ts,
        )
        return settlement_response(record)

    async def get_settlements(
        self,
        group_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> SettlementListResponse:
        """정산 이력 (최신순)"""
        # 없는 그룹이면 GroupNotFoundError
        await self.recorder.reader.get_group(group_id)

        records = await self.writer.list_settlements(group_id, limit=limit, offset=offset)
        total_count = await self.writer.count_settlements(group_id)

        return SettlementListResponse(
            settlements=[settlement_response(r) for r in records],
            total_count=total_count,
            limit=limit,
            offset=offset,
        )

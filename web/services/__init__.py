"""
Web 서비스 패키지

엔진 결과를 API 응답으로 변환
"""

from web.services.balance_service import BalanceService
from web.services.settlement_service import SettlementService

__all__ = [
    "BalanceService",
    "SettlementService",
]

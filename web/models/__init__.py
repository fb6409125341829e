"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    SettlementCreateRequest,
    WhatIfExpenseRequest,
    WhatIfRequest,
    WhatIfSettlementRequest,
)
from web.models.responses import (
    BalanceBetweenResponse,
    DebtEdgeResponse,
    DebtListResponse,
    ErrorResponse,
    GroupBalancesResponse,
    HealthResponse,
    MemberAmountResponse,
    MemberBalanceResponse,
    MemberResponse,
    SettlementListResponse,
    SettlementResponse,
    SettlementSummaryResponse,
    SimplifiedDebtsResponse,
    SuggestionListResponse,
    WhatIfResponse,
)

__all__ = [
    # Requests
    "SettlementCreateRequest",
    "WhatIfExpenseRequest",
    "WhatIfRequest",
    "WhatIfSettlementRequest",
    # Responses
    "BalanceBetweenResponse",
    "DebtEdgeResponse",
    "DebtListResponse",
    "ErrorResponse",
    "GroupBalancesResponse",
    "HealthResponse",
    "MemberAmountResponse",
    "MemberBalanceResponse",
    "MemberResponse",
    "SettlementListResponse",
    "SettlementResponse",
    "SettlementSummaryResponse",
    "SimplifiedDebtsResponse",
    "SuggestionListResponse",
    "WhatIfResponse",
]

"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증.
금액은 통화 단위 10진수 (예: "12.34")로 받고 서비스에서 최소 단위 정수로 변환.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class SettlementCreateRequest(BaseModel):
    """정산 기록 요청

    from_member가 to_member에게 실제로 지급한 금액.
    멤버는 user id, 이메일, 정규화 키(user:/email:) 중 하나로 지정.
    """

    from_member: str = Field(..., description="지급자 (user id 또는 이메일)")
    to_member: str = Field(..., description="수령자 (user id 또는 이메일)")
    amount: Decimal = Field(..., description="금액 (통화 단위, 예: 30.00)")
    currency: str | None = Field(default=None, description="통화 (생략 시 그룹 통화)")
    payment_method: str | None = Field(default=None, max_length=100, description="결제 수단")
    comments: str | None = Field(default=None, max_length=1000, description="코멘트")
    idempotency_key: str | None = Field(default=None, description="멱등성 키 (재시도 중복 방지)")
    ts: datetime | None = Field(default=None, description="정산 시각 (생략 시 현재)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "from_member": "bob@example.com",
                    "to_member": "u-alice",
                    "amount": "30.00",
                    "payment_method": "upi",
                    "idempotency_key": "settle-2026-10-19-001",
                }
            ]
        }
    }


class WhatIfExpenseRequest(BaseModel):
    """가상 지출

    shares가 없으면 beneficiaries 균등 분할.
    """

    payer: str = Field(..., description="지불자")
    amount: Decimal = Field(..., description="금액 (통화 단위)")
    beneficiaries: list[str] = Field(..., description="수혜자 목록")
    shares: dict[str, Decimal] | None = Field(
        default=None,
        description="수혜자별 분담액 (합계 == amount)",
    )
    currency: str | None = Field(default=None, description="통화 (생략 시 그룹 통화)")
    description: str | None = Field(default=None, description="설명")


class WhatIfSettlementRequest(BaseModel):
    """가상 정산"""

    from_member: str = Field(..., description="지급자")
    to_member: str = Field(..., description="수령자")
    amount: Decimal = Field(..., description="금액 (통화 단위)")
    currency: str | None = Field(default=None, description="통화 (생략 시 그룹 통화)")


class WhatIfRequest(BaseModel):
    """What-If 시뮬레이션 요청

    저장되지 않으며 현재 잔액에도 영향 없음.
    """

    expenses: list[WhatIfExpenseRequest] = Field(default_factory=list, description="가상 지출")
    settlements: list[WhatIfSettlementRequest] = Field(default_factory=list, description="가상 정산")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "settlements": [
                        {"from_member": "bob@example.com", "to_member": "u-alice", "amount": "30.00"}
                    ]
                },
                {
                    "expenses": [
                        {
                            "payer": "u-alice",
                            "amount": "90.00",
                            "beneficiaries": ["u-alice", "bob@example.com", "u-carol"],
                        }
                    ]
                },
            ]
        }
    }

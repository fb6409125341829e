"""
에러 분류

- ValidationError: 잘못된 입력 (멤버 참조, 금액, 통화). 호출자에게 즉시 반환, 재시도 없음
- ConsistencyError: 내부 불변식 위반 (보존 법칙, 단순화 실패). 해당 요청은 실패 처리
- NotFoundError: 협력자가 모르는 그룹/멤버. 재해석 없이 그대로 전파
"""


class LedgerError(Exception):
    """잔액 엔진 예외 기본 클래스"""

    pass


class ValidationError(LedgerError):
    """입력 검증 실패"""

    pass


class CurrencyMismatchError(ValidationError):
    """레코드 통화가 그룹 통화와 다름 (데이터 무결성 오류)"""

    def __init__(self, record_id: str, record_currency: str, group_currency: str):
        self.record_id = record_id
        self.record_currency = record_currency
        self.group_currency = group_currency
        super().__init__(
            f"Currency mismatch on {record_id}: "
            f"{record_currency} != group currency {group_currency}"
        )


class ConsistencyError(LedgerError):
    """내부 일관성 오류

    잔액 합계가 0이 아니거나 단순화가 양쪽 파티션을 동시에 비우지 못한 경우.
    사용자 실수가 아닌 계산기 결함 또는 입력 데이터 손상을 의미.
    """

    pass


class NotFoundError(LedgerError):
    """협력자가 대상을 찾지 못함"""

    pass


class GroupNotFoundError(NotFoundError):
    """그룹 없음"""

    def __init__(self, group_id: str):
        self.group_id = group_id
        super().__init__(f"Group not found: {group_id}")


class MemberNotFoundError(NotFoundError):
    """멤버 없음"""

    def __init__(self, group_id: str, reference: str):
        self.group_id = group_id
        self.reference = reference
        super().__init__(f"Member not found in group {group_id}: {reference}")

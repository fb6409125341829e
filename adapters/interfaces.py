"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
금액은 반드시 정수 최소 단위 사용.
"""

from typing import Protocol, runtime_checkable

from core.ledger.records import ExpenseRecord, GroupInfo, SettlementRecord
from core.types import Member


@runtime_checkable
class ILedgerReader(Protocol):
    """원장 조회 인터페이스

    지출/정산 저장소의 불변 스냅샷을 제공.
    그룹이나 멤버가 없으면 NotFoundError 계열 예외를 그대로 발생시킴.
    """

    async def get_group(self, group_id: str) -> GroupInfo:
        """그룹 정보 조회 (통화, 명부, ledger_version)

        Raises:
            GroupNotFoundError: 그룹 없음
        """
        ...

    async def list_expenses(self, group_id: str) -> list[ExpenseRecord]:
        """무효 처리되지 않은 지출 목록 (순서 무관)"""
        ...

    async def list_completed_settlements(self, group_id: str) -> list[SettlementRecord]:
        """완료된 정산 목록 (순서 무관)"""
        ...

    async def resolve_member(self, group_id: str, reference: str) -> Member:
        """user id 또는 이메일을 Member로 정규화

        Raises:
            GroupNotFoundError: 그룹 없음
            MemberNotFoundError: 명부에 없음
        """
        ...


@runtime_checkable
class ILedgerWriter(Protocol):
    """정산 기록 인터페이스"""

    async def insert_settlement(
        self,
        group_id: str,
        record: SettlementRecord,
        idempotency_key: str | None = None,
    ) -> SettlementRecord:
        """정산 저장 + ledger_version 증가 (하나의 트랜잭션)

        반환 시점에 쓰기는 영속화되어 있어야 함.
        같은 그룹에 같은 idempotency_key가 이미 있으면 저장하지 않고 기존 레코드 반환.
        """
        ...

    async def list_settlements(
        self,
        group_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> list[SettlementRecord]:
        """정산 이력 (최신순, 상태 무관)"""
        ...

    async def count_settlements(self, group_id: str) -> int:
        """정산 이력 총 개수"""
        ...

"""
레코드 및 스냅샷 정의

외부 서비스(지출/정산 저장소)가 소유하는 레코드의 불변 사본.
엔진은 호출 시점의 스냅샷만 읽고 절대 수정하지 않음.
모든 금액은 정수 최소 단위(minor units).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable

from core.errors import ValidationError
from core.types import Member, SettlementStatus
from core.utils.timezone import ensure_utc, now_utc


@dataclass(frozen=True)
class ExpenseRecord:
    """지출 레코드 (읽기 전용 입력)

    shares가 없으면 beneficiaries 균등 분할.
    shares가 있으면 (Member, 금액) 목록이 그대로 분담액이 되며 합계는 amount와 같아야 함.
    """

    expense_id: str
    amount: int
    payer: Member
    beneficiaries: tuple[Member, ...]
    currency: str
    ts: datetime = field(default_factory=now_utc)
    shares: tuple[tuple[Member, int], ...] | None = None
    is_void: bool = False
    description: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "ts", ensure_utc(self.ts))
        object.__setattr__(self, "beneficiaries", tuple(self.beneficiaries))

        if self.amount <= 0:
            raise ValidationError(f"Expense {self.expense_id}: amount must be positive")
        if not self.beneficiaries:
            raise ValidationError(f"Expense {self.expense_id}: at least one beneficiary required")
        if len(set(self.beneficiaries)) != len(self.beneficiaries):
            raise ValidationError(f"Expense {self.expense_id}: duplicate beneficiaries")

        if self.shares is not None:
            share_members = [m for m, _ in self.shares]
            if set(share_members) != set(self.beneficiaries) or len(share_members) != len(self.beneficiaries):
                raise ValidationError(
                    f"Expense {self.expense_id}: shares must cover each beneficiary exactly once"
                )
            if any(amount <= 0 for _, amount in self.shares):
                raise ValidationError(f"Expense {self.expense_id}: share amounts must be positive")
            if sum(amount for _, amount in self.shares) != self.amount:
                raise ValidationError(
                    f"Expense {self.expense_id}: shares sum to "
                    f"{sum(a for _, a in self.shares)}, expected {self.amount}"
                )

    @property
    def members(self) -> set[Member]:
        """지출에 관련된 모든 멤버 (지불자 + 수혜자)"""
        return {self.payer, *self.beneficiaries}


@dataclass(frozen=True)
class SettlementRecord:
    """정산 레코드 (읽기 전용 입력)

    from_member가 to_member에게 실제로 지급한 금액.
    """

    settlement_id: str
    amount: int
    from_member: Member
    to_member: Member
    currency: str
    ts: datetime = field(default_factory=now_utc)
    status: SettlementStatus = SettlementStatus.COMPLETED
    payment_method: str | None = None
    comments: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "ts", ensure_utc(self.ts))

        if self.amount <= 0:
            raise ValidationError(f"Settlement {self.settlement_id}: amount must be positive")
        if self.from_member == self.to_member:
            raise ValidationError(f"Settlement {self.settlement_id}: cannot settle with yourself")

    @property
    def is_completed(self) -> bool:
        return self.status == SettlementStatus.COMPLETED

    @property
    def members(self) -> set[Member]:
        return {self.from_member, self.to_member}


@dataclass(frozen=True)
class GroupInfo:
    """그룹 메타 정보

    ledger_version은 정산 커밋마다 증가하며 캐시 키의 일부.
    """

    group_id: str
    currency: str
    members: tuple[Member, ...]
    ledger_version: int = 0
    name: str | None = None


@dataclass(frozen=True)
class LedgerSnapshot:
    """그룹 원장 스냅샷 (불변)

    계산기/그래프/단순화/What-If 모두 이 스냅샷만 입력으로 사용.
    """

    group: GroupInfo
    expenses: tuple[ExpenseRecord, ...] = ()
    settlements: tuple[SettlementRecord, ...] = ()

    @property
    def group_id(self) -> str:
        return self.group.group_id

    @property
    def currency(self) -> str:
        return self.group.currency

    @property
    def members(self) -> tuple[Member, ...]:
        return self.group.members

    @property
    def version(self) -> int:
        return self.group.ledger_version

    @property
    def active_expenses(self) -> tuple[ExpenseRecord, ...]:
        """무효 처리되지 않은 지출"""
        return tuple(e for e in self.expenses if not e.is_void)

    @property
    def completed_settlements(self) -> tuple[SettlementRecord, ...]:
        """완료된 정산 (pending 제외)"""
        return tuple(s for s in self.settlements if s.is_completed)

    def with_records(
        self,
        records: Iterable[ExpenseRecord | SettlementRecord],
    ) -> LedgerSnapshot:
        """레코드가 추가된 새 스냅샷 반환 (원본 불변)"""
        expenses = list(self.expenses)
        settlements = list(self.settlements)
        for record in records:
            if isinstance(record, ExpenseRecord):
                expenses.append(record)
            elif isinstance(record, SettlementRecord):
                settlements.append(record)
            else:
                raise TypeError(f"Unsupported record type: {type(record).__name__}")
        return replace(self, expenses=tuple(expenses), settlements=tuple(settlements))

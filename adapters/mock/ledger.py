"""
Mock 원장

테스트/데모용 메모리 원장.
ILedgerReader, ILedgerWriter Protocol 준수.
"""

from dataclasses import replace

from core.errors import GroupNotFoundError
from core.ledger.members import MemberDirectory
from core.ledger.records import ExpenseRecord, GroupInfo, SettlementRecord
from core.money import normalize_currency
from core.types import Member


class InMemoryLedger:
    """메모리 원장

    SQLiteLedgerRepository와 같은 인터페이스를 dict로 구현.
    쓰기 호출 수를 기록하여 테스트에서 검증 가능.

    사용 예시:
    ```python
    ledger = InMemoryLedger()
    ledger.create_group("g1", "INR", [alice, bob])
    ledger.add_expense("g1", expense)

    engine = BalanceEngine(ledger)
    assert ledger.write_count == 0
    ```
    """

    def __init__(self, should_fail_writes: bool = False):
        """
        Args:
            should_fail_writes: True면 insert_settlement가 RuntimeError 발생 (쓰기 실패 시나리오용)
        """
        self.should_fail_writes = should_fail_writes
        self._groups: dict[str, GroupInfo] = {}
        self._expenses: dict[str, list[ExpenseRecord]] = {}
        self._settlements: dict[str, list[SettlementRecord]] = {}
        self._idempotency: dict[tuple[str, str], SettlementRecord] = {}
        self.write_count = 0
        self.read_count = 0

    # -------------------------------------------------------------------------
    # 데이터 적재
    # -------------------------------------------------------------------------

    def create_group(
        self,
        group_id: str,
        currency: str,
        members: list[Member] | tuple[Member, ...] = (),
        name: str | None = None,
    ) -> GroupInfo:
        group = GroupInfo(
            group_id=group_id,
            currency=normalize_currency(currency),
            members=tuple(members),
            name=name,
        )
        self._groups[group_id] = group
        self._expenses[group_id] = []
        self._settlements[group_id] = []
        return group

    def _require(self, group_id: str) -> GroupInfo:
        group = self._groups.get(group_id)
        if group is None:
            raise GroupNotFoundError(group_id)
        return group

    def _bump(self, group_id: str, **changes) -> None:
        group = self._require(group_id)
        self._groups[group_id] = replace(
            group, ledger_version=group.ledger_version + 1, **changes
        )

    def add_member(self, group_id: str, member: Member) -> None:
        group = self._require(group_id)
        if member in group.members:
            return
        self._bump(group_id, members=group.members + (member,))

    def _directory(self, group_id: str) -> MemberDirectory:
        group = self._require(group_id)
        return MemberDirectory(group_id, group.members)

    def add_expense(self, group_id: str, expense: ExpenseRecord) -> None:
        """지출 적재 (멤버는 명부 기준으로 정규화하여 저장)"""
        self._expenses[group_id].append(self._directory(group_id).canonicalize(expense))
        self._bump(group_id)

    def add_settlement(self, group_id: str, settlement: SettlementRecord) -> None:
        """이력 적재용 (상태 그대로 저장, 쓰기 카운트 미포함)"""
        self._settlements[group_id].append(self._directory(group_id).canonicalize(settlement))
        self._bump(group_id)

    # -------------------------------------------------------------------------
    # ILedgerReader
    # -------------------------------------------------------------------------

    async def get_group(self, group_id: str) -> GroupInfo:
        self.read_count += 1
        return self._require(group_id)

    async def list_expenses(self, group_id: str) -> list[ExpenseRecord]:
        self._require(group_id)
        return [e for e in self._expenses[group_id] if not e.is_void]

    async def list_completed_settlements(self, group_id: str) -> list[SettlementRecord]:
        self._require(group_id)
        return [s for s in self._settlements[group_id] if s.is_completed]

    async def resolve_member(self, group_id: str, reference: str) -> Member:
        return self._directory(group_id).resolve(reference)

    # -------------------------------------------------------------------------
    # ILedgerWriter
    # -------------------------------------------------------------------------

    async def insert_settlement(
        self,
        group_id: str,
        record: SettlementRecord,
        idempotency_key: str | None = None,
    ) -> SettlementRecord:
        directory = self._directory(group_id)

        # 멱등성 키는 그룹 단위
        if idempotency_key and (group_id, idempotency_key) in self._idempotency:
            return self._idempotency[(group_id, idempotency_key)]

        if self.should_fail_writes:
            raise RuntimeError("Simulated write failure")

        record = directory.canonicalize(record)
        self._settlements[group_id].append(record)
        if idempotency_key:
            self._idempotency[(group_id, idempotency_key)] = record
        self._bump(group_id)
        self.write_count += 1
        return record

    async def list_settlements(
        self,
        group_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> list[SettlementRecord]:
        self._require(group_id)
        ordered = sorted(
            enumerate(self._settlements[group_id]),
            key=lambda item: (item[1].ts, item[0]),
            reverse=True,
        )
        return [s for _, s in ordered][offset:offset + limit]

    async def count_settlements(self, group_id: str) -> int:
        self._require(group_id)
        return len(self._settlements[group_id])

"""
멤버 식별 정규화

그룹 명부(roster)를 기준으로 user id 또는 이메일 참조를 하나의 Member로 해석.
같은 사람을 id로 가리키든 이메일로 가리키든 동일한 Member가 반환됨.
"""

from dataclasses import replace
from typing import Iterable

from core.errors import MemberNotFoundError
from core.ledger.records import ExpenseRecord, SettlementRecord
from core.types import Member, MemberKind, normalize_email


class MemberDirectory:
    """그룹 멤버 디렉토리

    Args:
        group_id: 그룹 ID (에러 메시지용)
        members: 그룹 명부

    사용 예시:
    ```python
    directory = MemberDirectory("g1", group.members)
    alice = directory.resolve("Alice@Example.com")
    assert alice == directory.resolve("u-1")  # 같은 사람
    ```
    """

    def __init__(self, group_id: str, members: Iterable[Member]):
        self.group_id = group_id
        self._members: list[Member] = []
        self._by_key: dict[str, Member] = {}
        self._by_user_id: dict[str, Member] = {}
        self._by_email: dict[str, Member] = {}

        for member in members:
            if member.key in self._by_key:
                continue
            self._members.append(member)
            self._by_key[member.key] = member
            if member.kind == MemberKind.REGISTERED:
                self._by_user_id[member.identifier] = member
            if member.email:
                self._by_email[member.email] = member

    @property
    def members(self) -> tuple[Member, ...]:
        return tuple(self._members)

    def __contains__(self, member: object) -> bool:
        return isinstance(member, Member) and member.key in self._by_key

    def __len__(self) -> int:
        return len(self._members)

    def find(self, reference: str | Member) -> Member | None:
        """참조를 Member로 해석 (없으면 None)

        해석 순서: Member 객체 → 정규화 키(user:/email:) → user id → 이메일
        """
        if isinstance(reference, Member):
            if reference.key in self._by_key:
                return self._by_key[reference.key]
            # 같은 사람을 다른 형태로 가리킬 수 있음 (초대 후 가입 등)
            if reference.email:
                return self._by_email.get(reference.email)
            return None

        ref = str(reference).strip()
        if not ref:
            return None

        if ref in self._by_key:
            return self._by_key[ref]
        if ref in self._by_user_id:
            return self._by_user_id[ref]

        email_prefix = f"{MemberKind.INVITED.value}:"
        if ref.startswith(email_prefix):
            ref = ref[len(email_prefix):]
        return self._by_email.get(normalize_email(ref))

    def resolve(self, reference: str | Member) -> Member:
        """참조를 Member로 해석

        Raises:
            MemberNotFoundError: 명부에 없는 참조
        """
        member = self.find(reference)
        if member is None:
            raise MemberNotFoundError(self.group_id, str(reference))
        return member

    def canonical(self, member: Member) -> Member:
        """명부의 정규 Member로 치환 (명부에 없으면 그대로)"""
        return self.find(member) or member

    def canonicalize(
        self, record: ExpenseRecord | SettlementRecord
    ) -> ExpenseRecord | SettlementRecord:
        """레코드의 모든 Member를 명부 기준으로 치환

        초대 이메일로 기록된 지출도 가입 후의 user:<id> 멤버와 같은 잔액에 합산됨.
        """
        if isinstance(record, ExpenseRecord):
            shares = (
                tuple((self.canonical(m), amount) for m, amount in record.shares)
                if record.shares is not None
                else None
            )
            return replace(
                record,
                payer=self.canonical(record.payer),
                beneficiaries=tuple(self.canonical(m) for m in record.beneficiaries),
                shares=shares,
            )

        return replace(
            record,
            from_member=self.canonical(record.from_member),
            to_member=self.canonical(record.to_member),
        )

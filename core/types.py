"""
타입 정의 모듈

Enum, Dataclass 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from dataclasses import dataclass, field
from enum import Enum


class RunMode(str, Enum):
    """실행 모드 (운영 / 개발)"""

    PRODUCTION = "production"
    DEVELOPMENT = "development"


class MemberKind(str, Enum):
    """멤버 종류

    가입한 사용자는 user id로, 초대만 된 사용자는 이메일로 식별.
    """

    REGISTERED = "user"
    INVITED = "email"


class MemberStatus(str, Enum):
    """그룹 내 멤버 상태"""

    INVITED = "invited"
    ACTIVE = "active"


class SettlementStatus(str, Enum):
    """정산 상태 (completed만 잔액에 반영)"""

    PENDING = "pending"
    COMPLETED = "completed"


class BalanceStatus(str, Enum):
    """순잔액 표시 상태"""

    OWED = "owed"  # 받을 돈이 있음 (> 0)
    OWES = "owes"  # 갚을 돈이 있음 (< 0)
    SETTLED = "settled"  # 0

    @classmethod
    def of(cls, balance: int) -> "BalanceStatus":
        """잔액 부호로 상태 결정"""
        if balance > 0:
            return cls.OWED
        if balance < 0:
            return cls.OWES
        return cls.SETTLED


def normalize_email(email: str) -> str:
    """이메일 정규화 (공백 제거 + 소문자)"""
    return email.strip().lower()


@dataclass(frozen=True)
class Member:
    """그룹 멤버 (불변)

    Registered{user_id} | Invited{email} 두 형태를 하나의 타입으로 표현.
    동등성/해시는 (kind, identifier)만 사용하고 이름, 이메일은 비교에서 제외.
    """

    kind: MemberKind
    identifier: str
    email: str | None = field(default=None, compare=False)
    display_name: str | None = field(default=None, compare=False)

    @classmethod
    def registered(
        cls,
        user_id: str,
        email: str | None = None,
        display_name: str | None = None,
    ) -> "Member":
        """가입 사용자 Member 생성"""
        user_id = str(user_id).strip()
        if not user_id:
            raise ValueError("user_id는 비어 있을 수 없습니다")
        return cls(
            kind=MemberKind.REGISTERED,
            identifier=user_id,
            email=normalize_email(email) if email else None,
            display_name=display_name,
        )

    @classmethod
    def invited(cls, email: str, display_name: str | None = None) -> "Member":
        """미가입(초대) 사용자 Member 생성"""
        normalized = normalize_email(email)
        if not normalized:
            raise ValueError("email은 비어 있을 수 없습니다")
        return cls(
            kind=MemberKind.INVITED,
            identifier=normalized,
            email=normalized,
            display_name=display_name,
        )

    @classmethod
    def from_key(cls, key: str) -> "Member":
        """정규화 키로부터 Member 복원 (예: "user:42", "email:a@x.com")

        Raises:
            ValueError: 형식이 잘못된 경우
        """
        kind_str, sep, identifier = key.partition(":")
        if not sep:
            raise ValueError(f"잘못된 멤버 키입니다: '{key}'")
        kind = MemberKind(kind_str)
        if kind == MemberKind.INVITED:
            return cls.invited(identifier)
        return cls.registered(identifier)

    @property
    def key(self) -> str:
        """정렬 및 직렬화용 정규화 키 (예: user:42, email:a@x.com)"""
        return f"{self.kind.value}:{self.identifier}"

    @property
    def name(self) -> str:
        """표시 이름 (없으면 이메일 앞부분 또는 식별자)"""
        if self.display_name:
            return self.display_name
        if self.email:
            return self.email.split("@")[0]
        return self.identifier

    def __str__(self) -> str:
        return self.key

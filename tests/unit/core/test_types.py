"""
core/types.py 테스트

Enum 문자열 직렬화, Member 동등성/정규화 키 확인
"""

import pytest

from core.types import (
    BalanceStatus,
    Member,
    MemberKind,
    MemberStatus,
    RunMode,
    SettlementStatus,
    normalize_email,
)


class TestEnums:
    """Enum 테스트"""

    def test_run_mode(self) -> None:
        assert RunMode("production") == RunMode.PRODUCTION
        assert RunMode.DEVELOPMENT.value == "development"

    def test_member_kind_values(self) -> None:
        """MemberKind 값은 정규화 키 접두사"""
        assert MemberKind.REGISTERED.value == "user"
        assert MemberKind.INVITED.value == "email"

    def test_str_comparison(self) -> None:
        """str 상속으로 문자열과 == 비교 가능"""
        assert SettlementStatus.COMPLETED == "completed"
        assert MemberStatus.INVITED == "invited"


class TestBalanceStatus:
    """BalanceStatus.of 테스트"""

    def test_positive_is_owed(self) -> None:
        assert BalanceStatus.of(1) == BalanceStatus.OWED

    def test_negative_owes(self) -> None:
        assert BalanceStatus.of(-1) == BalanceStatus.OWES

    def test_zero_is_settled(self) -> None:
        assert BalanceStatus.of(0) == BalanceStatus.SETTLED


class TestMember:
    """Member 테스트"""

    def test_registered(self) -> None:
        member = Member.registered("42", email="Alice@Example.com", display_name="Alice")

        assert member.kind == MemberKind.REGISTERED
        assert member.identifier == "42"
        assert member.email == "alice@example.com"
        assert member.key == "user:42"
        assert member.name == "Alice"

    def test_invited_normalizes_email(self) -> None:
        """초대 멤버 이메일은 소문자 + 공백 제거"""
        member = Member.invited("  Bob@Example.COM ")

        assert member.identifier == "bob@example.com"
        assert member.key == "email:bob@example.com"
        assert member.name == "bob"

    def test_equality_ignores_display_fields(self) -> None:
        """동등성은 (kind, identifier)만 사용"""
        a = Member.registered("7", email="a@x.com", display_name="A")
        b = Member.registered("7", display_name="Someone else")

        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_same_identifier_different_kind(self) -> None:
        """kind가 다르면 다른 멤버"""
        assert Member.registered("a@x.com") != Member.invited("a@x.com")

    def test_empty_identifier_rejected(self) -> None:
        with pytest.raises(ValueError):
            Member.registered("  ")
        with pytest.raises(ValueError):
            Member.invited("")

    def test_from_key_roundtrip(self) -> None:
        """정규화 키로 복원"""
        assert Member.from_key("user:42") == Member.registered("42")
        assert Member.from_key("email:b@x.com") == Member.invited("b@x.com")

    def test_from_key_invalid(self) -> None:
        with pytest.raises(ValueError):
            Member.from_key("no-separator")
        with pytest.raises(ValueError):
            Member.from_key("phone:123")

    def test_frozen(self) -> None:
        member = Member.registered("1")

        with pytest.raises(AttributeError):
            member.identifier = "2"  # type: ignore

    def test_str_is_key(self) -> None:
        assert str(Member.registered("9")) == "user:9"


class TestNormalizeEmail:
    def test_normalize(self) -> None:
        assert normalize_email(" X@Y.Com ") == "x@y.com"

"""
금액 변환 유틸리티

내부 계산은 모두 정수 최소 단위(minor units)로 수행.
외부 경계(API, DB 입력)에서만 Decimal <-> 정수 변환.
"""

from decimal import Decimal, InvalidOperation

from core.constants import CURRENCY_EXPONENTS, Defaults
from core.errors import ValidationError


def normalize_currency(currency: str) -> str:
    """통화 코드 정규화 (대문자 3자리)

    Raises:
        ValidationError: 3자리 알파벳이 아닌 경우
    """
    code = (currency or "").strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValidationError(f"Invalid currency code: {currency!r}")
    return code


def currency_exponent(currency: str) -> int:
    """통화의 소수 자릿수"""
    return CURRENCY_EXPONENTS.get(currency.upper(), Defaults.MINOR_UNIT_EXPONENT)


def to_minor_units(amount: Decimal | str | int, currency: str) -> int:
    """금액을 정수 최소 단위로 변환

    통화가 허용하는 자릿수보다 정밀한 금액은 반올림하지 않고 거부.

    Args:
        amount: 금액 (Decimal, 문자열, 정수)
        currency: 통화 코드

    Returns:
        최소 단위 정수 (예: INR 12.34 -> 1234)

    Raises:
        ValidationError: 숫자가 아니거나 자릿수 초과인 경우

    Example:
        >>> to_minor_units("12.34", "INR")
        1234
        >>> to_minor_units("500", "KRW")
        500
    """
    if isinstance(amount, float):
        raise ValidationError("Float amounts are not accepted; use Decimal or str")

    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"Invalid amount: {amount!r}") from e

    if not value.is_finite():
        raise ValidationError(f"Invalid amount: {amount!r}")

    scaled = value.scaleb(currency_exponent(currency))
    if scaled != scaled.to_integral_value():
        raise ValidationError(
            f"Amount {amount} has more precision than {currency.upper()} allows"
        )
    return int(scaled)


def from_minor_units(minor: int, currency: str) -> Decimal:
    """정수 최소 단위를 Decimal 금액으로 변환

    Example:
        >>> from_minor_units(1234, "INR")
        Decimal('12.34')
    """
    exponent = currency_exponent(currency)
    return Decimal(minor).scaleb(-exponent).quantize(Decimal(1).scaleb(-exponent))


def format_amount(minor: int, currency: str) -> str:
    """표시용 금액 문자열 (부호 없음, 통화 코드 포함)

    Example:
        >>> format_amount(-1234, "INR")
        'INR 12.34'
    """
    return f"{currency.upper()} {from_minor_units(abs(minor), currency)}"

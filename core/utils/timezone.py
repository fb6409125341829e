"""
타임존 유틸리티

내부 저장/비교는 항상 UTC (tz-aware) 원칙 준수를 위한 헬퍼 함수
"""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """datetime을 UTC로 정규화

    naive datetime은 UTC로 간주.

    Example:
        >>> ensure_utc(datetime(2026, 2, 20, 16, 0, 0)).tzinfo
        datetime.timezone.utc
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    """UTC ISO 8601 문자열 (DB 저장용)"""
    return ensure_utc(dt).isoformat()


def parse_iso(value: str) -> datetime:
    """ISO 8601 문자열을 UTC datetime으로 변환

    Raises:
        ValueError: 형식이 잘못된 경우
    """
    return ensure_utc(datetime.fromisoformat(value))

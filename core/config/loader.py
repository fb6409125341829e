"""
설정 로더

settings.yaml 로드 및 실행 설정 생성
"""

from dataclasses import dataclass
from pathlib import Path

import yaml

from core.constants import Defaults, Paths
from core.errors import ValidationError
from core.money import normalize_currency
from core.types import RunMode


@dataclass(frozen=True)
class CacheConfig:
    """잔액 캐시 설정"""

    enabled: bool = Defaults.CACHE_ENABLED
    max_entries: int = Defaults.CACHE_MAX_ENTRIES


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    mode: RunMode
    currency: str
    cache: CacheConfig


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def load_config(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
        ValueError: 유효하지 않은 mode인 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SettingsLoadError("settings.yaml이 비어 있습니다")

    # mode 검증
    mode_str = data.get("mode")
    if mode_str is None:
        raise SettingsLoadError("settings.yaml에 'mode' 필드가 없습니다")

    try:
        mode = RunMode(mode_str)
    except ValueError as e:
        valid_modes = [m.value for m in RunMode]
        raise ValueError(
            f"유효하지 않은 mode입니다: '{mode_str}'. "
            f"유효한 값: {valid_modes}"
        ) from e

    # 기본 통화
    try:
        currency = normalize_currency(data.get("currency", Defaults.CURRENCY))
    except ValidationError as e:
        raise SettingsLoadError(f"settings.yaml의 currency가 잘못되었습니다: {e}") from e

    # 캐시 설정 (선택)
    cache_data = data.get("cache") or {}
    max_entries = cache_data.get("max_entries", Defaults.CACHE_MAX_ENTRIES)
    if not isinstance(max_entries, int) or max_entries < 1:
        raise SettingsLoadError(
            f"settings.yaml의 cache.max_entries는 1 이상의 정수여야 합니다: {max_entries}"
        )

    cache = CacheConfig(
        enabled=bool(cache_data.get("enabled", Defaults.CACHE_ENABLED)),
        max_entries=max_entries,
    )

    return AppConfig(mode=mode, currency=currency, cache=cache)


def get_db_path(config: AppConfig) -> Path:
    """모드에 따른 DB 경로 반환

    Args:
        config: AppConfig 인스턴스

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if config.mode == RunMode.PRODUCTION:
        return Paths.PROD_DB
    else:
        return Paths.DEV_DB


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_config(settings_path)

    @property
    def mode(self) -> RunMode:
        """현재 실행 모드"""
        assert self._config is not None
        return self._config.mode

    @property
    def currency(self) -> str:
        """기본 그룹 통화"""
        assert self._config is not None
        return self._config.currency

    @property
    def cache(self) -> CacheConfig:
        """잔액 캐시 설정"""
        assert self._config is not None
        return self._config.cache

    @property
    def db_path(self) -> Path:
        """현재 모드의 DB 경로"""
        assert self._config is not None
        return get_db_path(self._config)

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)

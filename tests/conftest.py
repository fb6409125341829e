"""
pytest 공통 fixture 정의

설정 파일, 임시 디렉토리, 그룹 멤버 fixture
"""

import tempfile
from pathlib import Path

import pytest

from core.config.loader import Settings
from core.types import Member


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (development 모드)"""
    settings_content = """# 테스트용 settings.yaml
mode: development
currency: inr

cache:
  enabled: true
  max_entries: 16
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_production(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (production 모드, 캐시 설정 생략)"""
    settings_content = """mode: production
currency: JPY
"""
    settings_path = temp_dir / "settings_prod.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_invalid_mode(temp_dir: Path) -> Path:
    """잘못된 모드의 settings.yaml 파일 생성"""
    settings_content = """mode: staging
currency: INR
"""
    settings_path = temp_dir / "settings_invalid.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def reset_settings():
    """Settings 싱글턴 초기화 (테스트 전후)"""
    Settings.reset()
    yield
    Settings.reset()


# -------------------------------------------------------------------------
# 멤버 fixture
# -------------------------------------------------------------------------

@pytest.fixture
def alice() -> Member:
    return Member.registered("u-alice", email="alice@example.com", display_name="Alice")


@pytest.fixture
def bob() -> Member:
    return Member.invited("bob@example.com", display_name="Bob")


@pytest.fixture
def carol() -> Member:
    return Member.registered("u-carol", email="carol@example.com", display_name="Carol")


@pytest.fixture
def dave() -> Member:
    return Member.registered("u-dave", email="dave@example.com", display_name="Dave")

"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from typing import AsyncGenerator

from fastapi import Depends

from adapters.db.ledger_repository import SQLiteLedgerRepository
from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import ILedgerReader, ILedgerWriter
from core.config.loader import Settings, get_settings
from core.ledger.cache import BalanceCache
from core.ledger.engine import BalanceEngine
from core.ledger.recorder import GroupLocks, SettlementRecorder
from web.services.balance_service import BalanceService
from web.services.settlement_service import SettlementService


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


async def get_db() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)

    잔액/채무 조회는 읽기 작업만 수행.
    정산 기록은 readonly=False로 별도 처리.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


async def get_db_write() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)

    정산 기록 시 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=False) as db:
        yield db


# =========================================================================
# 프로세스 공유 객체 (캐시, 그룹 락)
# =========================================================================

# 요청 간 공유되는 잔액 캐시. 최초 사용 시 설정값으로 생성
_balance_cache: BalanceCache | None = None

# 같은 그룹의 정산 커밋 + 캐시 무효화 직렬화
_group_locks = GroupLocks()


def set_balance_cache(cache: BalanceCache | None) -> None:
    """잔액 캐시 설정

    앱 시작 시 또는 테스트에서 호출.

    Args:
        cache: BalanceCache 인스턴스 (None이면 다음 사용 시 재생성)
    """
    global _balance_cache
    _balance_cache = cache


def get_balance_cache() -> BalanceCache:
    """잔액 캐시 반환 (없으면 설정값으로 생성)"""
    global _balance_cache
    if _balance_cache is None:
        cache_config = get_settings().cache
        _balance_cache = BalanceCache(
            max_entries=cache_config.max_entries,
            enabled=cache_config.enabled,
        )
    return _balance_cache


def get_group_locks() -> GroupLocks:
    """그룹 락 레지스트리 반환"""
    return _group_locks


# =========================================================================
# 원장 / 엔진 / 서비스
# =========================================================================

def get_ledger_reader(db: SQLiteAdapter = Depends(get_db)) -> ILedgerReader:
    """원장 조회 어댑터 (읽기 전용 연결)"""
    return SQLiteLedgerRepository(db)


def get_ledger_writer(db: SQLiteAdapter = Depends(get_db_write)) -> ILedgerWriter:
    """원장 쓰기 어댑터 (쓰기 연결, 조회도 같은 연결 사용)"""
    return SQLiteLedgerRepository(db)


def get_balance_service(
    reader: ILedgerReader = Depends(get_ledger_reader),
    cache: BalanceCache = Depends(get_balance_cache),
) -> BalanceService:
    """잔액 서비스"""
    return BalanceService(BalanceEngine(reader, cache))


def get_settlement_service(
    writer: ILedgerWriter = Depends(get_ledger_writer),
    cache: BalanceCache = Depends(get_balance_cache),
    locks: GroupLocks = Depends(get_group_locks),
) -> SettlementService:
    """정산 서비스

    쓰기 어댑터는 ILedgerReader도 구현하므로 명부 조회에 그대로 사용.
    """
    recorder = SettlementRecorder(writer, writer, cache, locks)
    return SettlementService(recorder, writer)

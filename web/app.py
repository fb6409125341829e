"""
FastAPI 애플리케이션

라우터 등록, 예외 매핑 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config.loader import get_settings
from core.errors import ConsistencyError, LedgerError, NotFoundError, ValidationError
from core.logging import setup_logging

# 로깅 설정 (콘솔 + 파일)
setup_logging("web")

from web.routes import balances, debts, health, settlements

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
    from web.dependencies import get_balance_cache, set_balance_cache

    settings = get_settings()

    # 시작 시 - DB 스키마 자동 초기화
    # 읽기 전용 연결은 -wal/-shm 파일이 있어야 열리므로 앱 수명 동안 쓰기 연결 유지
    db = SQLiteAdapter(settings.db_path)
    await db.connect()
    await init_schema(db)

    cache = get_balance_cache()
    logger.info(
        f"Web 시작: mode={settings.mode.value}, db={settings.db_path}",
        extra={"cache_enabled": cache.enabled, "cache_max_entries": cache.max_entries},
    )

    yield

    # 종료 시 - 캐시 정리
    cache.clear()
    set_balance_cache(None)
    await db.close()


app = FastAPI(
    title="SplitEngine API",
    description="그룹 지출 잔액 계산 및 채무 단순화 API",
    version=health.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =========================================================================
# 예외 매핑
# =========================================================================

def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """잘못된 입력 → 400"""
    logger.info(f"Validation error: {exc}", extra={"path": request.url.path})
    return _error_response(400, exc)


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """그룹/멤버 없음 → 404"""
    return _error_response(404, exc)


@app.exception_handler(ConsistencyError)
async def consistency_error_handler(request: Request, exc: ConsistencyError) -> JSONResponse:
    """내부 불변식 위반 → 500 (상세 내용은 consistency 로그에 기록됨)"""
    logger.error(f"Consistency error: {exc}", extra={"path": request.url.path})
    return _error_response(500, exc)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """기타 엔진 오류 → 500"""
    logger.error(f"Ledger error: {exc}", extra={"path": request.url.path})
    return _error_response(500, exc)


# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(balances.router)
app.include_router(debts.router)
app.include_router(settlements.router)

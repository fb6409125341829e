"""
Web 진입점

실행 방법:
    python -m web
"""

import uvicorn

from core.constants import Defaults

if __name__ == "__main__":
    uvicorn.run(
        "web.app:app",
        host=Defaults.WEB_HOST,
        port=Defaults.WEB_PORT,
        log_level=Defaults.LOG_LEVEL.lower(),
        # 캐시/그룹 락은 프로세스 단위이므로 단일 워커로 실행
        workers=1,
        reload=False,
    )

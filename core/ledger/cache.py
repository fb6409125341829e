"""
잔액 캐시

(group_id, ledger_version) 키의 명시적 캐시 항목.
정산 커밋 시 ledger_version이 증가하므로 이전 버전 항목은 자동으로 조회되지 않음.
invalidate()는 그룹의 모든 항목을 즉시 제거.
"""

import logging
from collections import OrderedDict

from core.constants import Defaults
from core.ledger.simplifier import DebtAnalysis

logger = logging.getLogger(__name__)

CacheKey = tuple[str, int]


class BalanceCache:
    """그룹 채무 분석 캐시 (LRU)

    Args:
        max_entries: 최대 항목 수 (초과 시 가장 오래 사용하지 않은 항목 제거)
        enabled: False면 항상 miss

    사용 예시:
    ```python
    cache = BalanceCache(max_entries=128)
    analysis = cache.get("g1", 3)
    if analysis is None:
        analysis = analyze(...)
        cache.put(analysis)
    ```
    """

    def __init__(
        self,
        max_entries: int = Defaults.CACHE_MAX_ENTRIES,
        enabled: bool = Defaults.CACHE_ENABLED,
    ):
        if max_entries < 1:
            raise ValueError("max_entries는 1 이상이어야 합니다")
        self.max_entries = max_entries
        self.enabled = enabled
        self._entries: OrderedDict[CacheKey, DebtAnalysis] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, group_id: str, ledger_version: int) -> DebtAnalysis | None:
        """캐시 조회"""
        if not self.enabled:
            return None

        key = (group_id, ledger_version)
        analysis = self._entries.get(key)
        if analysis is None:
            self.misses += 1
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        return analysis

    def put(self, analysis: DebtAnalysis) -> None:
        """캐시 저장

        같은 그룹의 이전 버전 항목은 더 이상 조회될 수 없으므로 함께 제거.
        """
        if not self.enabled:
            return

        group_id = analysis.group_id
        stale = [
            k for k in self._entries
            if k[0] == group_id and k[1] < analysis.ledger_version
        ]
        for key in stale:
            del self._entries[key]

        key = (group_id, analysis.ledger_version)
        self._entries[key] = analysis
        self._entries.move_to_end(key)

        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Balance cache evicted: {evicted}")

    def invalidate(self, group_id: str) -> int:
        """그룹의 모든 캐시 항목 제거

        Returns:
            제거된 항목 수
        """
        keys = [k for k in self._entries if k[0] == group_id]
        for key in keys:
            del self._entries[key]

        if keys:
            logger.debug(
                f"Balance cache invalidated: group={group_id}",
                extra={"group_id": group_id, "removed": len(keys)},
            )
        return len(keys)

    def clear(self) -> None:
        """전체 캐시 제거"""
        self._entries.clear()

"""
그룹 지출 잔액 엔진

지출/정산 이력에서 멤버별 순잔액을 계산하고,
최소에 가까운 정산 거래 목록으로 단순화.

사용 예시:
```python
from core.ledger import BalanceCache, BalanceEngine, SettlementRecorder

cache = BalanceCache()
engine = BalanceEngine(repo, cache)
recorder = SettlementRecorder(repo, repo, cache)

# 잔액 / 정산 제안
balances = await engine.compute_balances("trip-2026")
suggestions = await engine.compute_settlement_suggestions("trip-2026")

# 실제 정산 기록 (커밋 후 캐시 무효화)
await recorder.record_settlement("trip-2026", "bob@x.com", "u-alice", 3000)
```
"""

from core.ledger.balance import calculate_balances, split_expense
from core.ledger.cache import BalanceCache
from core.ledger.engine import BalanceEngine, MemberBalance
from core.ledger.graph import DebtEdge, balance_between, build_debt_graph
from core.ledger.members import MemberDirectory
from core.ledger.recorder import GroupLocks, SettlementRecorder
from core.ledger.records import ExpenseRecord, GroupInfo, LedgerSnapshot, SettlementRecord
from core.ledger.simplifier import (
    DebtAnalysis,
    SettlementSummary,
    analyze,
    apply_suggestions,
    partition,
    simplify_debts,
)
from core.ledger.what_if import WhatIfResult, simulate

__all__ = [
    # 핵심 클래스
    "BalanceEngine",
    "SettlementRecorder",
    "BalanceCache",
    "GroupLocks",
    "MemberDirectory",
    # 레코드
    "ExpenseRecord",
    "SettlementRecord",
    "GroupInfo",
    "LedgerSnapshot",
    # 결과
    "DebtEdge",
    "DebtAnalysis",
    "SettlementSummary",
    "MemberBalance",
    "WhatIfResult",
    # 순수 함수
    "calculate_balances",
    "split_expense",
    "build_debt_graph",
    "balance_between",
    "partition",
    "simplify_debts",
    "apply_suggestions",
    "analyze",
    "simulate",
]

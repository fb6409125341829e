#!/usr/bin/env python3
"""
데모 그룹 적재 스크립트

현재 모드의 DB에 데모 그룹을 만들고 잔액/정산 제안을 출력.

흐름:
1. settings.yaml 로드
2. 스키마 초기화
3. 그룹 + 명부 + 지출 적재 (이미 있으면 건너뜀)
4. 순잔액, 정산 제안 출력

실행 방법:
    python scripts/seed_demo.py [group_id]
"""

import asyncio
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.db.ledger_repository import SQLiteLedgerRepository
from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import get_settings
from core.errors import GroupNotFoundError
from core.ledger.engine import BalanceEngine
from core.ledger.records import ExpenseRecord
from core.money import format_amount, to_minor_units
from core.types import Member, MemberStatus

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="[%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


async def seed(repo: SQLiteLedgerRepository, group_id: str, currency: str) -> None:
    """데모 그룹 적재"""
    alice = Member.registered("u-alice", email="alice@example.com", display_name="Alice")
    bob = Member.invited("bob@example.com", display_name="Bob")
    carol = Member.registered("u-carol", email="carol@example.com", display_name="Carol")

    await repo.create_group(group_id, currency, name="Demo Trip")
    await repo.add_member(group_id, alice)
    await repo.add_member(group_id, bob, status=MemberStatus.INVITED)
    await repo.add_member(group_id, carol)

    expenses = [
        ExpenseRecord(
            expense_id=f"{group_id}-hotel",
            amount=to_minor_units("90.00", currency),
            payer=alice,
            beneficiaries=(alice, bob, carol),
            currency=currency,
            description="Hotel",
        ),
        ExpenseRecord(
            expense_id=f"{group_id}-dinner",
            amount=to_minor_units("45.00", currency),
            payer=bob,
            beneficiaries=(alice, bob, carol),
            currency=currency,
            description="Dinner",
        ),
    ]
    for expense in expenses:
        await repo.insert_expense(group_id, expense)


async def main() -> int:
    group_id = sys.argv[1] if len(sys.argv) > 1 else "demo"
    settings = get_settings()

    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)
        repo = SQLiteLedgerRepository(db)

        try:
            group = await repo.get_group(group_id)
            logger.info(f"그룹이 이미 존재합니다: {group_id} (v{group.ledger_version})")
        except GroupNotFoundError:
            await seed(repo, group_id, settings.currency)
            logger.info(f"데모 그룹 생성 완료: {group_id} ({settings.currency})")

        engine = BalanceEngine(repo)
        analysis = await engine.analyze(group_id)

        print(f"\n[{group_id}] 순잔액")
        for member, balance in analysis.balances.items():
            sign = "+" if balance > 0 else "-" if balance < 0 else " "
            print(f"  {member.name:<10} {sign}{format_amount(balance, analysis.currency)}")

        print("\n정산 제안")
        for edge in analysis.suggestions:
            print(
                f"  {edge.from_member.name} → {edge.to_member.name}: "
                f"{format_amount(edge.amount, analysis.currency)}"
            )
        print(f"\n절감률: {analysis.summary.efficiency_improvement}")

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

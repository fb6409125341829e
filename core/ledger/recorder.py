"""
정산 기록기

실제 정산을 검증하고 커밋한 뒤 그룹 캐시를 무효화.
캐시 무효화는 쓰기가 영속화된 이후에만 수행 (커밋한 호출자는 항상 새 잔액을 읽음).
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from core.errors import CurrencyMismatchError, ValidationError
from core.ledger.cache import BalanceCache
from core.ledger.members import MemberDirectory
from core.ledger.records import SettlementRecord
from core.money import normalize_currency
from core.types import Member, SettlementStatus
from core.utils.timezone import ensure_utc, now_utc

if TYPE_CHECKING:
    from adapters.interfaces import ILedgerReader, ILedgerWriter

logger = logging.getLogger(__name__)


class GroupLocks:
    """그룹별 asyncio.Lock 레지스트리

    같은 그룹의 커밋 + 무효화를 직렬화. 다른 그룹끼리는 서로 막지 않음.
    락은 약한 참조로 보관하므로 보유/대기 중인 호출이 없는 그룹의 락은 회수됨.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def get(self, group_id: str) -> asyncio.Lock:
        lock = self._locks.get(group_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[group_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


class SettlementRecorder:
    """정산 기록기

    Args:
        reader: 명부 조회용 원장 어댑터
        writer: 정산 저장 어댑터
        cache: 무효화 대상 캐시 (None이면 생략)
        locks: 그룹 락 레지스트리 (프로세스 내 공유 필요)

    사용 예시:
    ```python
    recorder = SettlementRecorder(repo, repo, cache, locks)
    record = await recorder.record_settlement("g1", "bob@x.com", "alice@x.com", 3000)
    ```
    """

    def __init__(
        self,
        reader: ILedgerReader,
        writer: ILedgerWriter,
        cache: BalanceCache | None = None,
        locks: GroupLocks | None = None,
    ):
        self.reader = reader
        self.writer = writer
        self.cache = cache
        self.locks = locks or GroupLocks()

    async def record_settlement(
        self,
        group_id: str,
        from_member: str | Member,
        to_member: str | Member,
        amount: int,
        currency: str | None = None,
        payment_method: str | None = None,
        comments: str | None = None,
        idempotency_key: str | None = None,
        ts: datetime | None = None,
    ) -> SettlementRecord:
        """정산 검증 + 커밋 + 캐시 무효화

        초과 지급은 허용 (반대 방향 잔액이 생길 뿐 보존 법칙 유지).

        Args:
            group_id: 그룹 ID
            from_member: 지급자 (Member 또는 user id/이메일)
            to_member: 수령자 (Member 또는 user id/이메일)
            amount: 금액 (최소 단위 정수, > 0)
            currency: 통화 (None이면 그룹 통화)
            payment_method: 결제 수단 메모
            comments: 코멘트
            idempotency_key: 재시도 중복 방지 키
            ts: 정산 시각 (None이면 현재)

        Returns:
            저장된 SettlementRecord

        Raises:
            ValidationError: 금액 <= 0, 동일인, 비멤버, 다른 내용으로 재사용된 idempotency_key
            CurrencyMismatchError: 그룹 통화와 다른 통화
            GroupNotFoundError: 그룹 없음 (협력자 예외 전파)
        """
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValidationError("Settlement amount must be an integer number of minor units")
        if amount <= 0:
            raise ValidationError("Amount must be greater than 0")

        group = await self.reader.get_group(group_id)
        directory = MemberDirectory(group_id, group.members)

        payer = directory.find(from_member)
        if payer is None:
            raise ValidationError(f"Settlement payer is not a member of this group: {from_member}")
        receiver = directory.find(to_member)
        if receiver is None:
            raise ValidationError(f"Settlement recipient is not a member of this group: {to_member}")
        if payer == receiver:
            raise ValidationError("Cannot settle with yourself")

        settlement_currency = normalize_currency(currency) if currency else group.currency
        if settlement_currency != group.currency:
            raise CurrencyMismatchError("new settlement", settlement_currency, group.currency)

        record = SettlementRecord(
            settlement_id=str(uuid4()),
            amount=amount,
            from_member=payer,
            to_member=receiver,
            currency=settlement_currency,
            ts=ensure_utc(ts) if ts else now_utc(),
            status=SettlementStatus.COMPLETED,
            payment_method=payment_method,
            comments=comments,
        )

        async with self.locks.get(group_id):
            stored = await self.writer.insert_settlement(group_id, record, idempotency_key)
            if stored.settlement_id != record.settlement_id:
                _check_replay(stored, record, idempotency_key)
            # 쓰기 커밋 이후에만 무효화
            if self.cache is not None:
                self.cache.invalidate(group_id)

        logger.info(
            f"Settlement recorded: {stored.from_member.key} -> {stored.to_member.key} "
            f"{stored.amount} {stored.currency}",
            extra={
                "group_id": group_id,
                "settlement_id": stored.settlement_id,
                "idempotency_key": idempotency_key,
            },
        )
        return stored


def _check_replay(stored: SettlementRecord, record: SettlementRecord, key: str | None) -> None:
    """같은 idempotency_key의 재요청이 기존 정산과 같은 내용인지 확인

    Raises:
        ValidationError: 키는 같지만 지급자/수령자/금액/통화가 다름
    """
    same = (
        stored.from_member == record.from_member
        and stored.to_member == record.to_member
        and stored.amount == record.amount
        and stored.currency == record.currency
    )
    if not same:
        raise ValidationError(
            f"Idempotency key '{key}' was already used for a different settlement "
            f"({stored.from_member.key} -> {stored.to_member.key} {stored.amount} {stored.currency})"
        )

"""In-memory guarantee store for demos and tests."""

import itertools
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Iterable

from guarantee_tracker.exceptions import RecordNotFoundError
from guarantee_tracker.models import (
    ChangeEvent,
    GuaranteeRecord,
    GuaranteeStatistics,
    GuaranteeUpdate,
    NewGuarantee,
)
from guarantee_tracker.realtime.subscription import ChangeCallback, QueueSubscription
from guarantee_tracker.store.base import GuaranteeStore


class InMemoryGuaranteeStore(GuaranteeStore):
    """Dict-backed store that queues change events for its subscribers.

    Events reach a subscriber's callback only when that subscription is
    polled, the same way remote notifications do.
    """

    def __init__(
        self,
        records: Iterable[GuaranteeRecord] = (),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._rows: dict[str, GuaranteeRecord] = {}
        self._order: dict[str, int] = {}
        self._seq = itertools.count()
        self._subscriptions: list[QueueSubscription] = []
        for record in records:
            self._put(record)

    def list_all(self) -> list[GuaranteeRecord]:
        rows = sorted(
            self._rows.values(),
            key=lambda r: (r.created_at, self._order[r.id]),
            reverse=True,
        )
        return [replace(row) for row in rows]

    def get(self, record_id: str) -> GuaranteeRecord:
        try:
            return replace(self._rows[record_id])
        except KeyError:
            raise RecordNotFoundError(f"Guarantee {record_id} not found") from None

    def create(self, guarantee: NewGuarantee) -> GuaranteeRecord:
        now = self._clock()
        record = GuaranteeRecord(
            id=str(uuid.uuid4()),
            guarantee_number=guarantee.guarantee_number,
            guarantee_type=guarantee.guarantee_type,
            value=guarantee.value,
            currency=guarantee.currency,
            issue_date=guarantee.issue_date,
            expiry_date=guarantee.expiry_date,
            status=guarantee.status,
            bank_name=guarantee.bank_name,
            created_at=now,
            updated_at=now,
        )
        self._put(record)
        self._publish(ChangeEvent.insert(replace(record)))
        return replace(record)

    def update(self, record_id: str, changes: GuaranteeUpdate) -> GuaranteeRecord:
        current = self.get(record_id)
        if changes.is_empty():
            return current
        record = replace(current, **changes.changes(), updated_at=self._clock())
        self._rows[record_id] = record
        self._publish(ChangeEvent.update(replace(record)))
        return replace(record)

    def delete(self, record_id: str) -> None:
        if self._rows.pop(record_id, None) is None:
            return
        self._order.pop(record_id, None)
        self._publish(ChangeEvent.delete(record_id))

    def aggregate_statistics(self) -> GuaranteeStatistics:
        return GuaranteeStatistics.from_records(self._rows.values())

    def subscribe(self, callback: ChangeCallback) -> QueueSubscription:
        subscription = QueueSubscription(callback, on_release=self._subscriptions.remove)
        self._subscriptions.append(subscription)
        return subscription

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _put(self, record: GuaranteeRecord) -> None:
        self._rows[record.id] = replace(record)
        self._order[record.id] = next(self._seq)

    def _publish(self, event: ChangeEvent) -> None:
        for subscription in list(self._subscriptions):
            subscription.push(event)

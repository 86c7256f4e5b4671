"""Guarantee board: the state behind the dashboard screen.

The board owns the client-side guarantee list, the statistics snapshot and
the change subscription. Each user operation is a method that returns an
``ActionResult``; failures never propagate past it and become a single
display message instead.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterator

from guarantee_tracker.codec.csv_codec import CsvRow, csv_template, export_csv
from guarantee_tracker.config import BoardConfig
from guarantee_tracker.exceptions import TrackerError
from guarantee_tracker.models import (
    ChangeEvent,
    GuaranteeRecord,
    GuaranteeStatistics,
    GuaranteeUpdate,
    NewGuarantee,
)
from guarantee_tracker.realtime.reconciler import GuaranteeList
from guarantee_tracker.realtime.subscription import Subscription
from guarantee_tracker.services.importer import ImportResult, import_csv, preview_csv
from guarantee_tracker.services.validation import blank_fields, missing_fields
from guarantee_tracker.store.base import GuaranteeStore

logger = logging.getLogger(__name__)

FETCH_FAILED = "Failed to fetch guarantees"
STATS_FAILED = "Failed to fetch statistics"
SUBSCRIBE_FAILED = "Failed to subscribe to guarantee changes"
ADD_FAILED = "حدث خطأ أثناء إضافة الضمان"
UPDATE_FAILED = "حدث خطأ أثناء تحديث الضمان"
DELETE_FAILED = "حدث خطأ أثناء حذف الضمان"
IMPORT_FAILED = "خطأ في استيراد البيانات"
REQUIRED_MISSING = "يرجى تعبئة الحقول المطلوبة"


@dataclass
class ActionResult:
    """Outcome of one board operation."""

    ok: bool
    message: str | None = None
    record: GuaranteeRecord | None = None
    imported: ImportResult | None = None
    preview: list[CsvRow] | None = None


class GuaranteeBoard:
    """Dashboard state kept in sync with a guarantee store.

    Parameters
    ----------
    store : GuaranteeStore
        Authoritative collection.
    config : BoardConfig | None
        Refresh interval and import defaults.
    clock : Callable[[], float]
        Monotonic clock driving the statistics timer.
    today : Callable[[], date]
        Calendar date used to fill imported rows.
    """

    def __init__(
        self,
        store: GuaranteeStore,
        config: BoardConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.config = config or BoardConfig()
        self._clock = clock
        self._today = today

        self.guarantees = GuaranteeList()
        self.statistics: GuaranteeStatistics | None = None
        self.error: str | None = None
        self.stats_error: str | None = None
        self.loading = False

        self._subscription: Subscription | None = None
        self._mounted = False
        self._next_stats_at: float | None = None

    # Lifecycle

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def live(self) -> bool:
        """Whether change events are being received."""
        return self._subscription is not None and self._subscription.active

    def mount(self) -> None:
        """Load the list and statistics, then start receiving changes."""
        if self._mounted:
            return
        self._mounted = True
        self.refresh()
        self.refresh_statistics()
        try:
            self._subscription = self.store.subscribe(self._on_change)
        except TrackerError as e:
            logger.error("Change subscription failed: %s", e)
            self.error = _message(e, SUBSCRIBE_FAILED)

    def unmount(self) -> None:
        """Stop receiving changes. Later results and events are ignored."""
        self._mounted = False
        self._next_stats_at = None
        if self._subscription is not None:
            self._subscription.release()
            self._subscription = None

    def __enter__(self) -> GuaranteeBoard:
        self.mount()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unmount()

    def tick(self, now: float | None = None) -> int:
        """Deliver pending change events and refresh statistics when due.

        Returns
        -------
        int
            Number of change events applied.
        """
        if not self._mounted:
            return 0

        delivered = 0
        if self._subscription is not None:
            try:
                delivered = self._subscription.poll(self.config.poll_timeout_seconds)
            except TrackerError as e:
                logger.error("Change feed failed: %s", e)
                self.error = _message(e, SUBSCRIBE_FAILED)
                self._subscription.release()
                self._subscription = None

        now = self._clock() if now is None else now
        if self._next_stats_at is not None and now >= self._next_stats_at:
            self.refresh_statistics()
        return delivered

    # Reads

    def refresh(self) -> ActionResult:
        """Refetch the whole list from the store."""
        try:
            with self._busy():
                records = self.store.list_all()
        except TrackerError as e:
            message = _message(e, FETCH_FAILED)
            if self._mounted:
                self.error = message
            return ActionResult(False, message)

        if self._mounted:
            self.guarantees.replace_all(records)
            self.error = None
        return ActionResult(True)

    def refresh_statistics(self) -> ActionResult:
        """Refetch aggregate statistics and restart the refresh timer."""
        try:
            with self._busy():
                stats = self.store.aggregate_statistics()
        except TrackerError as e:
            message = _message(e, STATS_FAILED)
            if self._mounted:
                self.stats_error = message
            return ActionResult(False, message)
        finally:
            if self._mounted:
                self._next_stats_at = self._clock() + self.config.stats_refresh_seconds

        if self._mounted:
            self.statistics = stats
            self.stats_error = None
        return ActionResult(True)

    @property
    def records(self) -> list[GuaranteeRecord]:
        return self.guarantees.records

    # Writes

    def add(self, guarantee: NewGuarantee) -> ActionResult:
        """Create a guarantee from a fully filled form."""
        missing = missing_fields(guarantee)
        if missing:
            return ActionResult(False, f"{REQUIRED_MISSING}: {', '.join(missing)}")
        try:
            with self._busy():
                record = self.store.create(guarantee)
        except TrackerError as e:
            return ActionResult(False, _message(e, ADD_FAILED))
        logger.info(
            "Added guarantee %s",
            record.guarantee_number,
            extra={"guarantee_id": record.id, "guarantee_number": record.guarantee_number},
        )
        self._after_write()
        return ActionResult(True, record=record)

    def edit(self, record_id: str, changes: GuaranteeUpdate) -> ActionResult:
        """Apply a partial update; supplied required fields must not be blank."""
        blank = blank_fields(changes)
        if blank:
            return ActionResult(False, f"{REQUIRED_MISSING}: {', '.join(blank)}")
        try:
            with self._busy():
                record = self.store.update(record_id, changes)
        except TrackerError as e:
            return ActionResult(False, _message(e, UPDATE_FAILED))
        logger.info("Updated guarantee %s", record_id, extra={"guarantee_id": record_id})
        self._after_write()
        return ActionResult(True, record=record)

    def remove(self, record_id: str) -> ActionResult:
        """Delete a guarantee after the user confirmed it."""
        try:
            with self._busy():
                self.store.delete(record_id)
        except TrackerError as e:
            return ActionResult(False, _message(e, DELETE_FAILED))
        logger.info("Deleted guarantee %s", record_id, extra={"guarantee_id": record_id})
        self._after_write()
        return ActionResult(True)

    def import_csv(self, text: str) -> ActionResult:
        """Import CSV text; only aggregate counts are reported."""
        try:
            with self._busy():
                result = import_csv(
                    self.store,
                    text,
                    today=self._today(),
                    home_currency=self.config.home_currency,
                    validity_days=self.config.default_validity_days,
                )
        except TrackerError as e:
            return ActionResult(False, _message(e, IMPORT_FAILED))
        if result.success:
            self._after_write()
        return ActionResult(result.success > 0, imported=result)

    # Files

    def preview_csv(self, text: str, limit: int = 5) -> ActionResult:
        """First rows of a CSV file as they would be imported."""
        try:
            rows = preview_csv(text, limit=limit, home_currency=self.config.home_currency)
        except TrackerError as e:
            return ActionResult(False, _message(e, IMPORT_FAILED))
        return ActionResult(True, preview=rows)

    def export_csv(self) -> str | None:
        """CSV text of the current list, ``None`` when there is nothing to export."""
        records = self.guarantees.records
        if not records:
            return None
        return export_csv(records)

    @staticmethod
    def template() -> str:
        return csv_template()

    # Internals

    def _on_change(self, event: ChangeEvent) -> None:
        if not self._mounted:
            logger.debug("Ignoring %s for %s after unmount", event.kind.value, event.record_id)
            return
        self.guarantees.apply(event)

    def _after_write(self) -> None:
        # A live subscription delivers the change itself
        if self._mounted and not self.live:
            self.refresh()

    @contextmanager
    def _busy(self) -> Iterator[None]:
        self.loading = True
        try:
            yield
        finally:
            self.loading = False


def _message(error: Exception, fallback: str) -> str:
    return str(error) or fallback

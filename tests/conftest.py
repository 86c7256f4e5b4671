"""Pytest configuration and fixtures."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

import pytest

from guarantee_tracker.models import GuaranteeRecord, GuaranteeStatus, NewGuarantee
from guarantee_tracker.store.memory import InMemoryGuaranteeStore

RecordFactory = Callable[..., GuaranteeRecord]


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def today() -> date:
    """Fixed calendar date for default filling."""
    return date(2025, 3, 10)


@pytest.fixture
def make_record() -> RecordFactory:
    """Factory for stored guarantee records."""

    def _make(record_id: str = "g-001", **overrides: object) -> GuaranteeRecord:
        fields: dict = {
            "id": record_id,
            "guarantee_number": f"BG-2025-{record_id[-3:]}",
            "guarantee_type": "ضمان أداء",
            "value": Decimal("2500000"),
            "currency": "SAR",
            "issue_date": date(2025, 1, 15),
            "expiry_date": date(2025, 12, 15),
            "status": GuaranteeStatus.ACTIVE,
            "bank_name": "البنك الأهلي",
            "created_at": datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc),
            "updated_at": datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return GuaranteeRecord(**fields)

    return _make


@pytest.fixture
def new_guarantee() -> NewGuarantee:
    """Fully filled add-form submission."""
    return NewGuarantee(
        guarantee_number="BG-2025-010",
        guarantee_type="ضمان نهائي",
        value=Decimal("800000"),
        issue_date=date(2025, 1, 25),
        expiry_date=date(2026, 1, 25),
        bank_name="البنك السعودي الفرنسي",
    )


class TickingClock:
    """UTC clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def store() -> InMemoryGuaranteeStore:
    """Empty in-memory store with a deterministic clock."""
    return InMemoryGuaranteeStore(clock=TickingClock())

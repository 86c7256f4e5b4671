"""Tests for record/payload serialization."""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from guarantee_tracker.codec.serialization import (
    change_from_payload,
    record_from_dict,
    record_to_dict,
    serialize_value,
)
from guarantee_tracker.models import ChangeKind, GuaranteeStatus


@pytest.fixture
def row() -> dict:
    """Row as returned by the database or a change payload."""
    return {
        "id": "3f2a0c1e-0000-4000-8000-000000000001",
        "guarantee_number": "BG-2025-001",
        "guarantee_type": "ضمان أداء",
        "value": 2500000,
        "currency": "SAR",
        "issue_date": "2025-01-15",
        "expiry_date": "2025-12-15",
        "status": "active",
        "bank_name": "البنك الأهلي",
        "created_at": "2025-01-15T00:00:00+00:00",
        "updated_at": "2025-01-16T10:00:00Z",
    }


class TestSerializeValue:
    """Tests for serialize_value."""

    def test_decimal(self) -> None:
        assert serialize_value(Decimal("99.99")) == "99.99"

    def test_status(self) -> None:
        assert serialize_value(GuaranteeStatus.EXPIRED) == "expired"

    def test_date_and_datetime(self) -> None:
        assert serialize_value(date(2025, 6, 15)) == "2025-06-15"
        assert serialize_value(datetime(2025, 6, 15, 10, 30)) == "2025-06-15T10:30:00"

    def test_nested(self) -> None:
        result = serialize_value({"values": [Decimal("1.50")], "when": date(2025, 1, 1)})
        assert result == {"values": ["1.50"], "when": "2025-01-01"}

    def test_passthrough(self) -> None:
        assert serialize_value("text") == "text"
        assert serialize_value(None) is None


class TestRecordDicts:
    """Tests for record_to_dict/record_from_dict."""

    def test_record_to_dict(self, make_record) -> None:
        result = record_to_dict(make_record("g-001"))

        assert result["id"] == "g-001"
        assert result["value"] == "2500000"
        assert result["status"] == "active"
        assert result["issue_date"] == "2025-01-15"
        assert result["created_at"] == "2025-01-15T09:30:00+00:00"

    def test_record_from_dict(self, row: dict) -> None:
        record = record_from_dict(row)

        assert record.guarantee_number == "BG-2025-001"
        assert record.value == Decimal("2500000")
        assert record.issue_date == date(2025, 1, 15)
        assert record.status is GuaranteeStatus.ACTIVE
        assert record.created_at == datetime(2025, 1, 15, tzinfo=timezone.utc)
        assert record.updated_at == datetime(2025, 1, 16, 10, tzinfo=timezone.utc)

    def test_record_from_db_types(self, row: dict) -> None:
        row.update(
            id=UUID(row["id"]),
            value=Decimal("2500000.00"),
            issue_date=date(2025, 1, 15),
            created_at=datetime(2025, 1, 15, tzinfo=timezone.utc),
            updated_at=None,
        )

        record = record_from_dict(row)

        assert record.id == "3f2a0c1e-0000-4000-8000-000000000001"
        assert record.value == Decimal("2500000.00")
        assert record.updated_at is None

    def test_round_trip(self, make_record) -> None:
        record = make_record("g-005")
        assert record_from_dict(record_to_dict(record)) == record

    def test_missing_field(self, row: dict) -> None:
        del row["bank_name"]
        with pytest.raises(ValueError, match="bank_name"):
            record_from_dict(row)

    def test_bad_status(self, row: dict) -> None:
        row["status"] = "archived"
        with pytest.raises(ValueError):
            record_from_dict(row)


class TestChangeFromPayload:
    """Tests for change_from_payload."""

    def test_insert(self, row: dict) -> None:
        event = change_from_payload({"eventType": "INSERT", "new": row, "old": None})

        assert event.kind is ChangeKind.INSERT
        assert event.record_id == row["id"]
        assert event.record.bank_name == "البنك الأهلي"

    def test_update(self, row: dict) -> None:
        event = change_from_payload({"eventType": "UPDATE", "new": row, "old": {"id": row["id"]}})

        assert event.kind is ChangeKind.UPDATE

    def test_delete_uses_old_id(self) -> None:
        event = change_from_payload({"eventType": "DELETE", "new": None, "old": {"id": "g-7"}})

        assert event.kind is ChangeKind.DELETE
        assert event.record_id == "g-7"
        assert event.record is None

    def test_lowercase_event_type(self, row: dict) -> None:
        assert change_from_payload({"eventType": "insert", "new": row}).kind is ChangeKind.INSERT

    def test_unknown_event_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown change event type"):
            change_from_payload({"eventType": "TRUNCATE"})

    def test_delete_without_id(self) -> None:
        with pytest.raises(ValueError):
            change_from_payload({"eventType": "DELETE", "old": {}})

    def test_insert_without_record(self) -> None:
        with pytest.raises(ValueError):
            change_from_payload({"eventType": "INSERT", "new": None})

    @pytest.mark.parametrize("new", [[1, 2], "id-ish", 7])
    def test_non_object_new_record(self, new: object) -> None:
        with pytest.raises(ValueError, match="non-object"):
            change_from_payload({"eventType": "UPDATE", "new": new})

    @pytest.mark.parametrize("old", ["id-ish", 5, ["id"]])
    def test_non_object_old_record(self, old: object) -> None:
        with pytest.raises(ValueError, match="old.id"):
            change_from_payload({"eventType": "DELETE", "old": old})

    def test_record_from_non_object(self) -> None:
        with pytest.raises(ValueError, match="must be an object"):
            record_from_dict(["g-001"])

"""Tests for bulk CSV import."""

from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from guarantee_tracker.codec.csv_codec import IMPORT_HEADER, csv_template
from guarantee_tracker.exceptions import CsvFormatError, RemoteError
from guarantee_tracker.models import GuaranteeStatus
from guarantee_tracker.services.importer import (
    EMPTY_FILE_MESSAGE,
    ImportResult,
    import_csv,
    preview_csv,
)
from guarantee_tracker.store.memory import InMemoryGuaranteeStore

HEADER = ",".join(IMPORT_HEADER)


def _csv(*lines: str) -> str:
    return "\n".join([HEADER, *lines])


class TestImportCsv:
    """Tests for import_csv."""

    def test_row_missing_bank_is_counted(self, store: InMemoryGuaranteeStore, today: date) -> None:
        text = _csv(
            "BG-1,ضمان أداء,100,SAR,2025-01-01,2025-12-31,نشط,البنك الأهلي",
            "BG-2,ضمان أداء,200,SAR,2025-01-01,2025-12-31,نشط,",
            "BG-3,ضمان نهائي,300,USD,2025-02-01,2026-02-01,pending,بنك الرياض",
        )

        result = import_csv(store, text, today=today)

        assert result == ImportResult(success=2, errors=1)
        assert result.total == 3
        assert sorted(r.guarantee_number for r in store.list_all()) == ["BG-1", "BG-3"]

    def test_unparseable_value_stored_as_zero(self, store: InMemoryGuaranteeStore, today: date) -> None:
        result = import_csv(store, _csv("BG-1,ضمان أداء,abc,SAR,,,,بنك"), today=today)

        assert result.success == 1
        assert store.list_all()[0].value == Decimal("0")

    def test_missing_dates_use_import_day(self, store: InMemoryGuaranteeStore, today: date) -> None:
        import_csv(store, _csv("BG-1,ضمان أداء,10,,,,,بنك"), today=today)

        record = store.list_all()[0]
        assert record.issue_date == today
        assert record.expiry_date == today + timedelta(days=365)
        assert record.status is GuaranteeStatus.PENDING
        assert record.currency == "SAR"

    def test_import_day_defaults_to_today(self, store: InMemoryGuaranteeStore) -> None:
        import_csv(store, _csv("BG-1,ضمان أداء,10,,,,,بنك"))

        assert store.list_all()[0].issue_date == date.today()

    def test_template_imports(self, store: InMemoryGuaranteeStore) -> None:
        result = import_csv(store, csv_template())

        assert result == ImportResult(success=1, errors=0)
        assert store.list_all()[0].status is GuaranteeStatus.ACTIVE

    def test_malformed_lines_are_not_counted(self, store: InMemoryGuaranteeStore) -> None:
        text = _csv(
            "BG-1,ضمان أداء,10,SAR,,,,بنك",
            "broken,line",
        )

        assert import_csv(store, text) == ImportResult(success=1, errors=0)

    def test_empty_file(self, store: InMemoryGuaranteeStore) -> None:
        with pytest.raises(CsvFormatError, match=EMPTY_FILE_MESSAGE):
            import_csv(store, "")

    def test_no_valid_lines(self, store: InMemoryGuaranteeStore) -> None:
        with pytest.raises(CsvFormatError):
            import_csv(store, _csv("only,three,fields"))

    def test_remote_failure_counts_as_error(self, today: date) -> None:
        store = MagicMock()
        store.create.side_effect = [RemoteError("duplicate key"), MagicMock()]

        result = import_csv(
            store,
            _csv("BG-1,ضمان أداء,10,SAR,,,,بنك", "BG-2,ضمان أداء,20,SAR,,,,بنك"),
            today=today,
        )

        assert result == ImportResult(success=1, errors=1)
        assert store.create.call_count == 2

    def test_rows_sent_in_file_order(self, today: date) -> None:
        store = MagicMock()

        import_csv(
            store,
            _csv("BG-1,ضمان أداء,10,SAR,,,,بنك", "BG-2,ضمان أداء,20,SAR,,,,بنك"),
            today=today,
        )

        numbers = [c.args[0].guarantee_number for c in store.create.call_args_list]
        assert numbers == ["BG-1", "BG-2"]

    def test_other_errors_propagate(self, today: date) -> None:
        store = MagicMock()
        store.create.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError):
            import_csv(store, _csv("BG-1,ضمان أداء,10,SAR,,,,بنك"), today=today)


class TestPreviewCsv:
    """Tests for preview_csv."""

    def test_limits_rows(self) -> None:
        lines = [f"BG-{i},ضمان أداء,{i},SAR,,,,بنك" for i in range(8)]

        rows = preview_csv(_csv(*lines))

        assert [r.guarantee_number for r in rows] == ["BG-0", "BG-1", "BG-2", "BG-3", "BG-4"]

    def test_empty(self) -> None:
        with pytest.raises(CsvFormatError):
            preview_csv("just a header")

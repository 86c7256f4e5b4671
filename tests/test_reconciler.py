"""Tests for applying change events to the local list."""

import pytest

from guarantee_tracker.models import ChangeEvent, ChangeKind
from guarantee_tracker.realtime.reconciler import GuaranteeList, apply_change


@pytest.fixture
def records(make_record):
    """Newest-first list [A, B, C]."""
    return [make_record("g-00a"), make_record("g-00b"), make_record("g-00c")]


def _ids(records):
    return [r.id for r in records]


class TestApplyChange:
    """Tests for apply_change."""

    def test_insert_prepends(self, records, make_record) -> None:
        result = apply_change(records, ChangeEvent.insert(make_record("g-00d")))

        assert _ids(result) == ["g-00d", "g-00a", "g-00b", "g-00c"]

    def test_update_replaces_in_place(self, records, make_record) -> None:
        changed = make_record("g-00b", bank_name="بنك الرياض")

        result = apply_change(records, ChangeEvent.update(changed))

        assert _ids(result) == ["g-00a", "g-00b", "g-00c"]
        assert result[1] is changed

    def test_delete_removes(self, records) -> None:
        result = apply_change(records, ChangeEvent.delete("g-00a"))

        assert _ids(result) == ["g-00b", "g-00c"]

    def test_delete_unknown_is_noop(self, records) -> None:
        result = apply_change(records, ChangeEvent.delete("g-00x"))

        assert result == records

    def test_update_unknown_is_noop(self, records, make_record) -> None:
        result = apply_change(records, ChangeEvent.update(make_record("g-00x")))

        assert result == records

    def test_duplicate_insert_is_kept(self, records, make_record) -> None:
        result = apply_change(records, ChangeEvent.insert(make_record("g-00a")))

        assert _ids(result) == ["g-00a", "g-00a", "g-00b", "g-00c"]

    def test_update_touches_first_match_only(self, make_record) -> None:
        records = [make_record("g-001"), make_record("g-001")]
        changed = make_record("g-001", bank_name="بنك البلاد")

        result = apply_change(records, ChangeEvent.update(changed))

        assert result[0] is changed
        assert result[1] is records[1]

    def test_insert_without_record_is_noop(self, records) -> None:
        event = ChangeEvent(ChangeKind.INSERT, "g-00d")

        assert apply_change(records, event) == records

    def test_input_not_mutated(self, records, make_record) -> None:
        before = list(records)

        apply_change(records, ChangeEvent.insert(make_record("g-00d")))
        apply_change(records, ChangeEvent.delete("g-00a"))

        assert records == before

    def test_empty_list(self, make_record) -> None:
        assert apply_change([], ChangeEvent.delete("g-001")) == []
        assert _ids(apply_change([], ChangeEvent.insert(make_record("g-001")))) == ["g-001"]


class TestGuaranteeList:
    """Tests for GuaranteeList."""

    def test_replace_all(self, records) -> None:
        guarantees = GuaranteeList()

        guarantees.replace_all(records)

        assert guarantees.ids == ["g-00a", "g-00b", "g-00c"]
        assert len(guarantees) == 3

    def test_apply_sequence(self, records, make_record) -> None:
        guarantees = GuaranteeList(records)

        guarantees.apply(ChangeEvent.insert(make_record("g-00d")))
        guarantees.apply(ChangeEvent.delete("g-00b"))
        guarantees.apply(ChangeEvent.update(make_record("g-00c", value=1)))

        assert guarantees.ids == ["g-00d", "g-00a", "g-00c"]
        assert guarantees.find("g-00c").value == 1

    def test_find_missing(self, records) -> None:
        assert GuaranteeList(records).find("g-00x") is None

    def test_records_is_a_copy(self, records) -> None:
        guarantees = GuaranteeList(records)

        guarantees.records.clear()

        assert len(guarantees) == 3

    def test_iterates_in_order(self, records) -> None:
        assert [r.id for r in GuaranteeList(records)] == ["g-00a", "g-00b", "g-00c"]

"""Apply change events to a locally held, newest-first guarantee list."""

from typing import Iterable, Iterator

from guarantee_tracker.models import ChangeEvent, ChangeKind, GuaranteeRecord


def apply_change(records: list[GuaranteeRecord], event: ChangeEvent) -> list[GuaranteeRecord]:
    """Return the list that results from applying ``event``.

    - INSERT prepends the record, even when its id is already present.
    - UPDATE replaces the first record with the same id in place.
    - DELETE removes the first record with the id.

    Updates and deletes for unknown ids leave the list unchanged. The input
    list is never mutated.
    """
    if event.kind is ChangeKind.INSERT:
        if event.record is None:
            return list(records)
        return [event.record, *records]

    index = _find(records, event.record_id)
    if index is None:
        return list(records)

    result = list(records)
    if event.kind is ChangeKind.UPDATE:
        if event.record is not None:
            result[index] = event.record
    else:
        del result[index]
    return result


class GuaranteeList:
    """Client-side copy of the guarantee collection.

    Filled by a full fetch and kept current by change events; the store
    stays the source of truth.
    """

    def __init__(self, records: Iterable[GuaranteeRecord] = ()) -> None:
        self._records: list[GuaranteeRecord] = list(records)

    def replace_all(self, records: Iterable[GuaranteeRecord]) -> None:
        self._records = list(records)

    def apply(self, event: ChangeEvent) -> None:
        self._records = apply_change(self._records, event)

    def find(self, record_id: str) -> GuaranteeRecord | None:
        index = _find(self._records, record_id)
        return None if index is None else self._records[index]

    @property
    def records(self) -> list[GuaranteeRecord]:
        return list(self._records)

    @property
    def ids(self) -> list[str]:
        return [record.id for record in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[GuaranteeRecord]:
        return iter(list(self._records))


def _find(records: list[GuaranteeRecord], record_id: str) -> int | None:
    for index, record in enumerate(records):
        if record.id == record_id:
            return index
    return None

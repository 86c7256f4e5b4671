"""Change events delivered by the store's notification channel."""

from dataclasses import dataclass

from guarantee_tracker.models.enums import ChangeKind
from guarantee_tracker.models.guarantee import GuaranteeRecord


@dataclass(frozen=True)
class ChangeEvent:
    """One row change: an inserted or updated record, or a deleted id."""

    kind: ChangeKind
    record_id: str
    record: GuaranteeRecord | None = None

    @classmethod
    def insert(cls, record: GuaranteeRecord) -> "ChangeEvent":
        return cls(ChangeKind.INSERT, record.id, record)

    @classmethod
    def update(cls, record: GuaranteeRecord) -> "ChangeEvent":
        return cls(ChangeKind.UPDATE, record.id, record)

    @classmethod
    def delete(cls, record_id: str) -> "ChangeEvent":
        return cls(ChangeKind.DELETE, record_id)

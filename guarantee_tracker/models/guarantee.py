"""Bank guarantee models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable

from guarantee_tracker.config import HOME_CURRENCY
from guarantee_tracker.models.enums import GuaranteeStatus


@dataclass
class GuaranteeRecord:
    """Guarantee as held by the store.

    ``id``, ``created_at`` and ``updated_at`` are assigned by the store and
    never by the client.
    """

    id: str
    guarantee_number: str
    guarantee_type: str  # GuaranteeType label, free text on import
    value: Decimal
    currency: str
    issue_date: date
    expiry_date: date
    status: GuaranteeStatus
    bank_name: str
    created_at: datetime
    updated_at: datetime | None = None


@dataclass
class NewGuarantee:
    """Fields supplied by the client when creating a guarantee."""

    guarantee_number: str
    guarantee_type: str
    value: Decimal
    issue_date: date
    expiry_date: date
    bank_name: str
    currency: str = HOME_CURRENCY
    status: GuaranteeStatus = GuaranteeStatus.PENDING


@dataclass
class GuaranteeUpdate:
    """Partial update: fields left as ``None`` are not touched."""

    guarantee_number: str | None = None
    guarantee_type: str | None = None
    value: Decimal | None = None
    currency: str | None = None
    issue_date: date | None = None
    expiry_date: date | None = None
    status: GuaranteeStatus | None = None
    bank_name: str | None = None

    def changes(self) -> dict[str, Any]:
        """Return only the supplied fields."""
        return {name: value for name, value in vars(self).items() if value is not None}

    def is_empty(self) -> bool:
        return not self.changes()


@dataclass
class GuaranteeStatistics:
    """Aggregate figures shown next to the guarantee list."""

    total: int = 0
    total_value: Decimal = Decimal("0")
    active_count: int = 0
    pending_count: int = 0
    expired_count: int = 0
    type_distribution: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[GuaranteeRecord]) -> "GuaranteeStatistics":
        """Fold records into statistics."""
        stats = cls()
        for record in records:
            stats.add(record.status, record.guarantee_type, 1, record.value)
        return stats

    def add(
        self,
        status: GuaranteeStatus | str,
        guarantee_type: str,
        count: int,
        value: Decimal,
    ) -> None:
        """Accumulate ``count`` guarantees of one status/type totalling ``value``."""
        status = GuaranteeStatus(status)
        self.total += count
        self.total_value += value
        if status is GuaranteeStatus.ACTIVE:
            self.active_count += count
        elif status is GuaranteeStatus.EXPIRED:
            self.expired_count += count
        else:
            self.pending_count += count
        self.type_distribution[guarantee_type] = (
            self.type_distribution.get(guarantee_type, 0) + count
        )

    def count_for(self, status: GuaranteeStatus) -> int:
        return {
            GuaranteeStatus.ACTIVE: self.active_count,
            GuaranteeStatus.PENDING: self.pending_count,
            GuaranteeStatus.EXPIRED: self.expired_count,
        }[status]

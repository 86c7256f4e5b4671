"""Contract for guarantee stores."""

from abc import ABC, abstractmethod

from guarantee_tracker.models import (
    GuaranteeRecord,
    GuaranteeStatistics,
    GuaranteeUpdate,
    NewGuarantee,
)
from guarantee_tracker.realtime.subscription import ChangeCallback, Subscription


class GuaranteeStore(ABC):
    """Authoritative guarantee collection.

    Failed calls raise ``RemoteError`` (``RecordNotFoundError`` for unknown
    ids). Calls are never retried here.
    """

    @abstractmethod
    def list_all(self) -> list[GuaranteeRecord]:
        """All guarantees, newest created first."""

    @abstractmethod
    def get(self, record_id: str) -> GuaranteeRecord:
        """Fetch one guarantee."""

    @abstractmethod
    def create(self, guarantee: NewGuarantee) -> GuaranteeRecord:
        """Insert a guarantee; the store assigns id and timestamps."""

    @abstractmethod
    def update(self, record_id: str, changes: GuaranteeUpdate) -> GuaranteeRecord:
        """Apply a partial update and return the stored result."""

    @abstractmethod
    def delete(self, record_id: str) -> None:
        """Delete a guarantee. Deleting an unknown id is not an error."""

    @abstractmethod
    def aggregate_statistics(self) -> GuaranteeStatistics:
        """Totals by status and type, computed by the store."""

    @abstractmethod
    def subscribe(self, callback: ChangeCallback) -> Subscription:
        """Open a change subscription; the caller owns and releases it."""

    def close(self) -> None:
        """Release connections held by the store."""

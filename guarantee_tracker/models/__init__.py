"""Domain models for bank guarantees."""

from guarantee_tracker.models.base import ChangeEvent
from guarantee_tracker.models.enums import (
    STATUS_LABELS,
    ChangeKind,
    Currency,
    GuaranteeStatus,
    GuaranteeType,
)
from guarantee_tracker.models.guarantee import (
    GuaranteeRecord,
    GuaranteeStatistics,
    GuaranteeUpdate,
    NewGuarantee,
)

__all__ = [
    "STATUS_LABELS",
    "ChangeEvent",
    "ChangeKind",
    "Currency",
    "GuaranteeRecord",
    "GuaranteeStatistics",
    "GuaranteeStatus",
    "GuaranteeType",
    "GuaranteeUpdate",
    "NewGuarantee",
]

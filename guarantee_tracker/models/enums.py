"""Enumeration types for bank guarantees."""

from enum import Enum


class GuaranteeStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    EXPIRED = "expired"


class GuaranteeType(str, Enum):
    """Guarantee categories, valued by their display label."""

    PERFORMANCE = "ضمان أداء"
    INITIAL = "ضمان ابتدائي"
    FINAL = "ضمان نهائي"
    MAINTENANCE = "ضمان صيانة"


class Currency(str, Enum):
    SAR = "SAR"
    USD = "USD"
    EUR = "EUR"


class ChangeKind(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


# Labels shown in exports and accepted back on import
STATUS_LABELS = {
    GuaranteeStatus.ACTIVE: "نشط",
    GuaranteeStatus.PENDING: "قيد المراجعة",
    GuaranteeStatus.EXPIRED: "منتهي الصلاحية",
}

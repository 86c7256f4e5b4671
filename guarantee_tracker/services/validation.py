"""Acceptance checks and defaults for imported guarantee rows."""

import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from guarantee_tracker.codec.csv_codec import CsvRow
from guarantee_tracker.config import HOME_CURRENCY
from guarantee_tracker.models import GuaranteeStatus, GuaranteeUpdate, NewGuarantee

REQUIRED_FIELDS = ("guarantee_number", "guarantee_type", "value", "bank_name")

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


@dataclass(frozen=True)
class CompleteRow:
    """Row carrying every required field; dates may still be absent."""

    guarantee_number: str
    guarantee_type: str
    value: Decimal
    bank_name: str
    currency: str | None = None
    issue_date: date | None = None
    expiry_date: date | None = None
    status: GuaranteeStatus | None = None


@dataclass(frozen=True)
class IncompleteRow:
    """Row rejected for creation, with the offending field names."""

    problems: tuple[str, ...] = field(default_factory=tuple)


ParsedRow = CompleteRow | IncompleteRow


def check_row(row: CsvRow) -> ParsedRow:
    """Classify a parsed CSV row.

    A value of ``0`` (including the parse-failure default) counts as
    supplied. Negative values and malformed dates reject the row.
    """
    problems = [name for name in REQUIRED_FIELDS if _is_missing(getattr(row, name))]
    if row.value is not None and row.value < 0:
        problems.append("value")

    issue_date = expiry_date = None
    try:
        issue_date = _parse_date(row.issue_date)
    except ValueError:
        problems.append("issue_date")
    try:
        expiry_date = _parse_date(row.expiry_date)
    except ValueError:
        problems.append("expiry_date")

    if problems:
        return IncompleteRow(tuple(problems))

    return CompleteRow(
        guarantee_number=row.guarantee_number,
        guarantee_type=row.guarantee_type,
        value=row.value,
        bank_name=row.bank_name,
        currency=row.currency or None,
        issue_date=issue_date,
        expiry_date=expiry_date,
        status=row.status,
    )


def normalize(
    row: CompleteRow,
    today: date | None = None,
    home_currency: str = HOME_CURRENCY,
    validity_days: int = 365,
) -> NewGuarantee:
    """Fill defaults and produce the fields sent to the store.

    Missing issue date becomes ``today``; missing expiry date becomes
    ``today + validity_days``. No ordering between the two is enforced.
    """
    today = today or date.today()
    return NewGuarantee(
        guarantee_number=row.guarantee_number,
        guarantee_type=row.guarantee_type,
        value=row.value,
        currency=row.currency or home_currency,
        issue_date=row.issue_date or today,
        expiry_date=row.expiry_date or today + timedelta(days=validity_days),
        status=row.status or GuaranteeStatus.PENDING,
        bank_name=row.bank_name,
    )


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _parse_date(text: str) -> date | None:
    if not text:
        return None
    if not _ISO_DATE.fullmatch(text):
        raise ValueError(f"Expected YYYY-MM-DD, got {text!r}")
    return date.fromisoformat(text)


def missing_fields(guarantee: NewGuarantee) -> list[str]:
    """Required form fields left blank on a new guarantee."""
    missing = [
        name
        for name in ("guarantee_number", "guarantee_type", "bank_name")
        if _is_missing(getattr(guarantee, name))
    ]
    if guarantee.value is None or guarantee.value < 0:
        missing.append("value")
    return missing


def blank_fields(changes: GuaranteeUpdate) -> list[str]:
    """Required fields that a partial update would clear.

    Fields left as ``None`` are not part of the update and are not checked.
    """
    blank = [
        name
        for name in ("guarantee_number", "guarantee_type", "bank_name")
        if getattr(changes, name) is not None and _is_missing(getattr(changes, name))
    ]
    if changes.value is not None and changes.value < 0:
        blank.append("value")
    return blank

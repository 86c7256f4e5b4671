"""CSV exchange format for bank guarantees.

Import files carry a header row followed by data rows in a fixed column
order: number, type, value, currency, issue date, expiry date, status,
bank. Fields may be wrapped in double quotes to protect commas; embedded
quote characters are neither escaped on export nor recognised on import.

Exports and the template start with a UTF-8 byte-order mark so that
spreadsheet tools pick the right encoding for the Arabic header.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from guarantee_tracker.config import HOME_CURRENCY
from guarantee_tracker.models import STATUS_LABELS, GuaranteeRecord, GuaranteeStatus

BOM = "\ufeff"

IMPORT_HEADER = [
    "رقم الضمان",
    "نوع الضمان",
    "القيمة",
    "العملة",
    "تاريخ الإصدار",
    "تاريخ الانتهاء",
    "الحالة",
    "البنك",
]
EXPORT_HEADER = IMPORT_HEADER + ["تاريخ الإنشاء"]

TEMPLATE_ROW = [
    "BG-2025-001",
    "ضمان أداء",
    "1000000",
    "SAR",
    "2025-01-01",
    "2025-12-31",
    "نشط",
    "البنك الأهلي",
]

_ACTIVE_MARKER = "نشط"
_EXPIRED_MARKER = "منتهي"

# Leading number, as in "250000 SAR"
_AMOUNT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


@dataclass
class CsvRow:
    """One accepted data line, before validation.

    Text fields are unquoted and trimmed; empty strings mean the column was
    blank. Dates stay as raw text for the validator to check.
    """

    guarantee_number: str
    guarantee_type: str
    value: Decimal
    currency: str
    issue_date: str
    expiry_date: str
    status: GuaranteeStatus
    bank_name: str


def parse_csv(text: str, home_currency: str = HOME_CURRENCY) -> list[CsvRow]:
    """Parse CSV text into rows.

    Lines whose field count differs from the header's are dropped without
    notice. Unparseable values become ``0``.

    Parameters
    ----------
    text : str
        Raw file content.
    home_currency : str
        Currency used when the currency column is blank.

    Returns
    -------
    list[CsvRow]
        Accepted rows in file order.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]
    lines = text.strip().split("\n")
    if len(lines) < 2:
        return []

    headers = [_clean(label) for label in lines[0].split(",")]
    rows: list[CsvRow] = []

    for line in lines[1:]:
        values = split_csv_line(line.rstrip("\r"))
        if len(values) != len(headers):
            continue
        # Narrow files still need eight positional columns
        values += [""] * (len(IMPORT_HEADER) - len(values))

        rows.append(
            CsvRow(
                guarantee_number=_clean(values[0]),
                guarantee_type=_clean(values[1]),
                value=parse_amount(values[2]),
                currency=_clean(values[3]) or home_currency,
                issue_date=_clean(values[4]),
                expiry_date=_clean(values[5]),
                status=classify_status(_clean(values[6])),
                bank_name=_clean(values[7]),
            )
        )

    return rows


def split_csv_line(line: str) -> list[str]:
    """Split one line on commas that sit outside double quotes.

    Quote characters toggle the quoted state and are dropped; each field is
    trimmed.
    """
    result: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            result.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    result.append("".join(current).strip())
    return result


def parse_amount(text: str) -> Decimal:
    """Parse the leading number of a monetary amount.

    Thousands separators and spaces are removed first, and trailing text
    such as a currency unit is ignored. Text with no leading number
    gives ``0``.
    """
    match = _AMOUNT_PREFIX.match(_clean(text).replace(",", "").replace(" ", ""))
    if match is None:
        return Decimal("0")
    return Decimal(match.group())


def classify_status(text: str) -> GuaranteeStatus:
    """Map free-text status (Arabic label or English value) to a status."""
    cleaned = text.lower()
    if _ACTIVE_MARKER in cleaned or cleaned == GuaranteeStatus.ACTIVE.value:
        return GuaranteeStatus.ACTIVE
    if _EXPIRED_MARKER in cleaned or GuaranteeStatus.EXPIRED.value in cleaned:
        return GuaranteeStatus.EXPIRED
    return GuaranteeStatus.PENDING


def status_label(status: GuaranteeStatus) -> str:
    return STATUS_LABELS.get(status, STATUS_LABELS[GuaranteeStatus.PENDING])


def export_csv(records: Iterable[GuaranteeRecord]) -> str:
    """Render records as BOM-prefixed CSV text.

    Parameters
    ----------
    records : Iterable[GuaranteeRecord]
        Records in display order.

    Returns
    -------
    str
        Header line plus one line per record, joined with ``\\n``.
    """
    lines = [",".join(EXPORT_HEADER)]
    for record in records:
        lines.append(
            ",".join(
                [
                    _quote(record.guarantee_number),
                    _quote(record.guarantee_type),
                    format(record.value, "f"),
                    _quote(record.currency),
                    record.issue_date.isoformat(),
                    record.expiry_date.isoformat(),
                    _quote(status_label(record.status)),
                    _quote(record.bank_name),
                    format_local_date(record.created_at),
                ]
            )
        )
    return BOM + "\n".join(lines)


def csv_template() -> str:
    """Return the fill-in template: header plus one example row."""
    return BOM + "\n".join([",".join(IMPORT_HEADER), ",".join(TEMPLATE_ROW)])


def format_local_date(moment: datetime) -> str:
    """Day-first calendar date, as read in the dashboard's locale."""
    return f"{moment.day}/{moment.month}/{moment.year}"


def _clean(value: str) -> str:
    return value.replace('"', "").strip()


def _quote(value: str) -> str:
    return f'"{value}"'

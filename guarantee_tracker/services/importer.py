"""Bulk CSV import into a guarantee store."""

import logging
from dataclasses import dataclass
from datetime import date

from guarantee_tracker.codec.csv_codec import CsvRow, parse_csv
from guarantee_tracker.config import HOME_CURRENCY
from guarantee_tracker.exceptions import CsvFormatError, RemoteError
from guarantee_tracker.services.validation import IncompleteRow, check_row, normalize
from guarantee_tracker.store.base import GuaranteeStore

logger = logging.getLogger(__name__)

EMPTY_FILE_MESSAGE = "الملف فارغ أو لا يحتوي على بيانات صحيحة"


@dataclass
class ImportResult:
    """Aggregate outcome of an import; individual rows are not reported."""

    success: int = 0
    errors: int = 0

    @property
    def total(self) -> int:
        return self.success + self.errors


def preview_csv(text: str, limit: int = 5, home_currency: str = HOME_CURRENCY) -> list[CsvRow]:
    """First ``limit`` parsed rows, for showing before an import.

    Raises
    ------
    CsvFormatError
        If the text holds no usable rows.
    """
    rows = parse_csv(text, home_currency=home_currency)
    if not rows:
        raise CsvFormatError(EMPTY_FILE_MESSAGE)
    return rows[:limit]


def import_csv(
    store: GuaranteeStore,
    text: str,
    today: date | None = None,
    home_currency: str = HOME_CURRENCY,
    validity_days: int = 365,
) -> ImportResult:
    """Create one guarantee per acceptable CSV row.

    Rows are sent one at a time, each create finishing before the next
    starts. Rejected rows and failed creates are both counted as errors.

    Parameters
    ----------
    store : GuaranteeStore
        Destination store.
    text : str
        CSV file content.
    today : date | None
        Import date used for missing issue/expiry dates.
    home_currency : str
        Currency for rows that leave it blank.
    validity_days : int
        Default validity when the expiry date is missing.

    Returns
    -------
    ImportResult
        Success and error counts.

    Raises
    ------
    CsvFormatError
        If the text holds no usable rows.
    """
    rows = parse_csv(text, home_currency=home_currency)
    if not rows:
        raise CsvFormatError(EMPTY_FILE_MESSAGE)

    today = today or date.today()
    result = ImportResult()

    for line_no, row in enumerate(rows, start=1):
        checked = check_row(row)
        if isinstance(checked, IncompleteRow):
            logger.debug(
                "Row %d rejected: %s", line_no, ", ".join(checked.problems), extra={"row": line_no}
            )
            result.errors += 1
            continue

        guarantee = normalize(
            checked,
            today=today,
            home_currency=home_currency,
            validity_days=validity_days,
        )
        try:
            store.create(guarantee)
        except RemoteError as e:
            logger.warning("Row %d not stored: %s", line_no, e, extra={"row": line_no})
            result.errors += 1
            continue
        result.success += 1

    logger.info("CSV import complete: success=%d, errors=%d", result.success, result.errors)
    return result

"""Operations on the guarantee collection: validation, import, board."""

from guarantee_tracker.services.board import ActionResult, GuaranteeBoard
from guarantee_tracker.services.importer import ImportResult, import_csv, preview_csv
from guarantee_tracker.services.validation import (
    CompleteRow,
    IncompleteRow,
    ParsedRow,
    blank_fields,
    check_row,
    missing_fields,
    normalize,
)

__all__ = [
    "ActionResult",
    "CompleteRow",
    "GuaranteeBoard",
    "ImportResult",
    "IncompleteRow",
    "ParsedRow",
    "blank_fields",
    "check_row",
    "import_csv",
    "missing_fields",
    "normalize",
    "preview_csv",
]

"""CSV and JSON codecs for guarantee records."""

from guarantee_tracker.codec.csv_codec import (
    BOM,
    CsvRow,
    classify_status,
    csv_template,
    export_csv,
    parse_csv,
    split_csv_line,
)
from guarantee_tracker.codec.serialization import (
    change_from_payload,
    record_from_dict,
    record_to_dict,
    serialize_value,
)

__all__ = [
    "BOM",
    "CsvRow",
    "change_from_payload",
    "classify_status",
    "csv_template",
    "export_csv",
    "parse_csv",
    "record_from_dict",
    "record_to_dict",
    "serialize_value",
    "split_csv_line",
]

from lumedit.batch.csv_rows import (
    CSVRow,
    RowValidation,
    apply_row,
    export_csv_rows,
    metadata_updates_from_row,
    parse_csv_rows,
    row_from_file,
    validate_rows,
)

__all__ = [
    "CSVRow",
    "RowValidation",
    "apply_row",
    "export_csv_rows",
    "metadata_updates_from_row",
    "parse_csv_rows",
    "row_from_file",
    "validate_rows",
]

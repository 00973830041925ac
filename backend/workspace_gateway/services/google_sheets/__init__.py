from .a1 import column_letter, quote_sheet_title, sheet_title_from_range
from .client import (
    SHEETS_API_BASE,
    SheetsValueClient,
    SpreadsheetInfo,
    SpreadsheetSheet,
    UpsertResult,
    ValueUpdate,
)

__all__ = [
    "SHEETS_API_BASE",
    "SheetsValueClient",
    "SpreadsheetInfo",
    "SpreadsheetSheet",
    "UpsertResult",
    "ValueUpdate",
    "column_letter",
    "quote_sheet_title",
    "sheet_title_from_range",
]

"""A1 notation helpers for addressing sheet ranges."""
from __future__ import annotations

__all__ = [
    "column_letter",
    "quote_sheet_title",
    "sheet_title_from_range",
    "row_range",
    "column_range",
]


def column_letter(index: int) -> str:
    """Convert a 1-based column index to its letter name (1 -> A, 27 -> AA)."""

    if index < 1:
        raise ValueError("Column index must be >= 1")
    letters = ""
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def quote_sheet_title(title: str) -> str:
    return "'" + title.replace("'", "''") + "'"


def sheet_title_from_range(range_: str) -> str:
    """Return the sheet title addressed by ``range_``.

    A range without ``!`` names the whole sheet.
    """

    if range_.startswith("'"):
        chars = []
        position = 1
        while position < len(range_):
            char = range_[position]
            if char == "'":
                # '' is an escaped quote inside a quoted title.
                if range_[position + 1 : position + 2] == "'":
                    chars.append("'")
                    position += 2
                    continue
                break
            chars.append(char)
            position += 1
        return "".join(chars)
    return range_.split("!", 1)[0]


def row_range(title: str, row_index: int, width: int) -> str:
    last_column = column_letter(max(width, 1))
    return f"{quote_sheet_title(title)}!A{row_index}:{last_column}{row_index}"


def column_range(title: str, column: str = "A") -> str:
    return f"{quote_sheet_title(title)}!{column}:{column}"

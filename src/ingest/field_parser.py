"""Delimited-text field parsing.

This module splits one line of register extract text into fields.
Parsing is lenient: an unterminated quoted span closes at end of line.
"""

from __future__ import annotations

from core.constants import DEFAULT_DELIMITER, DEFAULT_QUOTE_CHAR
from core.errors import RegisterIngestError


def parse_delimited_line(
    line: str,
    delimiter: str = DEFAULT_DELIMITER,
    quote: str = DEFAULT_QUOTE_CHAR,
) -> list[str]:
    """Split a delimited line into ordered field values.

    Delimiters inside quoted spans are literal, and a doubled quote
    inside a quoted span yields one quote character. The number of
    fields is not validated.

    Args:
        line: One line of source text without its line terminator.
        delimiter: Single-character field separator.
        quote: Single-character quote marker.

    Returns:
        Field values in source order.

    Raises:
        RegisterIngestError: If delimiter or quote configuration is invalid.
    """
    _validate_markers(delimiter, quote)
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    index = 0
    length = len(line)
    while index < length:
        char = line[index]
        if char == quote:
            if in_quotes and index + 1 < length and line[index + 1] == quote:
                current.append(quote)
                index += 2
                continue
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1
    fields.append("".join(current))
    return fields


def _validate_markers(delimiter: str, quote: str) -> None:
    if len(delimiter) != 1 or len(quote) != 1:
        raise RegisterIngestError(
            f"Invalid parser markers delimiter={delimiter!r} quote={quote!r}: "
            "both must be single characters."
        )
    if delimiter == quote:
        raise RegisterIngestError(
            f"Invalid parser markers: delimiter and quote are both {delimiter!r}. "
            "Use distinct characters."
        )

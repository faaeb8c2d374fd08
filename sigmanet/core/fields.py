"""Parsing of raw record fields into floats."""

from __future__ import annotations

from typing import List, Sequence

from .errors import FormatError


def parse_field(text: object, index: int = 0) -> float:
    """Parse ``text`` as a period-decimal float literal.

    Digit-group separators (``,`` or ``_``) are rejected so that the accepted
    grammar does not depend on the locale or on Python's numeric literal rules.
    Thousands-grouped literals such as ``"1,000"`` are therefore refused on purpose.
    """

    if not isinstance(text, str) or "_" in text:
        raise FormatError(index, text)
    try:
        return float(text)
    except ValueError as exc:
        raise FormatError(index, text) from exc


def parse_fields(fields: Sequence[object]) -> List[float]:
    """Parse every element of ``fields``; the first bad field aborts."""

    return [parse_field(text, index) for index, text in enumerate(fields)]


__all__ = ["parse_field", "parse_fields"]

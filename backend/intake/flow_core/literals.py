"""Typed interpretation of raw answer text and trigger literals.

Answers are always stored as the text the applicant typed. Whenever a trigger
needs to compare against an answer, the text is coerced here using the
declared answer type of the node it belongs to. Anything that cannot be
interpreted comes back as ``UNPARSABLE`` and is treated as "not answered".
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Final

from .ir import AnswerType

TypedValue = bool | int | float | str


class _Unparsable:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNPARSABLE"

    def __bool__(self) -> bool:
        return False


UNPARSABLE: Final = _Unparsable()

AFFIRMATIVE_TOKENS: Final = frozenset({"yes", "y", "true"})
NEGATIVE_TOKENS: Final = frozenset({"no", "n", "false"})

_INTEGER_RE = re.compile(r"^-?\d+$")
_NUMERIC_LITERAL_RE = re.compile(r"^-?\d+(\.\d+)?$")
_DECIMAL_RE = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$", re.ASCII)
_QUOTES_RE = re.compile(r"^['\"]|['\"]$")

_DATE_FORMATS: Final = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def parse_boolean(text: str) -> bool | _Unparsable:
    normalized = text.strip().lower()
    if normalized in AFFIRMATIVE_TOKENS:
        return True
    if normalized in NEGATIVE_TOKENS:
        return False
    return UNPARSABLE


def _parse_decimal(text: str) -> float | _Unparsable:
    # float() alone would also take "1_000", "nan" and "infinity"
    if not _DECIMAL_RE.match(text):
        return UNPARSABLE
    value = float(text)
    if math.isinf(value):
        return UNPARSABLE
    return value


def _is_date(text: str) -> bool:
    for fmt in _DATE_FORMATS:
        try:
            datetime.strptime(text, fmt)
        except ValueError:
            continue
        return True
    return False


def coerce(answer_type: AnswerType | str, raw_text: str | None) -> TypedValue | _Unparsable:
    """Convert raw answer text into a typed value for ``answer_type``.

    Empty or whitespace-only input is ``UNPARSABLE`` for every type. Dates keep
    their original (trimmed) text; comparisons on them are textual/numeric.
    """
    if raw_text is None:
        return UNPARSABLE
    trimmed = raw_text.strip()
    if not trimmed:
        return UNPARSABLE

    if answer_type == "boolean":
        return parse_boolean(trimmed)
    if answer_type == "integer":
        return int(trimmed) if _INTEGER_RE.match(trimmed) else UNPARSABLE
    if answer_type == "decimal":
        return _parse_decimal(trimmed)
    if answer_type == "date":
        return trimmed if _is_date(trimmed) else UNPARSABLE
    # text and select types
    return trimmed


def parse_literal(token: str) -> TypedValue:
    """Parse the right-hand side of a trigger clause.

    Boolean keyword first, then ``-?digits(.digits)?``, otherwise a string with
    one optional surrounding quote stripped from each end.
    """
    trimmed = token.strip()
    if trimmed.lower() == "true":
        return True
    if trimmed.lower() == "false":
        return False
    if _NUMERIC_LITERAL_RE.match(trimmed):
        return float(trimmed) if "." in trimmed else int(trimmed)
    return _QUOTES_RE.sub("", trimmed)


def text_form(value: TypedValue) -> str:
    """Lower-cased text used for ``==`` and ``CONTAINS`` comparisons."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).lower()


def as_number(value: TypedValue) -> float | None:
    """Numeric view of a typed value, or None when it is not a number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    result = _parse_decimal(value.strip())
    return None if result is UNPARSABLE else result  # type: ignore[return-value]

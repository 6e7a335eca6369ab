"""Validation helpers for seating input records.

Each helper returns `(ok, message)` so callers decide whether to raise.
"""

from __future__ import annotations

import re
from typing import Iterable, Tuple


_ID_RE = re.compile(r"^[A-Za-z0-9_.:-]{1,64}$")


def require_non_empty(value: str, field: str) -> Tuple[bool, str]:
    if not value or not str(value).strip():
        return False, f"{field} cannot be empty"
    return True, ""


def validate_id(value: str, field: str) -> Tuple[bool, str]:
    ok, msg = require_non_empty(value, field)
    if not ok:
        return ok, msg
    if not _ID_RE.match(str(value).strip()):
        return False, f"{field} must be 1-64 chars (letters/numbers/_/-/./:)"
    return True, ""


def validate_positive_int(value: int, field: str, min_value: int = 1, max_value: int | None = None) -> Tuple[bool, str]:
    if value is None:
        return False, f"{field} is required"
    if value < min_value:
        return False, f"{field} must be >= {min_value}"
    if max_value is not None and value > max_value:
        return False, f"{field} must be <= {max_value}"
    return True, ""


def validate_unique(values: Iterable[str], field: str) -> Tuple[bool, str]:
    vals = [v.strip() for v in values if v and v.strip()]
    if len(vals) != len(set(vals)):
        return False, f"{field} contains duplicates"
    return True, ""


def validate_choice(value: str, field: str, allowed: Iterable[str]) -> Tuple[bool, str]:
    ok, msg = require_non_empty(value, field)
    if not ok:
        return ok, msg
    allowed_set = {str(x) for x in allowed}
    if str(value) not in allowed_set:
        return False, f"{field} must be one of: {', '.join(sorted(allowed_set))}"
    return True, ""


def validate_room_dimensions(*, rows: int, columns: int) -> Tuple[bool, str]:
    for name, val in [("Rows", rows), ("Columns", columns)]:
        ok, msg = validate_positive_int(val, name, 1, 500)
        if not ok:
            return ok, msg
    return True, ""


def validate_section(*, name: str, roll_numbers: Iterable[str], student_count: int) -> Tuple[bool, str]:
    """A section needs a name and a non-negative headcount; rosters must be unique."""

    ok, msg = require_non_empty(name, "Section name")
    if not ok:
        return ok, msg
    if student_count is None or int(student_count) < 0:
        return False, "Student count must be >= 0"
    ok, msg = validate_unique(roll_numbers, f"Roll numbers of section {name}")
    if not ok:
        return ok, msg
    return True, ""


def raise_if_invalid(result: Tuple[bool, str]) -> None:
    ok, msg = result
    if not ok:
        raise ValueError(msg)

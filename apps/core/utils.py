from __future__ import annotations

import re
from typing import Iterable, List

from django.db import connection

PINCODE_RE = re.compile(r"^\d{6}$")
PINCODE_IN_TEXT_RE = re.compile(r"\b\d{6}\b")


def normalize_pincode(raw) -> str:
    """
    Strip whitespace and separators from a user supplied pincode.

    Examples:
        " 560 001 " -> "560001"
        "560-001" -> "560001"
    """
    if raw is None:
        return ""
    return "".join(ch for ch in str(raw) if ch.isdigit())


def is_pincode(value: str) -> bool:
    return bool(value) and bool(PINCODE_RE.match(value))


def extract_pincode(text: str) -> str:
    if not text:
        return ""
    match = PINCODE_IN_TEXT_RE.search(text)
    return match.group(0) if match else ""


def normalize_names(values: Iterable) -> List[str]:
    """
    Lower-case, trim and de-duplicate a list of names while keeping order.
    """
    seen = set()
    result = []
    for value in values or []:
        name = str(value).strip().lower()
        if name and name not in seen:
            seen.add(name)
            result.append(name)
    return result


def filter_json_list_contains(queryset, field: str, value) -> list:
    """
    Rows of ``queryset`` whose JSON list ``field`` contains ``value``.

    Uses the database ``contains`` lookup where the backend supports it
    (PostgreSQL) and filters in Python otherwise (SQLite).
    """
    if connection.features.supports_json_field_contains:
        return list(queryset.filter(**{f"{field}__contains": [value]}))
    return [row for row in queryset if value in (getattr(row, field) or [])]

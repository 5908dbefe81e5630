from __future__ import annotations

import re
import unicodedata
from datetime import date
from typing import Optional

from ..models import PersonalRecord


FILE_LABEL = "Personaldaten"
ID_LENGTH = 8
ID_PLACEHOLDER = "X" * ID_LENGTH

_WHITESPACE = re.compile(r"\s+")
_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_name_part(text: Optional[str]) -> str:
    """'José  María' -> 'Jose_Maria'; anything outside [A-Za-z0-9_-] is dropped."""
    decomposed = unicodedata.normalize("NFD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _UNSAFE.sub("", _WHITESPACE.sub("_", stripped.strip()))


def personnel_number(user_id: Optional[str]) -> str:
    if not user_id:
        return ID_PLACEHOLDER
    return user_id[:ID_LENGTH].upper()


def file_name(record: PersonalRecord, today: Optional[date] = None) -> str:
    day = (today or date.today()).isoformat()
    return (
        f"{day}_{FILE_LABEL}_{personnel_number(record.user_id)}_"
        f"{sanitize_name_part(record.first_name)}_{sanitize_name_part(record.last_name)}.pdf"
    )

from __future__ import annotations

import re
from datetime import date
from typing import Any, Optional

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse a canonical YYYY-MM-DD string, returning None for anything else."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not _ISO_DATE.fullmatch(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None

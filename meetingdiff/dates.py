from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Server dates look like ``2022-12-31``; timestamps keep only their date part."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def api_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def excel_date(value: Optional[date]) -> str:
    if value is None:
        return ""
    return value.strftime("%m/%d/%Y")


def parse_excel_date(value: str) -> Optional[date]:
    if not value:
        return None
    return datetime.strptime(value, "%m/%d/%Y").date()

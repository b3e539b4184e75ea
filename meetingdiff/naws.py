from __future__ import annotations

from typing import List

from .models import Meeting

NO_CROSS_REFERENCE = "X"


def effective_code(meeting: Meeting) -> str:
    """The registry code actually printed: a manual override wins over world_id."""
    return meeting.naws_code_override or meeting.world_id or ""


def original_code(meeting: Meeting) -> str:
    if meeting.naws_code_override:
        return meeting.world_id or ""
    return ""


def committee_cells(meeting: Meeting, show_original_naws_codes: bool) -> List[str]:
    if show_original_naws_codes:
        return [effective_code(meeting), original_code(meeting)]
    return [effective_code(meeting)]


def touch_key(meeting: Meeting) -> str:
    return (meeting.world_id or "").upper()


def is_cross_referenced(meeting: Meeting) -> bool:
    code = effective_code(meeting).upper()
    return bool(code) and code != NO_CROSS_REFERENCE

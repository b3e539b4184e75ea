from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from .models import EmittedRow, Meeting, ServiceBody, Touched
from .naws import is_cross_referenced, touch_key
from .rows import build_row

LOGGER = logging.getLogger(__name__)


def select_extra_meetings(meetings: Iterable[Meeting], touched: Touched) -> List[Meeting]:
    """Unchanged meetings that share a registry code with a changed meeting."""
    selected: List[Meeting] = []
    for meeting in meetings:
        if not is_cross_referenced(meeting):
            continue
        if touch_key(meeting) not in touched.world_ids:
            continue
        if meeting.bmlt_id in touched.bmlt_ids:
            continue
        selected.append(meeting)
    return selected


def extra_meeting_rows(
    meetings: Iterable[Meeting],
    touched: Touched,
    service_bodies: Sequence[ServiceBody],
    show_original_naws_codes: bool = False,
) -> List[EmittedRow]:
    selected = select_extra_meetings(meetings, touched)
    LOGGER.info("Including %d extra meetings", len(selected))
    return [EmittedRow(build_row(m, service_bodies, show_original_naws_codes)) for m in selected]

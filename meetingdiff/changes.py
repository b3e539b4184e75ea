from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from .errors import MalformedEvent, UnknownEventType
from .models import (
    MEETING_CREATED,
    MEETING_DELETED,
    MEETING_UPDATED,
    STYLE_DELETED,
    STYLE_NEW,
    ChangeEvent,
    EmittedRow,
    Meeting,
    ServiceBody,
    Touched,
)
from .naws import touch_key
from .rows import build_row, style_changed_cells, style_entire_row

LOGGER = logging.getLogger(__name__)


def _meeting(event: ChangeEvent, attr: str) -> Meeting:
    meeting = getattr(event, attr)
    if meeting is None:
        raise MalformedEvent(event.event_type, attr)
    return meeting


def process_event(
    event: ChangeEvent,
    touched: Touched,
    service_bodies: Sequence[ServiceBody],
    show_original_naws_codes: bool = False,
) -> Tuple[EmittedRow, Touched]:
    """Turn one change event into the row it contributes and the grown touched sets."""
    if event.event_type == MEETING_CREATED:
        meeting = _meeting(event, "new_meeting")
        row = build_row(meeting, service_bodies, show_original_naws_codes)
        touched = touched.with_world_id(touch_key(meeting)).with_bmlt_id(meeting.bmlt_id)
        return EmittedRow(row, style_entire_row(row, STYLE_NEW)), touched

    if event.event_type == MEETING_DELETED:
        meeting = _meeting(event, "old_meeting")
        row = build_row(meeting, service_bodies, show_original_naws_codes)
        # a deleted meeting is absent from the current meetings, so its bmlt_id is not recorded
        touched = touched.with_world_id(touch_key(meeting))
        return EmittedRow(row, style_entire_row(row, STYLE_DELETED)), touched

    if event.event_type == MEETING_UPDATED:
        old, new = _meeting(event, "old_meeting"), _meeting(event, "new_meeting")
        old_row = build_row(old, service_bodies, show_original_naws_codes)
        new_row = build_row(new, service_bodies, show_original_naws_codes)
        touched = (
            touched.with_world_id(touch_key(old))
            .with_world_id(touch_key(new))
            .with_bmlt_id(old.bmlt_id)
            .with_bmlt_id(new.bmlt_id)
        )
        return EmittedRow(new_row, style_changed_cells(old_row, new_row)), touched

    raise UnknownEventType(event.event_type)


def process_changes(
    events: Iterable[ChangeEvent],
    service_bodies: Sequence[ServiceBody],
    show_original_naws_codes: bool = False,
    touched: Touched = Touched(),
) -> Tuple[List[EmittedRow], Touched]:
    rows: List[EmittedRow] = []
    for event in events:
        row, touched = process_event(event, touched, service_bodies, show_original_naws_codes)
        LOGGER.debug("%s bmlt_id=%s -> %d styled cells", event.event_type, row.values[-1], len(row.styles))
        rows.append(row)
    LOGGER.info("Processed %d change events (%d world ids touched)", len(rows), len(touched.world_ids))
    return rows, touched

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .models import Meeting, ServiceBody, STYLE_CHANGED
from .naws import committee_cells

# Keep in step with build_row below.
BASE_HEADERS = [
    "CommitteeName", "AreaRegion", "ParentName", "Day", "Time", "Room", "Closed", "WheelChr",
    "Place", "Address", "City", "LocBorough", "State", "Zip", "Directions",
    "Format1", "Format2", "Format3", "Format4", "Format5",
    "Language1", "Language2", "Language3", "unpublished",
    "VirtualMeetingLink", "VirtualMeetingInfo", "PhoneMeetingNumber", "Country",
    "LastChanged", "Longitude", "Latitude", "TimeZone", "bmlt_id",
]


def spreadsheet_headers(show_original_naws_codes: bool = False) -> List[str]:
    committees = ["Committee", "Original"] if show_original_naws_codes else ["Committee"]
    return committees + BASE_HEADERS


def normalize_cell(value: Any) -> Any:
    return "" if value is None else value


def build_row(meeting: Meeting, service_bodies: Sequence[ServiceBody], show_original_naws_codes: bool = False) -> List[Any]:
    formats = meeting.naws_formats()
    row = committee_cells(meeting, show_original_naws_codes) + [
        meeting.name,
        meeting.service_body_world_id(service_bodies),
        meeting.service_body_name(service_bodies),
        meeting.day_string(),
        meeting.start_time,
        meeting.non_naws_formats(),  # "Room" holds the non-NAWS format names
        meeting.open_or_closed(),
        meeting.wheelchair_accessible(),
        meeting.location_text,
        meeting.location_street,
        meeting.location_municipality,
        meeting.location_neighborhood,
        meeting.location_province,
        meeting.location_postal_code_1,
        meeting.location_info_and_comments(),
        formats[0],
        formats[1],
        formats[2],
        formats[3],
        formats[4],
        meeting.language(),
        "",
        "",
        "" if meeting.published else "1",
        meeting.virtual_meeting_link,
        meeting.virtual_meeting_additional_info,
        meeting.phone_meeting_number,
        meeting.location_nation,
        meeting.last_changed_excel_format(),
        meeting.longitude,
        meeting.latitude,
        meeting.time_zone,
        meeting.bmlt_id,
    ]
    # the sink cannot style a cell that holds None
    return [normalize_cell(value) for value in row]


def changed_cells(old_row: Sequence[Any], new_row: Sequence[Any]) -> List[int]:
    return [
        col for col, (before, after) in enumerate(zip(old_row, new_row))
        if normalize_cell(before) != normalize_cell(after)
    ]


def style_changed_cells(old_row: Sequence[Any], new_row: Sequence[Any]) -> Dict[int, str]:
    return {col: STYLE_CHANGED for col in changed_cells(old_row, new_row)}


def style_entire_row(row: Sequence[Any], style: str) -> Dict[int, str]:
    return {col: style for col in range(len(row))}

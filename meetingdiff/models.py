from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .dates import excel_date

DAYS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

OPEN = "OPEN"
CLOSED = "CLOSED"
WHEELCHAIR = "WCHR"
LANGUAGE = "LANG"
PREFERRED_NAWS_FORMATS = ["VM", "TC", "HYBR", "W", "M", "GL"]
SKIPPED_NAWS_FORMATS = [OPEN, CLOSED, WHEELCHAIR]
NAWS_FORMAT_SLOTS = 5

MEETING_CREATED = "MeetingCreated"
MEETING_UPDATED = "MeetingUpdated"
MEETING_DELETED = "MeetingDeleted"

STYLE_HEADER = "header"
STYLE_NEW = "new"
STYLE_DELETED = "deleted"
STYLE_CHANGED = "changed-cell"
STYLE_NONE = "none"


@dataclass(frozen=True)
class Format:
    bmlt_id: Optional[int] = None
    key_string: str = ""
    name: str = ""
    world_id: Optional[str] = None


@dataclass(frozen=True)
class ServiceBody:
    bmlt_id: int
    name: str = ""
    world_id: Optional[str] = None
    parent_bmlt_id: Optional[int] = None
    type: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    helpline: Optional[str] = None


@dataclass(frozen=True)
class RootServer:
    id: int
    name: str
    url: str = ""
    is_enabled: bool = True

    def menu_name(self) -> str:
        if self.is_enabled:
            return self.name
        return "[inactive] " + self.name

    def sort_name(self) -> Tuple[bool, str]:
        # inactive and "[do not use yet]" servers go to the bottom
        return (not self.is_enabled or self.name.startswith("["), self.name.casefold())


@dataclass(frozen=True)
class Snapshot:
    root_server_id: int
    date: date


@dataclass(frozen=True)
class Meeting:
    bmlt_id: int
    name: str = ""
    day: Optional[int] = None
    service_body_bmlt_id: Optional[int] = None
    venue_type: Optional[int] = None
    start_time: Optional[str] = None
    duration: Optional[str] = None
    time_zone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    published: bool = False
    world_id: Optional[str] = None
    naws_code_override: Optional[str] = None
    location_text: Optional[str] = None
    location_info: Optional[str] = None
    location_street: Optional[str] = None
    location_city_subsection: Optional[str] = None
    location_neighborhood: Optional[str] = None
    location_municipality: Optional[str] = None
    location_sub_province: Optional[str] = None
    location_province: Optional[str] = None
    location_postal_code_1: Optional[str] = None
    location_nation: Optional[str] = None
    train_lines: Optional[str] = None
    bus_lines: Optional[str] = None
    comments: Optional[str] = None
    virtual_meeting_link: Optional[str] = None
    virtual_meeting_additional_info: Optional[str] = None
    phone_meeting_number: Optional[str] = None
    format_bmlt_ids: Sequence[int] = ()
    formats: Sequence[Format] = ()
    service_body: Optional[ServiceBody] = None
    last_changed: Optional[date] = None

    def day_string(self) -> str:
        if not self.day:
            return ""
        return DAYS[self.day - 1]

    def _service_body(self, service_bodies: Iterable[ServiceBody]) -> Optional[ServiceBody]:
        if not self.service_body_bmlt_id:
            return None
        for body in service_bodies:
            if body.bmlt_id == self.service_body_bmlt_id:
                return body
        return None

    def service_body_world_id(self, service_bodies: Iterable[ServiceBody]) -> str:
        body = self._service_body(service_bodies)
        return (body.world_id or "") if body else ""

    def service_body_name(self, service_bodies: Iterable[ServiceBody]) -> str:
        body = self._service_body(service_bodies)
        return (body.name or "") if body else ""

    def _has_format(self, world_id: str) -> bool:
        return any(f.world_id == world_id for f in self.formats)

    def open_or_closed(self) -> str:
        # Unmarked meetings are reported as closed. A server can be configured
        # to default the other way, but closed is the safer assumption.
        return OPEN if self._has_format(OPEN) else CLOSED

    def wheelchair_accessible(self) -> str:
        return "TRUE" if self._has_format(WHEELCHAIR) else "FALSE"

    def naws_formats(self) -> List[str]:
        """Registry format keywords for the Format1..Format5 columns.

        Preferred keywords come first in their fixed order, then the remaining
        keywords in the meeting's own order, minus the ones that already have
        dedicated columns. The result is padded to five entries but never
        truncated.
        """
        present = [f.world_id for f in self.formats if f.world_id is not None]
        results = [code for code in PREFERRED_NAWS_FORMATS if code in present]
        for code in present:
            if code not in PREFERRED_NAWS_FORMATS and code not in SKIPPED_NAWS_FORMATS:
                results.append(code)
        results.extend([""] * (NAWS_FORMAT_SLOTS - len(results)))
        return results

    def non_naws_formats(self) -> str:
        return ", ".join(f.name for f in self.formats if not f.world_id)

    def location_info_and_comments(self) -> str:
        return ", ".join(part for part in (self.location_info, self.comments) if part)

    def language(self) -> str:
        for fmt in self.formats:
            if fmt.world_id == LANGUAGE:
                return fmt.key_string
        return ""

    def last_changed_excel_format(self) -> str:
        return excel_date(self.last_changed)


@dataclass(frozen=True)
class ChangeEvent:
    event_type: str
    old_meeting: Optional[Meeting] = None
    new_meeting: Optional[Meeting] = None
    changed_fields: Sequence[str] = ()


@dataclass(frozen=True)
class GenerationOptions:
    show_original_naws_codes: bool = False
    include_extra_meetings: bool = False
    exclude_world_id_updates: bool = False


@dataclass(frozen=True)
class Touched:
    """Registry codes (upper-cased) and bmlt ids seen in the change stream."""

    world_ids: FrozenSet[str] = frozenset()
    bmlt_ids: FrozenSet[int] = frozenset()

    def with_world_id(self, key: str) -> "Touched":
        if not key:
            return self
        return Touched(self.world_ids | {key}, self.bmlt_ids)

    def with_bmlt_id(self, bmlt_id: int) -> "Touched":
        return Touched(self.world_ids, self.bmlt_ids | {bmlt_id})


@dataclass
class EmittedRow:
    values: List[Any]
    styles: Dict[int, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StyledCell:
    row: int
    col: int
    style: str


@dataclass
class Sheet:
    headers: List[str]
    rows: List[List[Any]] = field(default_factory=list)
    styles: List[StyledCell] = field(default_factory=list)

    def append(self, emitted: EmittedRow) -> None:
        self.rows.append(emitted.values)
        row_index = len(self.rows)
        for col, style in sorted(emitted.styles.items()):
            self.styles.append(StyledCell(row_index, col, style))

    def style_at(self, row: int, col: int) -> str:
        for cell in self.styles:
            if cell.row == row and cell.col == col:
                return cell.style
        return STYLE_NONE


@dataclass
class GeneratedSheet:
    file_name: str
    sheet: Sheet


Config = Dict[str, Any]

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .dates import parse_date
from .models import ChangeEvent, Format, Meeting, RootServer, ServiceBody, Snapshot

LOGGER = logging.getLogger(__name__)


def _camel(name: str) -> str:
    return re.sub(r"_(\w)", lambda m: m.group(1).upper(), name)


def _field(raw: Mapping[str, Any], name: str, default: Any = None) -> Any:
    """Read ``name`` from a payload that may use snake_case or camelCase keys."""
    if name in raw:
        return raw[name]
    return raw.get(_camel(name), default)


def _int_or_none(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _float_or_none(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def parse_format(raw: Mapping[str, Any]) -> Format:
    return Format(
        bmlt_id=_int_or_none(_field(raw, "bmlt_id")),
        key_string=_field(raw, "key_string") or "",
        name=_field(raw, "name") or "",
        world_id=_field(raw, "world_id") or None,
    )


def parse_service_body(raw: Mapping[str, Any]) -> ServiceBody:
    return ServiceBody(
        bmlt_id=int(_field(raw, "bmlt_id")),
        name=_field(raw, "name") or "",
        world_id=_field(raw, "world_id"),
        parent_bmlt_id=_int_or_none(_field(raw, "parent_bmlt_id")),
        type=_field(raw, "type"),
        description=_field(raw, "description"),
        url=_field(raw, "url"),
        helpline=_field(raw, "helpline"),
    )


def parse_meeting(raw: Mapping[str, Any]) -> Meeting:
    embedded_body = _field(raw, "service_body")
    return Meeting(
        bmlt_id=int(_field(raw, "bmlt_id")),
        name=_field(raw, "name") or "",
        day=_int_or_none(_field(raw, "day")),
        service_body_bmlt_id=_int_or_none(_field(raw, "service_body_bmlt_id")),
        venue_type=_int_or_none(_field(raw, "venue_type")),
        start_time=_field(raw, "start_time"),
        duration=_field(raw, "duration"),
        time_zone=_field(raw, "time_zone"),
        latitude=_float_or_none(_field(raw, "latitude")),
        longitude=_float_or_none(_field(raw, "longitude")),
        published=bool(_field(raw, "published")),
        world_id=_field(raw, "world_id"),
        naws_code_override=_field(raw, "naws_code_override"),
        location_text=_field(raw, "location_text"),
        location_info=_field(raw, "location_info"),
        location_street=_field(raw, "location_street"),
        location_city_subsection=_field(raw, "location_city_subsection"),
        location_neighborhood=_field(raw, "location_neighborhood"),
        location_municipality=_field(raw, "location_municipality"),
        location_sub_province=_field(raw, "location_sub_province"),
        location_province=_field(raw, "location_province"),
        location_postal_code_1=_field(raw, "location_postal_code_1"),
        location_nation=_field(raw, "location_nation"),
        train_lines=_field(raw, "train_lines"),
        bus_lines=_field(raw, "bus_lines"),
        comments=_field(raw, "comments"),
        virtual_meeting_link=_field(raw, "virtual_meeting_link"),
        virtual_meeting_additional_info=_field(raw, "virtual_meeting_additional_info"),
        phone_meeting_number=_field(raw, "phone_meeting_number"),
        format_bmlt_ids=tuple(_field(raw, "format_bmlt_ids") or ()),
        formats=tuple(parse_format(f) for f in _field(raw, "formats") or []),
        service_body=parse_service_body(embedded_body) if embedded_body else None,
        last_changed=parse_date(_field(raw, "last_changed")),
    )


def parse_change(raw: Mapping[str, Any]) -> ChangeEvent:
    old_raw = _field(raw, "old_meeting")
    new_raw = _field(raw, "new_meeting")
    return ChangeEvent(
        event_type=_field(raw, "event_type") or "",
        old_meeting=parse_meeting(old_raw) if old_raw else None,
        new_meeting=parse_meeting(new_raw) if new_raw else None,
        changed_fields=tuple(_field(raw, "changed_fields") or ()),
    )


def parse_changes(payload: Any) -> List[ChangeEvent]:
    events: Iterable[Dict[str, Any]] = payload.get("events", []) if isinstance(payload, dict) else payload or []
    changes = [parse_change(raw) for raw in events]
    LOGGER.debug("Parsed %d change events", len(changes))
    return changes


def parse_meetings(payload: Iterable[Mapping[str, Any]]) -> List[Meeting]:
    return [parse_meeting(raw) for raw in payload or []]


def parse_service_bodies(payload: Iterable[Mapping[str, Any]]) -> List[ServiceBody]:
    return [parse_service_body(raw) for raw in payload or []]


def parse_root_servers(payload: Iterable[Mapping[str, Any]]) -> List[RootServer]:
    servers = [
        RootServer(
            id=int(_field(raw, "id")),
            name=_field(raw, "name") or "",
            url=_field(raw, "url") or "",
            is_enabled=bool(_field(raw, "is_enabled", True)),
        )
        for raw in payload or []
    ]
    return sorted(servers, key=lambda s: s.sort_name())


def parse_snapshots(root_server_id: int, payload: Iterable[Mapping[str, Any]]) -> List[Snapshot]:
    snapshots: List[Snapshot] = []
    for raw in payload or []:
        snap_date = parse_date(_field(raw, "date"))
        if snap_date is not None:
            snapshots.append(Snapshot(root_server_id, snap_date))
    return sorted(snapshots, key=lambda s: s.date)

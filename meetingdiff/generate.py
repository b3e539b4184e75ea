from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence, TypeVar

import httpx

from .changes import process_changes
from .dates import api_date
from .dijon import DijonClient
from .errors import FetchFailure
from .export_excel import write_workbook
from .extra import extra_meeting_rows
from .ingest import parse_changes, parse_meetings
from .models import (
    STYLE_HEADER,
    GeneratedSheet,
    GenerationOptions,
    RootServer,
    ServiceBody,
    Sheet,
    Snapshot,
    StyledCell,
)
from .rows import spreadsheet_headers

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def fetch_stage(stage: str, call: Callable[[], T]) -> T:
    try:
        return call()
    except httpx.HTTPStatusError as exc:
        LOGGER.warning("Fetching %s failed with status %s", stage, exc.response.status_code)
        raise FetchFailure(stage, exc.response.status_code) from exc
    except httpx.RequestError as exc:
        LOGGER.warning("Fetching %s failed: %s", stage, exc)
        raise FetchFailure(stage, reason=str(exc)) from exc


def spreadsheet_file_name(service_body: Optional[ServiceBody], start: Snapshot, end: Snapshot) -> str:
    code = (service_body.world_id or "") if service_body else "ALL"
    return f"BMLT_{code}_changes_from_{api_date(start.date)}_to_{api_date(end.date)}.xlsx"


def new_sheet(show_original_naws_codes: bool) -> Sheet:
    headers = spreadsheet_headers(show_original_naws_codes)
    styles = [StyledCell(0, col, STYLE_HEADER) for col in range(len(headers))]
    return Sheet(headers=headers, styles=styles)


def generate_spreadsheet(
    client: DijonClient,
    root_server: RootServer,
    service_bodies: Sequence[ServiceBody],
    service_body: Optional[ServiceBody],
    start: Snapshot,
    end: Snapshot,
    options: GenerationOptions = GenerationOptions(),
) -> GeneratedSheet:
    """Build the change sheet between two snapshots.

    Raises a GenerationError subclass when a fetch fails or the change stream
    holds an unknown event type; nothing is returned in that case.
    """
    body_ids = [service_body.bmlt_id] if service_body else None
    raw_changes = fetch_stage(
        "changes",
        lambda: client.list_meeting_changes(
            root_server.id, start.date, end.date, body_ids, options.exclude_world_id_updates
        ),
    )
    rows, touched = process_changes(parse_changes(raw_changes), service_bodies, options.show_original_naws_codes)

    if options.include_extra_meetings:
        raw_meetings = fetch_stage(
            "extra meetings",
            lambda: client.list_snapshot_meetings(root_server.id, end.date, body_ids),
        )
        rows.extend(
            extra_meeting_rows(parse_meetings(raw_meetings), touched, service_bodies, options.show_original_naws_codes)
        )

    sheet = new_sheet(options.show_original_naws_codes)
    for row in rows:
        sheet.append(row)
    return GeneratedSheet(spreadsheet_file_name(service_body, start, end), sheet)


def save_spreadsheet(generated: GeneratedSheet, out_dir: str = ".") -> Path:
    path = Path(out_dir) / generated.file_name
    path.parent.mkdir(parents=True, exist_ok=True)
    write_workbook(str(path), generated.sheet)
    LOGGER.info("Wrote %s (rows=%d)", path, len(generated.sheet.rows))
    return path

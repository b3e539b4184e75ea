from __future__ import annotations

from typing import Optional


class GenerationError(Exception):
    """Terminal failure of a spreadsheet generation request."""


class FetchFailure(GenerationError):
    def __init__(self, stage: str, status: Optional[int] = None, reason: str = "") -> None:
        self.stage = stage
        self.status = status
        if status is not None:
            message = f"Error fetching {stage} - got {status} status"
        else:
            message = f"Error fetching {stage} - {reason or 'request failed'}"
        super().__init__(message)


class UnknownEventType(GenerationError):
    def __init__(self, event_type: object) -> None:
        self.event_type = event_type
        super().__init__(f"internal error in generate_spreadsheet -- unknown event type: {event_type}")


class MalformedEvent(GenerationError):
    def __init__(self, event_type: object, missing: str) -> None:
        self.event_type = event_type
        self.missing = missing
        super().__init__(f"internal error in generate_spreadsheet -- {event_type} event without {missing}")


class UploadError(Exception):
    """The NAWS code workbook could not be used."""

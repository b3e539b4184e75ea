from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, List, Optional, Union

from openpyxl import load_workbook

from .dijon import DijonClient
from .errors import UploadError

LOGGER = logging.getLogger(__name__)


@dataclass
class NawsCodeUpdate:
    bmlt_id: int
    code: str

    def as_payload(self) -> Dict[str, Any]:
        return {"bmlt_id": self.bmlt_id, "code": self.code}


@dataclass
class NawsCodeUpload:
    updates: List[NawsCodeUpdate] = field(default_factory=list)
    skipped: int = 0

    def summary(self) -> str:
        return f"uploaded {len(self.updates)} items; skipped {self.skipped} items"


def _integral(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def read_naws_codes(source: Union[str, BinaryIO]) -> NawsCodeUpload:
    """Collect (bmlt_id, Committee) pairs from a single-sheet workbook.

    Rows need a Committee code and an integral bmlt_id; anything else is counted as skipped.
    """
    wb = load_workbook(source, read_only=True, data_only=True)
    try:
        if len(wb.sheetnames) != 1:
            raise UploadError(
                f"spreadsheet with NAWS codes must contain only one sheet -- found {len(wb.sheetnames)} sheets"
            )
        rows = wb[wb.sheetnames[0]].iter_rows(values_only=True)
        headers = [str(h).strip() if h is not None else "" for h in next(rows, ())]
        result = NawsCodeUpload()
        for values in rows:
            if values is None or all(v is None for v in values):
                continue
            record = dict(zip(headers, values))
            code = record.get("Committee")
            bmlt_id = _integral(record.get("bmlt_id"))
            if code not in (None, "") and bmlt_id is not None:
                result.updates.append(NawsCodeUpdate(bmlt_id, str(code).strip()))
            else:
                result.skipped += 1
    finally:
        wb.close()
    LOGGER.info("Read NAWS codes: %s", result.summary())
    return result


def upload_naws_codes(client: DijonClient, root_server_id: int, upload: NawsCodeUpload) -> Any:
    LOGGER.info("Submitting %d NAWS codes to root server %s", len(upload.updates), root_server_id)
    return client.batch_update_meeting_naws_codes(root_server_id, [u.as_payload() for u in upload.updates])

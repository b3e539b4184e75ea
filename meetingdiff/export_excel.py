from __future__ import annotations

from typing import BinaryIO, Dict, Union

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .dates import parse_excel_date
from .models import STYLE_CHANGED, STYLE_DELETED, STYLE_HEADER, STYLE_NEW, Sheet

SHEET_TITLE = "Changes"
DATE_COLUMNS = {"LastChanged"}
DATE_FORMAT = "mm/dd/yyyy"

CELL_STYLES: Dict[str, Dict[str, object]] = {
    STYLE_HEADER: {"font": Font(bold=True)},
    STYLE_NEW: {"fill": PatternFill(fill_type="solid", fgColor="4D88FF")},
    STYLE_CHANGED: {"fill": PatternFill(fill_type="solid", fgColor="FF002B")},
    STYLE_DELETED: {"font": Font(strike=True)},
}


def _autosize(ws: Worksheet, max_width: int = 60) -> None:
    for i, col in enumerate(ws.columns, start=1):
        max_len = max((len(str(c.value)) for c in col if c.value is not None), default=0)
        ws.column_dimensions[get_column_letter(i)].width = min(max_len + 2, max_width)


def _format(ws: Worksheet, sheet: Sheet) -> None:
    ws.freeze_panes = "A2"
    for idx, header in enumerate(sheet.headers, start=1):
        if header not in DATE_COLUMNS:
            continue
        # an empty cell with a date format upsets Excel, so only typed values get one
        for row in ws.iter_rows(min_row=2, min_col=idx, max_col=idx):
            cell = row[0]
            if isinstance(cell.value, str) and cell.value:
                cell.value = parse_excel_date(cell.value)
                cell.number_format = DATE_FORMAT
    for styled in sheet.styles:
        attrs = CELL_STYLES.get(styled.style)
        if not attrs:
            continue
        cell = ws.cell(row=styled.row + 1, column=styled.col + 1)
        for name, value in attrs.items():
            setattr(cell, name, value)
    _autosize(ws)


def build_workbook(sheet: Sheet) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.append(sheet.headers)
    for row in sheet.rows:
        ws.append(row)
    _format(ws, sheet)
    return wb


def write_workbook(target: Union[str, BinaryIO], sheet: Sheet) -> None:
    build_workbook(sheet).save(target)

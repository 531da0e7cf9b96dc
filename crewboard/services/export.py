"""Excel export of the visible scheduling grid."""
from __future__ import annotations

from io import BytesIO
from typing import List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .render import CellSummary, CompactCell, EmptyCell, HolidayCell
from .session import GridColumn, GridRow

HEADER_FONT = Font(bold=True)
GROUP_FONT = Font(bold=True, italic=True)
CENTER = Alignment(horizontal="center", vertical="center", wrap_text=True)
FILL_WEEKEND = PatternFill("solid", fgColor="F3F4F6")
B_THIN = Border(
    left=Side(style="thin", color="DDDDDD"),
    right=Side(style="thin", color="DDDDDD"),
    top=Side(style="thin", color="DDDDDD"),
    bottom=Side(style="thin", color="DDDDDD"),
)


def _fill(colour: Optional[str]) -> Optional[PatternFill]:
    if not colour:
        return None
    return PatternFill("solid", fgColor=colour.lstrip("#").upper())


def cell_text(summary: CellSummary) -> str:
    if isinstance(summary, HolidayCell):
        return summary.name
    if isinstance(summary, EmptyCell):
        return ""
    if isinstance(summary, CompactCell):
        return summary.label + (" *" if summary.has_notes else "")
    return "\n".join(f"{mini.slot.value}: {'' if mini.is_empty else mini.label}" for mini in summary.slots)


def cell_colour(summary: CellSummary) -> Optional[str]:
    if isinstance(summary, (HolidayCell, CompactCell)):
        return summary.bg
    return None


def write_grid(columns: List[GridColumn], rows: List[GridRow], *, title: str = "Schedule") -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    ws.cell(row=1, column=1, value="Group").font = HEADER_FONT
    ws.cell(row=1, column=2, value="Member").font = HEADER_FONT
    for col_idx, column in enumerate(columns, start=3):
        label = column.date.strftime("%a %d/%m")
        if column.holiday:
            label += f"\n{column.holiday}"
        cell = ws.cell(row=1, column=col_idx, value=label)
        cell.font = HEADER_FONT
        cell.alignment = CENTER
        ws.column_dimensions[get_column_letter(col_idx)].width = 16

    ws.column_dimensions["A"].width = 18
    ws.column_dimensions["B"].width = 22
    for row_idx, row in enumerate(rows, start=2):
        ws.cell(row=row_idx, column=1, value=row.group.name).font = GROUP_FONT
        name = row.member.name + (f" ({row.member.role})" if row.member.role else "")
        ws.cell(row=row_idx, column=2, value=name)
        for col_idx, (column, (_, summary)) in enumerate(zip(columns, row.cells), start=3):
            cell = ws.cell(row=row_idx, column=col_idx, value=cell_text(summary))
            cell.alignment = CENTER
            cell.border = B_THIN
            fill = _fill(cell_colour(summary))
            if fill is not None:
                cell.fill = fill
            elif column.is_weekend:
                cell.fill = FILL_WEEKEND

    ws.freeze_panes = "C2"
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()

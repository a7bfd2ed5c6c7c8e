"""
Spreadsheet projection.

Builds a plain cell grid plus merge regions from the suite and its group runs,
then writes that grid to a single-sheet workbook. The grid carries no styling;
styling is applied only by the workbook writer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence, Union
import logging

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from ..grouping import GroupRun
from ..models import TestSuite

logger = logging.getLogger(__name__)

BANNER_LABEL = "TESTCASE PROJECT - "
HEADERS = [
    "No",
    "TestSenario",
    "TestCase",
    "Pre-Condition",
    "Steps",
    "Data Test",
    "Expected result",
    "Actural Result",
    "Status",
    "Priority",
]
COLUMN_COUNT = len(HEADERS)
GROUP_COLUMN = 1
TITLE_ROW = 0
HEADER_ROW = 1
DATA_START_ROW = 2

SHEET_NAME = "Template"
EXPORT_FILENAME = "TestCases_Updated.xlsx"

COLUMN_WIDTHS = [10, 24, 36, 28, 48, 24, 40, 32, 10, 10]
TITLE_FONT = Font(size=14, bold=True)
HEADER_FILL = PatternFill(start_color="E0E0E0", end_color="E0E0E0", fill_type="solid")
HEADER_FONT = Font(bold=True)
GROUP_FONT = Font(bold=True)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


@dataclass(frozen=True)
class MergeRegion:
    """Rectangular block of cells, 0-based with inclusive bounds."""
    start_row: int
    start_col: int
    end_row: int
    end_col: int

    @property
    def row_span(self) -> int:
        return self.end_row - self.start_row + 1

    def to_range(self) -> str:
        """Excel range string, e.g. 'B3:B5'."""
        return (
            f"{get_column_letter(self.start_col + 1)}{self.start_row + 1}:"
            f"{get_column_letter(self.end_col + 1)}{self.end_row + 1}"
        )


@dataclass
class Grid:
    """Two-dimensional string grid with merge regions."""
    cells: List[List[str]] = field(default_factory=list)
    merges: List[MergeRegion] = field(default_factory=list)

    @property
    def data_rows(self) -> List[List[str]]:
        return self.cells[DATA_START_ROW:]


def project_spreadsheet(suite: Optional[TestSuite], runs: Sequence[GroupRun]) -> Optional[Grid]:
    """
    Project the suite into a grid: title band, header row, one row per case.

    Merges come from ``runs`` exactly as given; grouping is never recomputed
    here. Returns None when there is no suite.
    """
    if suite is None:
        return None

    title_row = [BANNER_LABEL + suite.title.upper()] + [""] * (COLUMN_COUNT - 1)
    cells = [title_row, list(HEADERS)]
    for case in suite.cases:
        cells.append([
            case.id,
            case.scenario_group,
            case.title,
            case.precondition,
            case.steps,
            case.test_data,
            case.expected_result,
            case.actual_result,
            case.status,
            case.priority,
        ])

    merges = [MergeRegion(TITLE_ROW, 0, TITLE_ROW, COLUMN_COUNT - 1)]
    for run in runs:
        if run.length < 2:
            continue
        merges.append(MergeRegion(
            start_row=run.start_index + DATA_START_ROW,
            start_col=GROUP_COLUMN,
            end_row=run.start_index + run.length + DATA_START_ROW - 1,
            end_col=GROUP_COLUMN
        ))

    return Grid(cells=cells, merges=merges)


def write_workbook(grid: Grid, target: Union[str, Path, BinaryIO]) -> None:
    """Write the grid to a single-sheet .xlsx workbook at ``target``."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_NAME

    for r, row in enumerate(grid.cells, 1):
        for c, value in enumerate(row, 1):
            cell = ws.cell(row=r, column=c, value=ILLEGAL_CHARACTERS_RE.sub("", value))
            # grid text is never a formula, even when it starts with "="
            cell.data_type = "s"
            if r - 1 >= DATA_START_ROW:
                cell.border = THIN_BORDER
                cell.alignment = Alignment(vertical="top", wrap_text=True)

    ws.cell(row=TITLE_ROW + 1, column=1).font = TITLE_FONT
    for c in range(1, COLUMN_COUNT + 1):
        cell = ws.cell(row=HEADER_ROW + 1, column=c)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center")

    for region in grid.merges:
        ws.merge_cells(
            start_row=region.start_row + 1,
            start_column=region.start_col + 1,
            end_row=region.end_row + 1,
            end_column=region.end_col + 1
        )
        if region.start_row >= DATA_START_ROW:
            anchor = ws.cell(row=region.start_row + 1, column=region.start_col + 1)
            anchor.font = GROUP_FONT
            anchor.alignment = Alignment(vertical="center", wrap_text=True)

    for col, width in enumerate(COLUMN_WIDTHS, 1):
        ws.column_dimensions[get_column_letter(col)].width = width

    wb.save(target)
    logger.info(f"Wrote workbook with {len(grid.data_rows)} case rows and {len(grid.merges)} merges")

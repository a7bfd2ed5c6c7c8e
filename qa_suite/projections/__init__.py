"""
Read-only projections of the canonical suite.

1. Spreadsheet - grouped cell grid with merge regions, written as .xlsx
2. Script - Playwright spec module plus a static package.json manifest

The raw JSON projection is TestSuite.to_json().
"""

from .spreadsheet import Grid, MergeRegion, project_spreadsheet, write_workbook
from .script import generate_script, generate_manifest

__all__ = [
    "Grid",
    "MergeRegion",
    "project_spreadsheet",
    "write_workbook",
    "generate_script",
    "generate_manifest"
]

"""
Canonical model holder.

A SuiteSession owns the single current TestSuite. Projections are derived from
it on demand; generation and report import replace it wholesale, and only once
they have fully succeeded. With no suite installed, every export and import is
a silent no-op that returns None.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Mapping, Optional, Union
import logging

from .generator import SuiteGenerator
from .grouping import GroupRun, compute_runs, find_split_groups
from .models import TestSuite
from .projections.script import (
    MANIFEST_FILENAME,
    SCRIPT_FILENAME,
    generate_manifest,
    generate_script,
)
from .projections.spreadsheet import (
    EXPORT_FILENAME,
    Grid,
    project_spreadsheet,
    write_workbook,
)
from .reconcile import ReconcileResult, reconcile

logger = logging.getLogger(__name__)


class SuiteSession:
    """Single-session owner of the canonical test suite."""

    def __init__(self, suite: Optional[TestSuite] = None):
        self._suite: Optional[TestSuite] = None
        if suite is not None:
            self.replace(suite)

    @property
    def suite(self) -> Optional[TestSuite]:
        return self._suite

    @property
    def has_suite(self) -> bool:
        return self._suite is not None

    def replace(self, suite: TestSuite) -> Optional[TestSuite]:
        """Install ``suite`` as the canonical model and return the previous one."""
        previous = self._suite
        self._suite = suite

        for key, starts in find_split_groups(compute_runs(suite.cases)).items():
            logger.warning(
                f"Scenario group {key!r} is split into {len(starts)} separate runs "
                f"(starting at rows {', '.join(str(s) for s in starts)})"
            )
        logger.info(f"Installed suite {suite.title!r} with {len(suite.cases)} cases")
        return previous

    def clear(self) -> Optional[TestSuite]:
        """Drop the current suite and return it."""
        previous = self._suite
        self._suite = None
        return previous

    # ==================== Producers ====================

    def generate(self, url: str, generator: SuiteGenerator) -> Optional[TestSuite]:
        """
        Generate a new suite and install it, returning the previous suite.

        If generation fails the current suite is kept and the error propagates.
        """
        suite = generator.generate(url)
        return self.replace(suite)

    def load_json(self, text: Union[str, bytes]) -> Optional[TestSuite]:
        """Install a suite from its raw JSON export; returns the previous suite."""
        return self.replace(TestSuite.model_validate_json(text))

    def load(self, path: Path) -> Optional[TestSuite]:
        return self.load_json(Path(path).read_text(encoding='utf-8'))

    # ==================== Projections ====================

    def runs(self) -> List[GroupRun]:
        if self._suite is None:
            return []
        return compute_runs(self._suite.cases)

    def spreadsheet(self) -> Optional[Grid]:
        if self._suite is None:
            return None
        return project_spreadsheet(self._suite, self.runs())

    def script(self) -> Optional[str]:
        return generate_script(self._suite)

    def manifest(self) -> Optional[str]:
        if self._suite is None:
            return None
        return generate_manifest()

    def export_json(self) -> Optional[str]:
        if self._suite is None:
            logger.debug("No active suite; nothing to export")
            return None
        return self._suite.to_json()

    def export_spreadsheet(
        self,
        target: Union[str, Path, BinaryIO, None] = None
    ) -> Optional[Union[str, Path, BinaryIO]]:
        """Write the spreadsheet projection; defaults to EXPORT_FILENAME in the cwd."""
        grid = self.spreadsheet()
        if grid is None:
            logger.debug("No active suite; nothing to export")
            return None
        target = target if target is not None else Path.cwd() / EXPORT_FILENAME
        write_workbook(grid, target)
        return target

    def export_script_bundle(self, directory: Path) -> Optional[Dict[str, Path]]:
        """Write the spec module and its manifest into ``directory``."""
        script = self.script()
        if script is None:
            logger.debug("No active suite; nothing to export")
            return None

        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        paths = {
            "script": directory / SCRIPT_FILENAME,
            "manifest": directory / MANIFEST_FILENAME,
        }
        paths["script"].write_text(script, encoding='utf-8')
        paths["manifest"].write_text(generate_manifest() + "\n", encoding='utf-8')
        logger.info(f"Wrote Playwright bundle to {directory}")
        return paths

    # ==================== Reconciliation ====================

    def import_report(
        self,
        report: Union[str, bytes, Mapping[str, Any]]
    ) -> Optional[ReconcileResult]:
        """
        Merge an execution report into the current suite.

        The suite is replaced only after the whole report has been read and
        merged; on ReportImportError it is left exactly as it was.
        """
        if self._suite is None:
            logger.debug("No active suite; ignoring execution report")
            return None
        result = reconcile(self._suite, report)
        self._suite = result.suite
        return result

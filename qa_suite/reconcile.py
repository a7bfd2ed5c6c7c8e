"""
Result reconciliation.

Reads a Playwright JSON report, extracts one outcome per identified spec and
merges the outcomes back onto the suite by case id. Extraction either succeeds
for the whole report or raises ReportImportError; merging never mutates the
suite it is given.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Union
import json
import logging
import re

from pydantic import BaseModel, Field

from .exceptions import ReportImportError
from .models import TestSuite
from .projections.script import CASE_ID_ANNOTATION

logger = logging.getLogger(__name__)

BRACKET_ID_PATTERN = re.compile(r"^\[(.*?)\]")

PASSED_STATUS = "passed"
PASS_MESSAGE = "Đạt (Playwright)"
FAIL_MESSAGE = "Thất bại"
ERROR_SEPARATOR = " | Lỗi: "
UNKNOWN_ERROR = "Unknown error"
MAX_ERROR_LENGTH = 200


class ExecutionOutcome(BaseModel):
    """Result of one executed spec, keyed by case id."""
    id: str
    status: Literal["Pass", "Fail"]
    message: str = Field(..., description="Text written to the case's actual result")


@dataclass
class ReconcileResult:
    """Outcome of importing one report into a suite."""
    suite: TestSuite
    outcomes: Dict[str, ExecutionOutcome] = field(default_factory=dict)
    matched_ids: List[str] = field(default_factory=list)
    unmatched_ids: List[str] = field(default_factory=list)


def parse_report(report: Union[str, bytes, Mapping[str, Any]]) -> Dict[str, Any]:
    """Decode a report payload into its root node."""
    if isinstance(report, (str, bytes)):
        try:
            report = json.loads(report)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ReportImportError(f"not valid JSON ({e})")
    if not isinstance(report, Mapping):
        raise ReportImportError(f"root must be an object, got {type(report).__name__}")
    return dict(report)


def parse_case_id(title: str) -> Optional[str]:
    """Return the id from a ``[<id>] ...`` title, or None."""
    match = BRACKET_ID_PATTERN.match(title)
    return match.group(1) if match else None


def extract_outcomes(report: Union[str, bytes, Mapping[str, Any]]) -> Dict[str, ExecutionOutcome]:
    """
    Walk the report tree and map case id to execution outcome.

    Specs at a node are read before its child suites. A later outcome for an
    id already seen replaces the earlier one.

    Raises:
        ReportImportError: If the report is not shaped like a Playwright JSON report
    """
    root = parse_report(report)
    outcomes: Dict[str, ExecutionOutcome] = {}
    _walk_suite(root, outcomes, "$")
    logger.info(f"Extracted {len(outcomes)} outcomes from execution report")
    return outcomes


def _walk_suite(node: Any, outcomes: Dict[str, ExecutionOutcome], path: str) -> None:
    if not isinstance(node, Mapping):
        raise ReportImportError("suite entry must be an object", path)

    for i, spec in enumerate(_node_list(node, "specs", path)):
        spec_path = f"{path}.specs[{i}]"
        if not isinstance(spec, Mapping):
            raise ReportImportError("spec entry must be an object", spec_path)
        outcome = _spec_outcome(spec, spec_path)
        if outcome is not None:
            outcomes[outcome.id] = outcome

    for i, child in enumerate(_node_list(node, "suites", path)):
        _walk_suite(child, outcomes, f"{path}.suites[{i}]")


def _node_list(node: Mapping[str, Any], key: str, path: str) -> List[Any]:
    value = node.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ReportImportError(f"'{key}' must be a list", path)
    return value


def _spec_outcome(spec: Mapping[str, Any], path: str) -> Optional[ExecutionOutcome]:
    title = spec.get("title")
    if not isinstance(title, str):
        raise ReportImportError("spec title must be a string", path)

    case_id = parse_case_id(title)
    if not case_id:
        logger.debug(f"Skipping spec without case id: {title!r}")
        return None

    first_test = _first(spec.get("tests"))
    annotated = _annotated_case_id(first_test)
    if annotated is not None and annotated != case_id:
        logger.warning(
            f"Spec {title!r} is annotated as {annotated} but titled {case_id}; using {case_id}"
        )

    result = _first(first_test.get("results")) if first_test is not None else None
    if result is None:
        logger.debug(f"Skipping spec {case_id}: no recorded result")
        return None

    if result.get("status") == PASSED_STATUS:
        status, message = "Pass", PASS_MESSAGE
    else:
        status, message = "Fail", FAIL_MESSAGE

    error = result.get("error")
    if error is not None:
        message += ERROR_SEPARATOR + _error_summary(error)

    return ExecutionOutcome(id=case_id, status=status, message=message)


def _first(value: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(value, list) and value and isinstance(value[0], Mapping):
        return value[0]
    return None


def _annotated_case_id(test: Optional[Mapping[str, Any]]) -> Optional[str]:
    if test is None:
        return None
    annotations = test.get("annotations")
    if not isinstance(annotations, list):
        return None
    for annotation in annotations:
        if isinstance(annotation, Mapping) and annotation.get("type") == CASE_ID_ANNOTATION:
            description = annotation.get("description")
            if isinstance(description, str) and description:
                return description
    return None


def _error_summary(error: Any) -> str:
    text = error.get("message") if isinstance(error, Mapping) else None
    if not isinstance(text, str) or not text:
        return UNKNOWN_ERROR
    first_line = text.split("\n")[0]
    if not first_line:
        return UNKNOWN_ERROR
    return first_line[:MAX_ERROR_LENGTH]


def merge(suite: TestSuite, outcomes: Mapping[str, ExecutionOutcome]) -> TestSuite:
    """
    Return a copy of ``suite`` with matched cases updated from ``outcomes``.

    Matched cases get the outcome's status and message; every other case is
    carried over unchanged. The copy shares no case objects with ``suite``.
    Outcomes for unknown ids are ignored.
    """
    cases = []
    for case in suite.cases:
        outcome = outcomes.get(case.id)
        if outcome is None:
            cases.append(case.model_copy(deep=True))
        else:
            cases.append(case.model_copy(deep=True, update={
                "status": outcome.status,
                "actual_result": outcome.message
            }))
    return suite.model_copy(deep=True, update={"cases": cases})


def reconcile(
    suite: TestSuite,
    report: Union[str, bytes, Mapping[str, Any]]
) -> ReconcileResult:
    """Extract outcomes from ``report`` and merge them into ``suite``."""
    outcomes = extract_outcomes(report)
    merged = merge(suite, outcomes)

    known_ids = set(suite.case_ids())
    matched = [case_id for case_id in suite.case_ids() if case_id in outcomes]
    unmatched = sorted(case_id for case_id in outcomes if case_id not in known_ids)
    if unmatched:
        logger.warning(f"Report contains results for unknown cases: {', '.join(unmatched)}")
    logger.info(f"Reconciled {len(matched)} of {len(suite.cases)} cases")

    return ReconcileResult(
        suite=merged,
        outcomes=outcomes,
        matched_ids=matched,
        unmatched_ids=unmatched
    )

"""
Playwright script projection.

Emits one test block per automated case. Each block is named
``[<id>] <title>``; the reconciler relies on that prefix to map report entries
back onto cases, so the naming must not change. The id is also attached as a
``case-id`` annotation so reports carry it as structured metadata.
"""

from __future__ import annotations
from typing import List, Optional
import json

from ..models import TestCase, TestSuite

SCRIPT_FILENAME = "e2e.spec.ts"
MANIFEST_FILENAME = "package.json"
CASE_ID_ANNOTATION = "case-id"

INDENT = "    "

MANIFEST = {
    "name": "qa-automation-suite",
    "version": "1.0.0",
    "scripts": {
        "test": "playwright test",
        "report": "playwright show-report"
    },
    "devDependencies": {
        "@playwright/test": "^1.42.0",
        "@types/node": "^20.11.0"
    }
}


def escape_single_quoted(text: str) -> str:
    """Escape text for use inside a single-quoted TypeScript string."""
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def block_name(case: TestCase) -> str:
    """Declared test name: bracketed id prefix followed by the escaped title."""
    return f"[{case.id}] {escape_single_quoted(case.title)}"


def count_automated_cases(suite: TestSuite) -> int:
    return sum(1 for case in suite.cases if case.is_automated)


def generate_script(suite: Optional[TestSuite]) -> Optional[str]:
    """
    Generate the source of the Playwright spec module for ``suite``.

    Cases without automation, or with kind NONE, produce no block.
    """
    if suite is None:
        return None

    lines = [
        "import { test, expect } from '@playwright/test';",
        "",
        f"const BASE_URL = '{escape_single_quoted(suite.base_url)}';",
        "",
        f"test.describe('{escape_single_quoted(suite.title)}', () => {{",
        "",
        "  test.beforeEach(async ({ page }) => {",
        "    await page.goto(BASE_URL);",
        "  });",
        "",
    ]

    for case in suite.cases:
        if case.is_automated:
            lines.extend(_render_block(case))
            lines.append("")

    lines.append("});")
    return "\n".join(lines) + "\n"


def _render_block(case: TestCase) -> List[str]:
    automation = case.automation
    details = f"{{ annotation: {{ type: '{CASE_ID_ANNOTATION}', description: '{case.id}' }} }}"
    lines = [f"  test('{block_name(case)}', {details}, async ({{ page, request }}) => {{"]

    for step in case.step_lines():
        lines.append(f"{INDENT}// {step}")

    expected = case.expected_result.split("\n") if case.expected_result else [""]
    lines.append(f"{INDENT}// Expected: {expected[0]}")
    for extra in expected[1:]:
        lines.append(f"{INDENT}// {extra}")

    if automation.kind == "HTTP_SMOKE":
        method = automation.effective_method().lower()
        path = automation.url_path or ""
        lines.append(f"{INDENT}const response = await request.{method}(`${{BASE_URL}}{path}`);")
        lines.append(f"{INDENT}expect(response.status()).toBe(200);")
    elif automation.notes:
        lines.append(f"{INDENT}// Implementation Code:")
        lines.append(f"{INDENT}{automation.notes}")
    else:
        lines.append(f"{INDENT}// Manual implementation required")

    lines.append("  });")
    return lines


def generate_manifest() -> str:
    """Static package.json for running the generated spec; independent of any suite."""
    return json.dumps(MANIFEST, indent=2)

"""Test the Playwright script and manifest projections."""

import json
import re

from qa_suite.models import TestSuite
from qa_suite.projections.script import (
    MANIFEST,
    block_name,
    count_automated_cases,
    escape_single_quoted,
    generate_manifest,
    generate_script,
)

BLOCK_PATTERN = re.compile(r"^  test\('(.*?)', ", re.MULTILINE)


def _block_names(script):
    return BLOCK_PATTERN.findall(script)


def _block(script, case_id):
    """Return the source lines of the block declared for ``case_id``."""
    lines = script.split("\n")
    start = next(i for i, line in enumerate(lines) if line.startswith(f"  test('[{case_id}]"))
    end = next(i for i in range(start, len(lines)) if lines[i] == "  });")
    return lines[start:end + 1]


class TestGenerateScript:
    """Test script generation."""

    def test_missing_suite_is_a_no_op(self):
        assert generate_script(None) is None

    def test_one_block_per_automated_case(self, automated_suite):
        script = generate_script(automated_suite)

        names = _block_names(script)
        assert len(names) == count_automated_cases(automated_suite) == 4
        assert [name.split("]")[0] + "]" for name in names] == [
            "[HM_01]", "[HM_02]", "[LG_01]", "[LG_02]"
        ]

    def test_manual_cases_have_no_block(self, automated_suite):
        script = generate_script(automated_suite)

        assert "[PF_01]" not in script
        assert "[ER_01]" not in script

    def test_header_and_footer(self, automated_suite):
        script = generate_script(automated_suite)

        assert script.startswith("import { test, expect } from '@playwright/test';\n")
        assert "const BASE_URL = 'https://example.com';" in script
        assert "test.describe('Movie streaming', () => {" in script
        assert "    await page.goto(BASE_URL);" in script
        assert script.endswith("});\n")

    def test_http_smoke_block(self, automated_suite):
        """A smoke check requests the path and expects HTTP 200."""
        block = _block(generate_script(automated_suite), "HM_01")

        assert "    const response = await request.get(`${BASE_URL}/`);" in block
        assert "    expect(response.status()).toBe(200);" in block

    def test_http_smoke_defaults_to_get(self, automated_suite):
        block = _block(generate_script(automated_suite), "HM_02")

        assert "    const response = await request.get(`${BASE_URL}/home`);" in block

    def test_http_smoke_uses_declared_method(self, case_factory):
        suite = TestSuite(
            title="T",
            base_url="https://example.com",
            cases=[case_factory(
                "CT_01", "Liên hệ",
                automation={"kind": "HTTP_SMOKE", "method": "POST", "url_path": "/contact"}
            )]
        )

        block = _block(generate_script(suite), "CT_01")

        assert "    const response = await request.post(`${BASE_URL}/contact`);" in block

    def test_ui_block_with_notes(self, automated_suite):
        """Notes are emitted verbatim after the implementation marker."""
        block = _block(generate_script(automated_suite), "LG_01")

        assert block[0].startswith("  test('[LG_01] User\\'s login works', ")
        assert block[1:4] == [
            "    // Open login",
            "    // Fill credentials",
            "    // Submit",
        ]
        assert "    // Expected: Page is shown" in block
        assert "    // Implementation Code:" in block
        assert "    await page.fill('#email', 'a@b.c');" in block
        assert "expect(response" not in "\n".join(block)

    def test_ui_block_without_notes_has_placeholder(self, automated_suite):
        block = _block(generate_script(automated_suite), "LG_02")

        assert "    // Manual implementation required" in block
        assert "    // Implementation Code:" not in block

    def test_blocks_carry_case_id_annotation(self, automated_suite):
        block = _block(generate_script(automated_suite), "HM_01")

        assert "{ annotation: { type: 'case-id', description: 'HM_01' } }" in block[0]

    def test_multiline_expected_result(self, case_factory):
        suite = TestSuite(
            title="T",
            base_url="https://example.com",
            cases=[case_factory(
                "HM_01", "Trang chủ",
                expected_result="Status 200\nBanner visible",
                automation={"kind": "UI_E2E"}
            )]
        )

        block = _block(generate_script(suite), "HM_01")

        assert "    // Expected: Status 200" in block
        assert "    // Banner visible" in block

    def test_suite_without_automation_has_no_blocks(self, scenario_suite):
        script = generate_script(scenario_suite)

        assert _block_names(script) == []
        assert "test.describe(" in script

    def test_smoke_scenario(self, case_factory):
        """A single GET smoke case against the site root."""
        suite = TestSuite(
            title="Smoke",
            base_url="https://example.com",
            cases=[case_factory(
                "HM_01", "Trang chủ", title="Home responds",
                automation={"kind": "HTTP_SMOKE", "method": "GET", "url_path": "/"}
            )]
        )

        script = generate_script(suite)

        assert "const BASE_URL = 'https://example.com';" in script
        assert "request.get(`${BASE_URL}/`)" in script
        assert "toBe(200)" in script
        assert _block_names(script) == ["[HM_01] Home responds"]


class TestNaming:
    """Test block names and string escaping."""

    def test_escape_single_quoted(self):
        assert escape_single_quoted("it's") == "it\\'s"
        assert escape_single_quoted("a\\b") == "a\\\\b"
        assert escape_single_quoted("plain") == "plain"
        assert escape_single_quoted("line one\nline two\r") == "line one\\nline two\\r"

    def test_multiline_title_stays_on_one_line(self, case_factory):
        """A title with a line break still yields a closed single-line string literal."""
        suite = TestSuite(
            title="Shop\nfront",
            base_url="https://example.com",
            cases=[case_factory("HM_01", "Trang chủ", title="Home\nloads", automation={"kind": "UI_E2E"})]
        )

        script = generate_script(suite)

        assert "test.describe('Shop\\nfront', () => {" in script
        assert _block_names(script) == ["[HM_01] Home\\nloads"]

    def test_block_name_prefix(self, case_factory):
        case = case_factory("RG_01", "G", title="Register")
        assert block_name(case) == "[RG_01] Register"

    def test_escaped_title_in_suite_name(self, case_factory):
        suite = TestSuite(title="Bob's shop", base_url="https://example.com")

        script = generate_script(suite)

        assert "test.describe('Bob\\'s shop', () => {" in script


class TestGenerateManifest:
    """Test the package manifest."""

    def test_manifest_is_static_json(self):
        first = generate_manifest()
        assert first == generate_manifest()
        assert json.loads(first) == MANIFEST

    def test_manifest_declares_playwright(self):
        manifest = json.loads(generate_manifest())

        assert manifest["scripts"]["test"] == "playwright test"
        assert "@playwright/test" in manifest["devDependencies"]

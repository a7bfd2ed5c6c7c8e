"""
Suite generation (LLM-based).

Builds the generation prompt for a target website, sends it to the runtime in a
single request and validates the answer as a TestSuite. Any failure is final
for that attempt.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
import logging

from .exceptions import LLMRuntimeError
from .grouping import compute_runs
from .models import TestSuite
from .runtime import LLMRuntime
from .validation import parse_suite_response

logger = logging.getLogger(__name__)

# (module page, id prefix), in the order modules should appear in the suite
DEFAULT_MODULES: List[Tuple[str, str]] = [
    ("Trang Đăng ký (Register)", "RG"),
    ("Trang Đăng nhập (Login)", "LG"),
    ("Trang chủ (Home)", "HM"),
    ("Trang Danh sách phim / Phân loại (Category)", "CT"),
    ("Trang Tìm kiếm (Search)", "SE"),
    ("Trang Chi tiết phim (Movie Detail)", "DT"),
    ("Trang Xem phim (Player)", "PL"),
    ("Trang Tài khoản / Hồ sơ (Profile)", "PF"),
    ("Trang 404 / Lỗi", "ER"),
]

CASE_ORDER = ["Happy Path", "Validation", "Negative / Edge cases", "Security"]


class SuiteGenerator:
    """
    Generate a complete test suite for a website using an LLM.

    The prompt fixes the module list, the id prefixes and the response
    schema; the response must validate as a TestSuite or generation fails.
    """

    def __init__(
        self,
        runtime: LLMRuntime,
        modules: Optional[Sequence[Tuple[str, str]]] = None,
        language: str = "Vietnamese",
        temperature: float = 0.2,
        max_tokens: int = 8192
    ):
        self.runtime = runtime
        self.modules = list(modules or DEFAULT_MODULES)
        self.language = language
        self.temperature = temperature
        self.max_tokens = max_tokens

    def generate(self, url: str) -> TestSuite:
        """
        Generate a suite for ``url``.

        Raises:
            ValueError: If no URL is given
            LLMRuntimeError: If the service fails or returns an empty response
            SchemaViolationError: If the response is not a valid suite
        """
        url = url.strip()
        if not url:
            raise ValueError("Target URL is required")

        logger.info(f"Generating test suite for {url}")
        prompt = self.build_prompt(url)

        response = self.runtime.generate(
            prompt,
            temperature=self.temperature,
            max_tokens=self.max_tokens
        )
        if not response or not response.strip():
            raise LLMRuntimeError("No response received from the generation service")

        suite = parse_suite_response(response)
        logger.info(
            f"Generated {len(suite.cases)} test cases in "
            f"{len(compute_runs(suite.cases))} scenario groups"
        )
        return suite

    def build_prompt(self, url: str) -> str:
        """Build the full generation prompt for a target URL."""

        modules_str = "\n".join(
            f"{i}. {name} -> Prefix: {prefix}_xx"
            for i, (name, prefix) in enumerate(self.modules, 1)
        )
        order_str = "\n".join(f"{i}. {step}" for i, step in enumerate(CASE_ORDER, 1))
        first_name, first_prefix = self.modules[0] if self.modules else ("Module", "MD")

        return f"""Your task is to analyze a website URL and generate a comprehensive test suite.

STRICT REQUIREMENT: GROUPING & NUMBERING
You must group test cases by the following modules (if the page exists).
For each module, use the specific ID prefix and keep the 'scenarioGroup' field
identical for all cases in the group. Cases of one module must be adjacent.

Modules & Prefixes:
{modules_str}

Sort order within each module:
{order_str}

Language:
All content values MUST BE IN {self.language.upper()}.

Automation:
Use 'HTTP_SMOKE' for simple page loads/html checks.
Use 'UI_E2E' for complex interactions (login, search, player controls).
Use 'NONE' for cases that cannot be automated.

Target Website: {url}

Return ONLY valid JSON matching this exact structure (no markdown, no explanations):
{{
  "title": "string (in {self.language})",
  "baseUrl": "{url}",
  "assumptions": ["string (in {self.language})"],
  "cases": [
    {{
      "id": "{first_prefix}_01 (prefix depends on module)",
      "scenarioGroup": "{first_name} (MUST BE SAME FOR ALL CASES IN MODULE)",
      "title": "string",
      "precondition": "string",
      "steps": "string (one step per line)",
      "testData": "string",
      "expectedResult": "string",
      "actualResult": "",
      "status": "N/A",
      "priority": "High|Medium|Low",
      "automation": {{
        "kind": "HTTP_SMOKE|UI_E2E|NONE",
        "method": "GET|POST|NONE",
        "url_path": "string (path relative to baseUrl)",
        "notes": "string (Playwright code snippet)"
      }}
    }}
  ]
}}"""


def generate_suite(url: str, runtime: LLMRuntime) -> TestSuite:
    """Convenience function to generate a suite."""
    return SuiteGenerator(runtime).generate(url)

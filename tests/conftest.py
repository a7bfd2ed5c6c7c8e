"""Pytest configuration and fixtures for QA suite tests."""

import json
import pytest
from typing import Any, Dict, Optional

from qa_suite.models import AutomationConfig, TestCase, TestSuite
from qa_suite.runtime import MockLLMRuntime


def make_case(
    case_id: str,
    group: str,
    title: Optional[str] = None,
    automation: Optional[Dict[str, Any]] = None,
    **fields
) -> TestCase:
    """Build a test case with sensible defaults for the fields a test doesn't care about."""
    return TestCase(
        id=case_id,
        scenario_group=group,
        title=title or f"Case {case_id}",
        precondition=fields.pop("precondition", ""),
        steps=fields.pop("steps", "Open the page"),
        test_data=fields.pop("test_data", ""),
        expected_result=fields.pop("expected_result", "Page is shown"),
        priority=fields.pop("priority", "Medium"),
        automation=AutomationConfig(**automation) if automation else None,
        **fields
    )


@pytest.fixture
def case_factory():
    return make_case


@pytest.fixture
def scenario_suite():
    """Two register cases followed by one login case."""
    return TestSuite(
        title="Movie streaming",
        base_url="https://example.com",
        assumptions=["Site is reachable"],
        cases=[
            make_case("RG_01", "Đăng ký", title="Register success"),
            make_case("RG_02", "Đăng ký", title="Register with empty email"),
            make_case("LG_01", "Đăng nhập", title="Login success"),
        ]
    )


@pytest.fixture
def automated_suite():
    """One case of every automation flavour."""
    return TestSuite(
        title="Movie streaming",
        base_url="https://example.com",
        cases=[
            make_case(
                "HM_01", "Trang chủ", title="Home page loads",
                automation={"kind": "HTTP_SMOKE", "method": "GET", "url_path": "/"}
            ),
            make_case(
                "HM_02", "Trang chủ", title="Home page via default method",
                automation={"kind": "HTTP_SMOKE", "url_path": "/home"}
            ),
            make_case(
                "LG_01", "Đăng nhập", title="User's login works",
                steps="Open login\nFill credentials\nSubmit",
                automation={
                    "kind": "UI_E2E",
                    "notes": "await page.fill('#email', 'a@b.c');"
                }
            ),
            make_case(
                "LG_02", "Đăng nhập", title="Login without snippet",
                automation={"kind": "UI_E2E"}
            ),
            make_case(
                "PF_01", "Hồ sơ", title="Manual profile check",
                automation={"kind": "NONE"}
            ),
            make_case("ER_01", "Lỗi", title="No automation block"),
        ]
    )


@pytest.fixture
def suite_payload() -> Dict[str, Any]:
    """A generation response as the service is asked to return it."""
    return {
        "title": "Dự án phim",
        "baseUrl": "https://movie-streaming-demo.vercel.app",
        "assumptions": ["Trang web có trang đăng ký"],
        "cases": [
            {
                "id": "RG_01",
                "scenarioGroup": "Trang Đăng ký",
                "title": "Đăng ký thành công",
                "precondition": "Chưa có tài khoản",
                "steps": "Mở trang đăng ký\nNhập thông tin hợp lệ\nBấm Đăng ký",
                "testData": "email: a@b.c",
                "expectedResult": "Tạo tài khoản thành công",
                "actualResult": "",
                "status": "N/A",
                "priority": "High",
                "automation": {
                    "kind": "UI_E2E",
                    "method": "NONE",
                    "url_path": "/register",
                    "notes": "await page.goto(BASE_URL + '/register');"
                }
            },
            {
                "id": "HM_01",
                "scenarioGroup": "Trang chủ",
                "title": "Trang chủ tải được",
                "precondition": "",
                "steps": "Mở trang chủ",
                "testData": "",
                "expectedResult": "HTTP 200",
                "actualResult": "",
                "status": "N/A",
                "priority": "Medium",
                "automation": {"kind": "HTTP_SMOKE", "method": "GET", "url_path": "/"}
            }
        ]
    }


@pytest.fixture
def mock_runtime(suite_payload):
    """Mock runtime that answers the generation prompt with a valid suite."""
    return MockLLMRuntime({"Target Website": json.dumps(suite_payload, ensure_ascii=False)})


def make_spec(title: str, status: Optional[str] = "passed", error: Optional[Dict[str, Any]] = None,
              annotations: Optional[list] = None) -> Dict[str, Any]:
    """Build a Playwright JSON reporter spec entry."""
    test: Dict[str, Any] = {"results": []}
    if status is not None:
        result: Dict[str, Any] = {"status": status}
        if error is not None:
            result["error"] = error
        test["results"].append(result)
    if annotations is not None:
        test["annotations"] = annotations
    return {"title": title, "tests": [test]}


@pytest.fixture
def spec_factory():
    return make_spec


@pytest.fixture
def playwright_report():
    """Nested report in the shape written by `playwright test --reporter=json`."""
    return {
        "config": {},
        "suites": [
            {
                "title": "e2e.spec.ts",
                "specs": [],
                "suites": [
                    {
                        "title": "Movie streaming",
                        "specs": [
                            make_spec("[RG_01] Register success"),
                            make_spec(
                                "[RG_02] Register with empty email",
                                status="failed",
                                error={"message": "Error: expect(received).toBe(expected)\n\nExpected: 200"}
                            ),
                        ]
                    }
                ]
            }
        ],
        "errors": [],
        "stats": {}
    }

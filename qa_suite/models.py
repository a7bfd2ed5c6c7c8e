"""
Data models and schemas for the QA suite toolkit.

The TestSuite is the canonical model every projection is derived from. Field
names on the wire are camelCase; the legacy column-style names produced by
earlier versions of the generator prompt are still accepted on input.
"""

from __future__ import annotations
import re
from typing import List, Optional, Literal, Any, Dict
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


CASE_ID_PATTERN = re.compile(r"^[A-Z]{2}_\d{2,}$")

Status = Literal["Pass", "Fail", "N/A", "Block"]
Priority = Literal["High", "Medium", "Low"]
AutomationKind = Literal["HTTP_SMOKE", "UI_E2E", "NONE"]
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "NONE"]

AUTOMATED_KINDS = ("HTTP_SMOKE", "UI_E2E")


# ==================== Automation ====================

class Assertion(BaseModel):
    """Structured assertion attached to an automation block."""
    kind: str = Field(..., description="What is checked (status, body_contains, header, ...)")
    op: str = Field(..., description="Comparison operator")
    value: Any = Field(None, description="Expected value")


class AutomationConfig(BaseModel):
    """How a test case can be automated."""
    model_config = ConfigDict(populate_by_name=True)

    kind: AutomationKind = Field(
        "NONE",
        validation_alias=AliasChoices("kind", "type"),
        serialization_alias="kind",
        description="Automation template to use",
    )
    method: Optional[HttpMethod] = Field(None, description="HTTP method for HTTP_SMOKE probes")
    url_path: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("url_path", "urlPath"),
        serialization_alias="url_path",
        description="Path appended to the suite base URL",
    )
    notes: Optional[str] = Field(None, description="Implementation notes or a Playwright snippet")
    assertions: Optional[List[Assertion]] = Field(None, description="Structured assertions")

    @field_validator('kind', 'method', mode='before')
    @classmethod
    def normalize_upper(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def effective_method(self) -> str:
        """HTTP method to use for a smoke probe; GET when none is given."""
        if not self.method or self.method == "NONE":
            return "GET"
        return self.method

    @property
    def is_automated(self) -> bool:
        return self.kind in AUTOMATED_KINDS


# ==================== Suite ====================

class TestCase(BaseModel):
    """One row of the suite."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(
        ...,
        validation_alias=AliasChoices("id", "No"),
        serialization_alias="id",
        description="Stable case code like RG_01",
    )
    scenario_group: str = Field(
        ...,
        validation_alias=AliasChoices("scenarioGroup", "scenario_group", "TestSenario"),
        serialization_alias="scenarioGroup",
        description="Scenario label; equal adjacent labels form one group",
    )
    title: str = Field(
        ...,
        validation_alias=AliasChoices("title", "TestCase"),
        serialization_alias="title",
    )
    precondition: str = Field(
        "",
        validation_alias=AliasChoices("precondition", "Pre-Condition"),
        serialization_alias="precondition",
    )
    steps: str = Field(
        "",
        validation_alias=AliasChoices("steps", "Steps"),
        serialization_alias="steps",
        description="Newline-delimited instructions",
    )
    test_data: str = Field(
        "",
        validation_alias=AliasChoices("testData", "test_data", "Data Test"),
        serialization_alias="testData",
    )
    expected_result: str = Field(
        "",
        validation_alias=AliasChoices("expectedResult", "expected_result", "Expected result"),
        serialization_alias="expectedResult",
    )
    actual_result: str = Field(
        "",
        validation_alias=AliasChoices("actualResult", "actual_result", "Actural Result"),
        serialization_alias="actualResult",
    )
    status: Status = Field(
        "N/A",
        validation_alias=AliasChoices("status", "Status"),
        serialization_alias="status",
    )
    priority: Priority = Field(
        ...,
        validation_alias=AliasChoices("priority", "Priority"),
        serialization_alias="priority",
    )
    automation: Optional[AutomationConfig] = None

    @field_validator('id')
    @classmethod
    def validate_case_id(cls, v):
        if not CASE_ID_PATTERN.match(v):
            raise ValueError("Case ID must be in format 'XX_NN' (e.g., RG_01)")
        return v

    @field_validator('steps', mode='before')
    @classmethod
    def join_step_list(cls, v):
        if isinstance(v, list):
            return "\n".join(str(step) for step in v)
        return v

    def step_lines(self) -> List[str]:
        """Steps split into their individual instructions."""
        return self.steps.split("\n") if self.steps else []

    @property
    def is_automated(self) -> bool:
        return self.automation is not None and self.automation.is_automated


class TestSuite(BaseModel):
    """The canonical aggregate; case order drives grouping and row order."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(
        ...,
        validation_alias=AliasChoices("title", "project_title"),
        serialization_alias="title",
    )
    base_url: str = Field(
        ...,
        validation_alias=AliasChoices("baseUrl", "base_url"),
        serialization_alias="baseUrl",
    )
    assumptions: List[str] = Field(default_factory=list)
    cases: List[TestCase] = Field(
        default_factory=list,
        validation_alias=AliasChoices("cases", "testcases"),
        serialization_alias="cases",
    )

    @model_validator(mode='after')
    def validate_case_ids_unique(self):
        validate_unique_ids(self.cases)
        return self

    def case_ids(self) -> List[str]:
        return [case.id for case in self.cases]

    def get_case(self, case_id: str) -> Optional[TestCase]:
        for case in self.cases:
            if case.id == case_id:
                return case
        return None

    def to_json(self, indent: int = 2) -> str:
        """Raw export: the model serialized with its wire field names."""
        return self.model_dump_json(by_alias=True, indent=indent)


# ==================== Validation Helpers ====================

def validate_unique_ids(items: List[BaseModel], id_field: str = "id") -> None:
    """Validate that all items have unique IDs."""
    ids = [getattr(item, id_field) for item in items]
    duplicates = sorted(id for id in set(ids) if ids.count(id) > 1)
    if duplicates:
        raise ValueError(f"Duplicate IDs found: {duplicates}")


# ==================== JSON Schema Generation ====================

def get_suite_json_schema() -> Dict[str, Any]:
    """JSON schema of the suite as exported and as accepted on input."""
    return TestSuite.model_json_schema(by_alias=True)

"""Custom exceptions for the QA suite toolkit."""

from typing import Any, Dict, List, Optional


class QASuiteError(Exception):
    """Base exception for QA suite errors."""
    pass


class ConfigurationError(QASuiteError):
    """Raised when configuration is invalid or a required credential is missing."""
    pass


class LLMRuntimeError(QASuiteError):
    """Raised when the generation service fails or returns nothing."""
    pass


class SchemaViolationError(QASuiteError):
    """
    Raised when the generation service returns something that is not a valid suite.

    Attributes:
        raw_response: The untouched response text
        errors: Pydantic error entries, empty when the payload was not JSON at all
        details: Human-readable explanation of what went wrong
    """

    def __init__(self, raw_response: str, details: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.raw_response = raw_response
        self.details = details
        self.errors = errors or []
        super().__init__(f"Generated suite is invalid: {details}")


class ReportImportError(QASuiteError):
    """
    Raised when an execution report cannot be read as a Playwright JSON report.

    The suite being reconciled is never modified when this is raised.
    """

    def __init__(self, details: str, path: Optional[str] = None):
        self.details = details
        self.path = path
        location = f" at {path}" if path else ""
        super().__init__(f"Could not import execution report{location}: {details}")

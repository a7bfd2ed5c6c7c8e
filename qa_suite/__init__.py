"""
QA Suite Toolkit

Turns an AI-generated test suite into a grouped spreadsheet, a Playwright
script stub and a raw JSON export, and reconciles Playwright execution reports
back onto the suite by case id.
"""

__version__ = "0.1.0"
__all__ = [
    "TestSuite",
    "TestCase",
    "SuiteSession",
    "SuiteGenerator",
    "compute_runs",
    "reconcile",
    "QASuiteError"
]

from .models import TestSuite, TestCase
from .session import SuiteSession
from .generator import SuiteGenerator
from .grouping import compute_runs
from .reconcile import reconcile
from .exceptions import QASuiteError

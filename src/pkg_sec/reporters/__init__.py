"""Reporters for verification results."""

from .console import ConsoleReporter
from .generator import generate_report, ReportFormat

__all__ = ["ConsoleReporter", "generate_report", "ReportFormat"]

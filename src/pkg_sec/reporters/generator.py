"""File report generation for verification results."""

import json
from datetime import datetime
from enum import Enum

from pkg_sec.models import FindingSeverity, VerificationResult


class ReportFormat(str, Enum):
    """Supported report file formats."""
    JSON = "json"
    MARKDOWN = "markdown"


def generate_report(result: VerificationResult, format: ReportFormat = ReportFormat.JSON) -> str:
    """Render a verification result as a JSON or Markdown document."""
    if format == ReportFormat.JSON:
        return _generate_json(result)
    elif format == ReportFormat.MARKDOWN:
        return _generate_markdown(result)
    else:
        raise ValueError(f"Unsupported format: {format}")


def _generate_json(result: VerificationResult) -> str:
    data = result.dict()
    data["passed"] = result.passed
    data["generated_at"] = datetime.now().isoformat()
    return json.dumps(data, indent=2, default=str)


def _generate_markdown(result: VerificationResult) -> str:
    lines = []
    lines.append("# Package Verification Report")
    lines.append("")
    lines.append(f"Generated at: {datetime.now().isoformat()}")
    lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.append(f"- Overall: {'PASSED' if result.passed else 'FAILED'}")
    for name, check in result.results.items():
        status = "PASSED" if check.passed else "FAILED"
        if check.passed and check.has_warnings:
            status += f" ({check.warning_count} warning(s))"
        lines.append(f"- {name}: {status}")
    lines.append("")

    for name, check in result.results.items():
        issues = [f for f in check.findings if f.severity != FindingSeverity.INFO]
        if not issues:
            continue
        lines.append(f"## {name}")
        lines.append("")
        for finding in issues:
            lines.append(f"- **{finding.severity.value.upper()}**: {finding.title}")
            if finding.description:
                for line in finding.description.splitlines():
                    lines.append(f"  {line}")
            if finding.recommendation:
                lines.append(f"  - Fix: {finding.recommendation}")
        lines.append("")

    return "\n".join(lines)

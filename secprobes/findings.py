"""
Finding model shared by every probe step.

A run collects findings in detection order on a single ``ProbeReport``. The
severity enum is the only input to both the SARIF level and the process exit
code, so both mappings live here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

STATUS_PASS = "pass"
STATUS_FAIL = "fail"
STATUS_SKIPPED = "skipped"

EXIT_OK = 0
EXIT_HIGH_SEVERITY = 2

_WHITESPACE_RUN = re.compile(r"\s+")


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


_SARIF_LEVELS = {
    Severity.HIGH: "error",
    Severity.MEDIUM: "warning",
}


def sarif_level(severity: Severity) -> str:
    return _SARIF_LEVELS.get(severity, "note")


def exit_code_for(findings: Iterable["Finding"]) -> int:
    if any(finding.severity is Severity.HIGH for finding in findings):
        return EXIT_HIGH_SEVERITY
    return EXIT_OK


def rule_id_for(title: str) -> str:
    return _WHITESPACE_RUN.sub("-", title).lower()


@dataclass
class Finding:
    severity: Severity
    title: str
    detail: str
    url: Optional[str] = None

    def __post_init__(self) -> None:
        self.severity = Severity(self.severity)

    @property
    def rule_id(self) -> str:
        return rule_id_for(self.title)


@dataclass
class CheckResult:
    """Outcome of one pipeline step.

    ``skipped`` means the signal could not be collected at all, which is
    different from ``pass`` (collected, nothing wrong). Both end up as "no
    finding" in the SARIF output.
    """

    id: str
    title: str
    status: str
    summary: str
    findings: List[Finding] = field(default_factory=list)
    details: Optional[Dict[str, Any]] = None


def build_result(
    *,
    id: str,
    title: str,
    summary: str,
    findings: Optional[List[Finding]] = None,
    details: Optional[Dict[str, Any]] = None,
) -> CheckResult:
    findings = list(findings or [])
    return CheckResult(
        id=id,
        title=title,
        status=STATUS_FAIL if findings else STATUS_PASS,
        summary=summary,
        findings=findings,
        details=details,
    )


def skipped_result(
    *,
    id: str,
    title: str,
    reason: str,
    details: Optional[Dict[str, Any]] = None,
) -> CheckResult:
    return CheckResult(
        id=id,
        title=title,
        status=STATUS_SKIPPED,
        summary=reason,
        details=details,
    )


@dataclass
class ProbeReport:
    target_url: str
    findings: List[Finding] = field(default_factory=list)
    checks: List[CheckResult] = field(default_factory=list)

    def record(self, result: CheckResult) -> CheckResult:
        self.checks.append(result)
        self.findings.extend(result.findings)
        return result

    @property
    def has_high_severity(self) -> bool:
        return exit_code_for(self.findings) == EXIT_HIGH_SEVERITY

    @property
    def exit_code(self) -> int:
        return exit_code_for(self.findings)

#!/usr/bin/env python3
"""
Security smoke probes for CI
----------------------------

Loads one target URL in a headless Chromium and runs a fixed, linear set of
best-effort checks:

* Navigation      – a page that cannot be loaded is itself a high finding.
* Security headers – presence of six response headers and a weak-CSP check.
* XSS probe       – one fixed payload submitted through the first form.

Findings are written as SARIF next to a screenshot and a HAR trace. The exit
code is 2 when any high severity finding was recorded, 0 otherwise.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import List, Optional

from .browser import capture_screenshot, navigate, open_session
from .config import ProbeConfig, load_config
from .findings import ProbeReport
from .headers import run_header_audit
from .sarif import write_sarif
from .xss import run_xss_probe

logger = logging.getLogger("secprobes.scanner")
logger.addHandler(logging.NullHandler())


def run_probes(config: ProbeConfig) -> ProbeReport:
    report = ProbeReport(target_url=config.target_url)
    config.artifacts_dir.mkdir(parents=True, exist_ok=True)

    with open_session(config) as session:
        page = session.page
        report.record(navigate(page, config))
        capture_screenshot(page, config)
        report.record(run_header_audit(page, session.recorder, config))
        report.record(run_xss_probe(page, config))
        write_sarif(report.findings, config.target_url, config.report_path)

    return report


def format_summary(report: ProbeReport, config: ProbeConfig) -> str:
    lines: List[str] = [f"Target: {report.target_url}"]
    for check in report.checks:
        lines.append(f"  [{check.status}] {check.title}: {check.summary}")
        if check.details:
            rendered = json.dumps(check.details, ensure_ascii=False, sort_keys=True)
            lines.append(f"      details: {rendered}")
    lines.append(f"Findings: {len(report.findings)}")
    for finding in report.findings:
        lines.append(f"  - ({finding.severity.value}) {finding.title}")
    lines.append(f"Report: {config.report_path}")
    lines.append(f"Screenshot: {config.screenshot_path}")
    lines.append(f"HAR: {config.har_path}")
    verdict = "FAIL (high severity findings)" if report.has_high_severity else "PASS"
    lines.append(f"Result: {verdict}")
    return "\n".join(lines)


def resolve_log_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        return logging.INFO
    return level


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=resolve_log_level(level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(config: Optional[ProbeConfig] = None) -> int:
    config = config or load_config()
    configure_logging(config.log_level)
    report = run_probes(config)
    print(format_summary(report, config))
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())

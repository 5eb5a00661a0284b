from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .browser import ResponseRecorder
from .config import ProbeConfig
from .findings import CheckResult, Finding, Severity, build_result, skipped_result

REQUIRED_HEADERS = [
    ("content-security-policy", "CSP missing weakens XSS defenses"),
    ("strict-transport-security", "HSTS missing allows downgrade attacks"),
    ("x-frame-options", "Clickjacking protection missing (X-Frame-Options)"),
    ("x-content-type-options", "MIME sniffing protection missing (nosniff)"),
    ("referrer-policy", "Referrer-Policy missing can leak URLs"),
    ("permissions-policy", "Permissions-Policy missing (sensors/cam/mic control)"),
]
UNSAFE_CSP_PATTERN = re.compile(r"unsafe-inline|unsafe-eval")

CHECK_ID = "security_headers"
CHECK_TITLE = "Security headers"

logger = logging.getLogger("secprobes.headers")
logger.addHandler(logging.NullHandler())


def normalize_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {name.lower(): value for name, value in headers.items()}


def audit_headers(headers: Mapping[str, str], url: str) -> CheckResult:
    lowered = normalize_headers(headers)
    findings: List[Finding] = []
    missing: List[str] = []
    for name, explanation in REQUIRED_HEADERS:
        if not lowered.get(name):
            missing.append(name)
            findings.append(
                Finding(
                    severity=Severity.MEDIUM,
                    title=f"Missing header: {name}",
                    detail=explanation,
                    url=url,
                )
            )

    csp = lowered.get("content-security-policy")
    if csp and UNSAFE_CSP_PATTERN.search(csp):
        findings.append(
            Finding(
                severity=Severity.MEDIUM,
                title="Weak CSP",
                detail=f"Contains unsafe directive: {csp}",
                url=url,
            )
        )

    present = {name: lowered[name] for name, _ in REQUIRED_HEADERS if lowered.get(name)}
    if findings:
        summary = f"{len(findings)} header issue(s) on {url}."
    else:
        summary = "All required security headers are present."
    return build_result(
        id=CHECK_ID,
        title=CHECK_TITLE,
        summary=summary,
        findings=findings,
        details={"present": present, "missing": missing},
    )


def find_document_response(
    page: Any, recorder: ResponseRecorder, timeout_ms: int
) -> Optional[Any]:
    url = page.url
    response = recorder.latest_for(url)
    if response is not None:
        return response
    try:
        return page.wait_for_event(
            "response",
            predicate=lambda candidate: candidate.url == page.url,
            timeout=timeout_ms,
        )
    except PlaywrightTimeoutError:
        logger.warning(
            "No response for %s within %d ms; security headers were not audited",
            url,
            timeout_ms,
        )
        return None


def run_header_audit(
    page: Any, recorder: ResponseRecorder, config: ProbeConfig
) -> CheckResult:
    try:
        response = find_document_response(page, recorder, config.header_timeout_ms)
        if response is None:
            return skipped_result(
                id=CHECK_ID,
                title=CHECK_TITLE,
                reason="No response matching the landed URL was observed.",
            )
        headers = response.all_headers()
        url = page.url
    except Exception as exc:
        if logger.isEnabledFor(logging.DEBUG):
            logger.exception("Reading response headers failed")
        else:
            logger.warning("Reading response headers failed: %s", exc)
        return skipped_result(
            id=CHECK_ID,
            title=CHECK_TITLE,
            reason=f"Response headers could not be read: {exc}",
        )
    return audit_headers(headers, url)

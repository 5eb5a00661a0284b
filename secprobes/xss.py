"""
Reflected XSS smoke probe.

Fills the first few visible text fields with a fixed payload, submits the
first form and looks for the payload verbatim in the rendered markup. This is
a coarse signal: a reflection inside an HTML comment or an inert attribute is
still reported, so the result details describe where the payload landed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from bs4 import BeautifulSoup, Comment

from .config import ProbeConfig
from .findings import CheckResult, Finding, Severity, build_result, skipped_result

PROBE_PAYLOAD = '"><svg/onload=alert(1)>'
INPUT_SELECTOR = "input:not([type=hidden]), textarea"
SUBMIT_SELECTOR = "form button[type=submit], form input[type=submit]"
MAX_PROBE_FIELDS = 6

CHECK_ID = "xss_reflection_probe"
CHECK_TITLE = "Reflected XSS probe"

logger = logging.getLogger("secprobes.xss")
logger.addHandler(logging.NullHandler())


def describe_reflection(html: str, payload: str = PROBE_PAYLOAD) -> Dict[str, Any]:
    soup = BeautifulSoup(html, "html.parser")
    comments = soup.find_all(string=lambda text: isinstance(text, Comment))
    return {
        "occurrences": html.count(payload),
        "in_comment": any(payload in comment for comment in comments),
    }


def is_reflected(html: str, payload: str = PROBE_PAYLOAD) -> bool:
    return payload in html


def _fill_fields(page: Any, payload: str) -> Dict[str, int]:
    fields = page.query_selector_all(INPUT_SELECTOR)[:MAX_PROBE_FIELDS]
    filled = 0
    failed = 0
    for handle in fields:
        try:
            handle.fill(payload)
        except Exception as exc:
            logger.debug("Could not fill probe field: %s", exc)
            failed += 1
            continue
        filled += 1
    return {"fields_found": len(fields), "fields_filled": filled, "fields_failed": failed}


def run_xss_probe(page: Any, config: ProbeConfig, payload: str = PROBE_PAYLOAD) -> CheckResult:
    details: Dict[str, Any] = {"payload": payload}
    try:
        details.update(_fill_fields(page, payload))
        buttons = page.query_selector_all(SUBMIT_SELECTOR)
    except Exception as exc:
        logger.debug("Probe field lookup failed: %s", exc)
        return skipped_result(
            id=CHECK_ID,
            title=CHECK_TITLE,
            reason=f"Form fields could not be located: {exc}",
            details=details,
        )

    details["submit_found"] = bool(buttons)
    if not buttons:
        return skipped_result(
            id=CHECK_ID,
            title=CHECK_TITLE,
            reason="No submit control inside a form; nothing was submitted.",
            details=details,
        )

    try:
        buttons[0].click(no_wait_after=True)
        page.wait_for_timeout(config.settle_ms)
        content = page.content()
        url = page.url
    except Exception as exc:
        if logger.isEnabledFor(logging.DEBUG):
            logger.exception("Probe submission failed")
        else:
            logger.info("Probe submission failed: %s", exc)
        return skipped_result(
            id=CHECK_ID,
            title=CHECK_TITLE,
            reason=f"Probe submission failed: {exc}",
            details=details,
        )

    findings: List[Finding] = []
    if is_reflected(content, payload):
        details["reflection"] = describe_reflection(content, payload)
        findings.append(
            Finding(
                severity=Severity.HIGH,
                title="Possible reflected XSS",
                detail="Probe payload appears reflected in page content",
                url=url,
            )
        )
        summary = f"Probe payload reflected unescaped on {url}."
    else:
        summary = "Probe payload was not reflected verbatim."
    return build_result(
        id=CHECK_ID,
        title=CHECK_TITLE,
        summary=summary,
        findings=findings,
        details=details,
    )

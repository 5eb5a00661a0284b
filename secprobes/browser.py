"""
Browser session handling: launch, navigation and screenshot capture.

Only the sync Playwright API is used; every interaction blocks until the
browser finishes it or its own timeout expires.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .config import ProbeConfig
from .findings import CheckResult, Finding, Severity, build_result

logger = logging.getLogger("secprobes.browser")
logger.addHandler(logging.NullHandler())


@dataclass
class ResponseRecorder:
    """Keeps every response the page sees, in arrival order."""

    responses: List[Any] = field(default_factory=list)

    def record(self, response: Any) -> None:
        self.responses.append(response)

    def latest_for(self, url: str) -> Optional[Any]:
        for response in reversed(self.responses):
            if response.url == url:
                return response
        return None


@dataclass
class ProbeSession:
    page: Any
    recorder: ResponseRecorder


@contextmanager
def open_session(config: ProbeConfig) -> Iterator[ProbeSession]:
    with sync_playwright() as playwright:
        browser = playwright.chromium.launch(headless=config.headless)
        try:
            context = browser.new_context(
                ignore_https_errors=True,
                record_har_path=str(config.har_path),
            )
            try:
                page = context.new_page()
                recorder = ResponseRecorder()
                page.on("response", recorder.record)
                yield ProbeSession(page=page, recorder=recorder)
            finally:
                # The HAR file is only flushed once the context closes.
                context.close()
        finally:
            browser.close()


def navigate(page: Any, config: ProbeConfig) -> CheckResult:
    target = config.target_url
    try:
        page.goto(target, wait_until="networkidle", timeout=config.navigation_timeout_ms)
    except PlaywrightError as exc:
        logger.warning("Navigation to %s failed: %s", target, exc)
        finding = Finding(
            severity=Severity.HIGH,
            title="Navigation failed",
            detail=f"Could not reach {target}: {exc}",
            url=target,
        )
        return build_result(
            id="navigation",
            title="Navigation",
            summary=f"Could not load {target}.",
            findings=[finding],
            details={"error": str(exc)},
        )
    landed = page.url
    logger.info("Loaded %s (landed on %s)", target, landed)
    return build_result(
        id="navigation",
        title="Navigation",
        summary=f"Loaded {landed}.",
        details={"landed_url": landed},
    )


def capture_screenshot(page: Any, config: ProbeConfig) -> bool:
    try:
        page.screenshot(path=str(config.screenshot_path), full_page=True)
    except Exception as exc:
        logger.debug("Screenshot skipped: %s", exc)
        return False
    return True

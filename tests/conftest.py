"""
Pytest configuration and shared fixtures for secprobes tests.

Playwright objects are replaced with MagicMock fakes so no browser is needed.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from secprobes.browser import ProbeSession, ResponseRecorder
from secprobes.config import ProbeConfig
from secprobes.xss import INPUT_SELECTOR, SUBMIT_SELECTOR


def make_response(url: str, headers: Optional[Dict[str, str]] = None) -> MagicMock:
    response = MagicMock()
    response.url = url
    response.all_headers.return_value = dict(headers or {})
    return response


def make_page(
    url: str = "http://localhost:3000/",
    *,
    inputs: Optional[List[Any]] = None,
    buttons: Optional[List[Any]] = None,
    content: str = "<html><body></body></html>",
) -> MagicMock:
    page = MagicMock()
    page.url = url
    page.content.return_value = content
    selectors = {
        INPUT_SELECTOR: list(inputs or []),
        SUBMIT_SELECTOR: list(buttons or []),
    }
    page.query_selector_all.side_effect = lambda selector: selectors.get(selector, [])
    return page


@pytest.fixture
def probe_config(tmp_path: Path) -> ProbeConfig:
    return ProbeConfig(
        target_url="http://localhost:3000/",
        artifacts_dir=tmp_path / "artifacts",
        settle_ms=0,
    )


@pytest.fixture
def fake_session() -> ProbeSession:
    return ProbeSession(page=make_page(), recorder=ResponseRecorder())


@pytest.fixture
def page_factory():
    return make_page


@pytest.fixture
def response_factory():
    return make_response

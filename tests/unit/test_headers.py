"""
Tests for the security header auditor.
"""

from unittest.mock import MagicMock

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from secprobes.browser import ResponseRecorder
from secprobes.findings import STATUS_FAIL, STATUS_PASS, STATUS_SKIPPED, Severity
from secprobes.headers import (
    REQUIRED_HEADERS,
    audit_headers,
    find_document_response,
    run_header_audit,
)

URL = "https://app.example/"

FULL_HEADERS = {
    "Content-Security-Policy": "default-src 'self'",
    "Strict-Transport-Security": "max-age=63072000",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "camera=()",
}


class TestAuditHeaders:
    def test_only_csp_present_reports_five_missing(self) -> None:
        result = audit_headers({"content-security-policy": "default-src 'self'"}, URL)

        assert result.status == STATUS_FAIL
        assert len(result.findings) == 5
        assert all(f.severity is Severity.MEDIUM for f in result.findings)
        assert [f.title for f in result.findings] == [
            "Missing header: strict-transport-security",
            "Missing header: x-frame-options",
            "Missing header: x-content-type-options",
            "Missing header: referrer-policy",
            "Missing header: permissions-policy",
        ]
        assert not any(f.title == "Weak CSP" for f in result.findings)
        assert all(f.url == URL for f in result.findings)

    def test_no_headers_reports_all_six_in_order(self) -> None:
        result = audit_headers({}, URL)

        assert [f.title for f in result.findings] == [
            f"Missing header: {name}" for name, _ in REQUIRED_HEADERS
        ]
        assert result.findings[0].detail == "CSP missing weakens XSS defenses"

    def test_header_names_are_case_insensitive(self) -> None:
        result = audit_headers(FULL_HEADERS, URL)

        assert result.status == STATUS_PASS
        assert result.findings == []
        assert result.details["missing"] == []

    def test_empty_header_value_counts_as_missing(self) -> None:
        headers = dict(FULL_HEADERS, **{"X-Frame-Options": ""})
        result = audit_headers(headers, URL)

        assert [f.title for f in result.findings] == ["Missing header: x-frame-options"]

    def test_unsafe_inline_adds_weak_csp_last(self) -> None:
        policy = "default-src 'self'; script-src 'self' 'unsafe-inline'"
        headers = {"content-security-policy": policy}
        result = audit_headers(headers, URL)

        assert len(result.findings) == 6
        weak = result.findings[-1]
        assert weak.title == "Weak CSP"
        assert weak.severity is Severity.MEDIUM
        assert policy in weak.detail

    def test_unsafe_eval_is_weak(self) -> None:
        headers = dict(FULL_HEADERS, **{"Content-Security-Policy": "script-src 'unsafe-eval'"})
        result = audit_headers(headers, URL)

        assert [f.title for f in result.findings] == ["Weak CSP"]

    def test_weak_csp_match_is_case_sensitive(self) -> None:
        headers = dict(FULL_HEADERS, **{"Content-Security-Policy": "script-src 'UNSAFE-INLINE'"})
        assert audit_headers(headers, URL).findings == []


class TestFindDocumentResponse:
    def test_prefers_recorded_response(self, page_factory, response_factory) -> None:
        page = page_factory(URL)
        recorder = ResponseRecorder()
        recorder.record(response_factory("https://app.example/style.css"))
        document = response_factory(URL)
        recorder.record(document)

        assert find_document_response(page, recorder, 5000) is document
        page.wait_for_event.assert_not_called()

    def test_falls_back_to_waiting(self, page_factory, response_factory) -> None:
        page = page_factory(URL)
        late = response_factory(URL)
        page.wait_for_event.return_value = late

        assert find_document_response(page, ResponseRecorder(), 5000) is late
        args, kwargs = page.wait_for_event.call_args
        assert args == ("response",)
        assert kwargs["timeout"] == 5000
        assert kwargs["predicate"](late)
        assert not kwargs["predicate"](response_factory("https://other.example/"))

    def test_timeout_returns_none(self, page_factory) -> None:
        page = page_factory(URL)
        page.wait_for_event.side_effect = PlaywrightTimeoutError("Timeout 5000ms exceeded")

        assert find_document_response(page, ResponseRecorder(), 5000) is None


class TestRunHeaderAudit:
    def test_audits_recorded_response(self, probe_config, page_factory, response_factory) -> None:
        page = page_factory(URL)
        recorder = ResponseRecorder()
        recorder.record(response_factory(URL, {"content-security-policy": "default-src 'self'"}))

        result = run_header_audit(page, recorder, probe_config)

        assert result.status == STATUS_FAIL
        assert len(result.findings) == 5

    def test_no_response_is_skipped(self, probe_config, page_factory) -> None:
        page = page_factory(URL)
        page.wait_for_event.side_effect = PlaywrightTimeoutError("Timeout")

        result = run_header_audit(page, ResponseRecorder(), probe_config)

        assert result.status == STATUS_SKIPPED
        assert result.findings == []

    def test_header_read_failure_is_skipped(self, probe_config, page_factory) -> None:
        page = page_factory(URL)
        broken = MagicMock()
        broken.url = URL
        broken.all_headers.side_effect = RuntimeError("target closed")
        recorder = ResponseRecorder()
        recorder.record(broken)

        result = run_header_audit(page, recorder, probe_config)

        assert result.status == STATUS_SKIPPED
        assert "target closed" in result.summary

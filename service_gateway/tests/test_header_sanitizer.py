"""
Unit tests for the header sanitizer.
"""

import pytest

from service_gateway.app.proxy.headers import HeaderSanitizer, is_denied


class TestHeaderSanitizer:
    """Test cases for HeaderSanitizer."""

    @pytest.fixture
    def sanitizer(self):
        return HeaderSanitizer()

    @pytest.fixture
    def browser_headers(self):
        return {
            "Host": "gateway.example.com",
            "Connection": "keep-alive",
            "Content-Length": "42",
            "Content-Type": "application/json",
            "Accept-Encoding": "gzip, br",
            "Accept-Language": "en-US",
            "Referer": "http://localhost:3000/login",
            "Origin": "http://localhost:3000",
            "Sec-Fetch-Mode": "cors",
            "Sec-Fetch-Site": "same-site",
            "Authorization": "Bearer abc",
            "Transfer-Encoding": "chunked",
            "Upgrade": "websocket",
        }

    def test_denied_headers_are_dropped(self, sanitizer, browser_headers):
        result = sanitizer.sanitize(browser_headers, "localhost:3001")

        for name in ("connection", "content-length", "accept-encoding", "accept-language",
                     "referer", "origin", "sec-fetch-mode", "sec-fetch-site",
                     "transfer-encoding", "upgrade"):
            assert name not in result
        assert result["content-type"] == "application/json"
        assert result["authorization"] == "Bearer abc"

    def test_host_is_rewritten(self, sanitizer, browser_headers):
        result = sanitizer.sanitize(browser_headers, "localhost:3001")
        assert result["host"] == "localhost:3001"

    def test_request_id_is_synthesized_when_missing(self, sanitizer):
        result = sanitizer.sanitize({"accept": "application/json"}, "auth:3001")
        assert result["x-request-id"] == "unknown"

    def test_request_id_is_forwarded_unchanged(self, sanitizer):
        result = sanitizer.sanitize({"X-Request-ID": "req-123"}, "auth:3001")
        assert result["x-request-id"] == "req-123"

    def test_empty_request_id_is_replaced(self, sanitizer):
        result = sanitizer.sanitize({"x-request-id": ""}, "auth:3001")
        assert result["x-request-id"] == "unknown"

    def test_multi_valued_headers_are_joined(self, sanitizer):
        result = sanitizer.sanitize({"accept": ["application/json", "text/plain"]}, "auth:3001")
        assert result["accept"] == "application/json, text/plain"

    def test_repeated_pairs_are_joined(self, sanitizer):
        pairs = [("x-forwarded-for", "10.0.0.1"), ("X-Forwarded-For", "10.0.0.2"), ("cookie", "a=1")]
        result = sanitizer.sanitize(pairs, "auth:3001")
        assert result["x-forwarded-for"] == "10.0.0.1, 10.0.0.2"
        assert result["cookie"] == "a=1"

    def test_sanitize_is_idempotent(self, sanitizer, browser_headers):
        once = sanitizer.sanitize(browser_headers, "localhost:3002")
        twice = sanitizer.sanitize(once, "localhost:3002")

        assert once == twice
        assert list(twice).count("x-request-id") == 1
        assert twice["host"] == "localhost:3002"
        assert not any(is_denied(name) for name in twice)

    def test_host_follows_target_on_reapplication(self, sanitizer):
        first = sanitizer.sanitize({"host": "client"}, "auth:3001")
        second = sanitizer.sanitize(first, "training:3002")
        assert second["host"] == "training:3002"

    def test_input_is_not_mutated(self, sanitizer, browser_headers):
        original = dict(browser_headers)
        sanitizer.sanitize(browser_headers, "auth:3001")
        assert browser_headers == original

    @pytest.mark.parametrize("name", ["Sec-Fetch-Dest", "sec-fetch-user", "KEEP-ALIVE", "TE", "Proxy-Authorization"])
    def test_is_denied(self, name):
        assert is_denied(name)

    @pytest.mark.parametrize("name", ["authorization", "cookie", "sec-ch-ua", "x-request-id"])
    def test_is_not_denied(self, name):
        assert not is_denied(name)

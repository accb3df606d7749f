"""Unit tests for forkscan.downloaders — HTTP helpers and the OSV client."""

from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_response, make_vuln
from forkscan.downloaders import (
    OsvClient,
    PermanentQueryError,
    fetch_catalog_page,
    is_transient_status,
    requests_session,
)

PAYLOAD = {"package": {"purl": "pkg:composer/symfony/console"}}

# ── requests_session ─────────────────────────────────────────────────────────


class TestRequestsSession:
    def test_user_agent(self):
        s = requests_session()
        assert "ForkScan" in s.headers["User-Agent"]

    def test_accept_json(self):
        s = requests_session()
        assert s.headers["Accept"] == "application/json"


class TestIsTransientStatus:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 599])
    def test_transient(self, status):
        assert is_transient_status(status)

    @pytest.mark.parametrize("status", [200, 400, 401, 404, 428])
    def test_not_transient(self, status):
        assert not is_transient_status(status)


# ── fetch_catalog_page ───────────────────────────────────────────────────────


class TestFetchCatalogPage:
    def test_passes_page_param(self):
        mock_session = MagicMock()
        mock_session.get.return_value.json.return_value = {"results": [], "totalPages": 3}
        mock_session.get.return_value.raise_for_status = MagicMock()
        data = fetch_catalog_page(mock_session, "https://example.com/catalog", 2)
        assert data["totalPages"] == 3
        _, kwargs = mock_session.get.call_args
        assert kwargs["params"] == {"page": 2}


# ── OsvClient ────────────────────────────────────────────────────────────────


def _client(responses, sleeps, retry_limit=5):
    session = MagicMock()
    session.post.side_effect = responses
    return OsvClient(session, url="https://osv.test/v1/query", retry_limit=retry_limit, sleep=sleeps.append)


class TestOsvClient:
    def test_success(self, no_sleep):
        client = _client([make_response(200, {"vulns": [make_vuln("A")]})], no_sleep)
        vulns = client.query(PAYLOAD)
        assert [v["id"] for v in vulns] == ["A"]
        assert no_sleep == []

    def test_posts_payload(self, no_sleep):
        client = _client([make_response(200, {})], no_sleep)
        client.query(PAYLOAD)
        args, kwargs = client.session.post.call_args
        assert args[0] == "https://osv.test/v1/query"
        assert kwargs["json"] == PAYLOAD

    def test_empty_payload_means_no_vulns(self, no_sleep):
        client = _client([make_response(200, {})], no_sleep)
        assert client.query(PAYLOAD) == []

    def test_retries_server_errors_then_succeeds(self, no_sleep):
        responses = [make_response(500)] * 4 + [make_response(200, {"vulns": [make_vuln("A")]})]
        client = _client(responses, no_sleep)
        vulns = client.query(PAYLOAD, context="pkg:composer/symfony/console@5.3.0")
        assert len(vulns) == 1
        assert client.session.post.call_count == 5
        assert no_sleep == [1, 2, 4, 8]

    def test_rate_limit_is_retried(self, no_sleep):
        client = _client([make_response(429), make_response(200, {"vulns": []})], no_sleep)
        assert client.query(PAYLOAD) == []
        assert no_sleep == [1]

    def test_exhausted_retries_become_permanent(self, no_sleep):
        client = _client([make_response(503)] * 6, no_sleep)
        with pytest.raises(PermanentQueryError, match="Gave up after 6 attempts") as exc:
            client.query(PAYLOAD)
        assert exc.value.status == 503
        assert client.session.post.call_count == 6
        assert no_sleep == [1, 2, 4, 8, 16]

    def test_custom_initial_delay(self, no_sleep):
        session = MagicMock()
        session.post.side_effect = [make_response(500), make_response(500), make_response(200, {})]
        client = OsvClient(session, initial_delay=0.5, sleep=no_sleep.append)
        client.query(PAYLOAD)
        assert no_sleep == [0.5, 1.0]

    def test_client_error_not_retried(self, no_sleep):
        client = _client([make_response(400, text="bad purl")], no_sleep)
        with pytest.raises(PermanentQueryError, match="HTTP 400") as exc:
            client.query(PAYLOAD)
        assert exc.value.status == 400
        assert client.session.post.call_count == 1
        assert no_sleep == []

    def test_malformed_json_is_permanent(self, no_sleep):
        client = _client([make_response(200, ValueError("Expecting value"))], no_sleep)
        with pytest.raises(PermanentQueryError, match="Malformed"):
            client.query(PAYLOAD)
        assert no_sleep == []

    def test_wrong_shape_is_permanent(self, no_sleep):
        client = _client([make_response(200, ["not", "a", "dict"])], no_sleep)
        with pytest.raises(PermanentQueryError):
            client.query(PAYLOAD)

    def test_vulns_not_list_is_permanent(self, no_sleep):
        client = _client([make_response(200, {"vulns": "oops"})], no_sleep)
        with pytest.raises(PermanentQueryError):
            client.query(PAYLOAD)

    def test_network_error_is_permanent(self, no_sleep):
        client = _client([requests.ConnectionError("boom")], no_sleep)
        with pytest.raises(PermanentQueryError, match="Request failed"):
            client.query(PAYLOAD)
        assert no_sleep == []

    def test_zero_retry_limit(self, no_sleep):
        client = _client([make_response(500)], no_sleep, retry_limit=0)
        with pytest.raises(PermanentQueryError):
            client.query(PAYLOAD)
        assert client.session.post.call_count == 1

"""Shared fixtures for ForkScan tests."""

from typing import Any
from unittest.mock import MagicMock

import pytest


def make_vuln(
    vuln_id: str = "GHSA-test-0001",
    introduced: str | None = "0",
    fixed: str | None = None,
    summary: str = "",
) -> dict[str, Any]:
    events: list[dict[str, str]] = []
    if introduced is not None:
        events.append({"introduced": introduced})
    if fixed is not None:
        events.append({"fixed": fixed})
    return {
        "id": vuln_id,
        "summary": summary or f"Test vuln {vuln_id}",
        "details": "details",
        "severity": [{"type": "CVSS_V3", "score": "CVSS:3.1/AV:N"}],
        "affected": [{"ranges": [{"type": "ECOSYSTEM", "events": events}]}],
        "references": [{"url": f"https://osv.dev/vulnerability/{vuln_id}"}],
    }


def make_response(status: int = 200, payload: Any = None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload if payload is not None else {}
    return resp


@pytest.fixture
def symfony_vulns() -> list[dict[str, Any]]:
    return [
        make_vuln("GHSA-keep-0001", introduced="0", fixed="5.4.0", summary="Header injection"),
        make_vuln("GHSA-drop-0002", introduced="0", fixed="5.0.0", summary="Old bug"),
    ]


@pytest.fixture
def no_sleep() -> list[float]:
    """A list that records requested sleeps; pass ``no_sleep.append`` as sleep."""
    return []

import os, sys

from starlette.requests import Request

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from scoretracker import rate_limit


def _request(headers=None, client=("198.51.100.7", 1234)):
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "headers": raw, "client": client})


def test_client_ip_prefers_last_forwarded_hop():
    req = _request({"X-Forwarded-For": "10.0.0.1, 203.0.113.5"})
    assert rate_limit.client_ip(req) == "203.0.113.5"


def test_client_ip_fallbacks():
    assert rate_limit.client_ip(_request({"X-Real-IP": "203.0.113.8"})) == "203.0.113.8"
    assert rate_limit.client_ip(_request()) == "198.51.100.7"
    assert rate_limit.client_ip(_request(client=None)) == "anonymous"


def test_match_limit_follows_environment(monkeypatch):
    monkeypatch.setenv("DISABLE_RATE_LIMITS", "true")
    assert rate_limit.match_rate_limit() == "1000/second"
    monkeypatch.setenv("DISABLE_RATE_LIMITS", "false")
    monkeypatch.setattr(rate_limit, "MATCH_RATE_LIMIT", "5/minute")
    assert rate_limit.match_rate_limit() == "5/minute"

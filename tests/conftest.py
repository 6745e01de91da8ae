import json

import pytest
import requests


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else (json.dumps(body) if body is not None else "")

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Records requests and replays queued responses (or raises queued exceptions)."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def _next(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def request(self, method, url, **kwargs):
        return self._next(method, url, **kwargs)


COMPONENT_ROWS = [
    {"id": 1, "name": "Intel Core i5-13400F", "type": "CPU", "price": "3500000",
     "specs": "Socket LGA1700\n10 Cores"},
    {"id": 2, "name": "AMD Ryzen 5 7600", "type": "CPU", "price": 3300000, "specs": "Socket AM5"},
    {"id": 3, "name": "MSI PRO B760M-A", "type": "Motherboard", "price": 2400000,
     "specs": "Socket LGA 1700\nDDR5"},
    {"id": 4, "name": "ASUS PRIME B550M-K", "type": "Motherboard", "price": 1500000,
     "specs": "Socket AM4"},
    {"id": 5, "name": "ZOTAC RTX 4060", "type": "GPU", "price": 8000000, "specs": "8GB GDDR6"},
]

MONITOR_ROWS = [
    {"id": 1, "title": "LG 24GN60R", "price": 2100000, "resolution": "1920x1080",
     "refresh_rate": 144, "panel_type": "IPS", "screen_size": 23.8, "rating": 4.7,
     "featured": True},
]


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def json_catalog_dir(tmp_path):
    (tmp_path / "components.json").write_text(json.dumps(COMPONENT_ROWS), encoding="utf-8")
    (tmp_path / "monitors.json").write_text(json.dumps(MONITOR_ROWS), encoding="utf-8")
    return tmp_path

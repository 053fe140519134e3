import json

import pytest
import requests


def make_response(body, status_code=200, url="https://example.test/", headers=None):
    resp = requests.Response()
    resp.status_code = status_code
    resp.url = url
    resp.encoding = "utf-8"
    if headers:
        resp.headers.update(headers)
    if isinstance(body, (bytes, str)):
        resp._content = body.encode("utf-8") if isinstance(body, str) else body
    else:
        resp._content = json.dumps(body, ensure_ascii=False).encode("utf-8")
    return resp


class FakeSession:
    """Stands in for requests.Session; replays queued responses and records calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def queue(self, body, status_code=200, headers=None):
        self.responses.append(make_response(body, status_code, headers=headers))

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if not self.responses:
            raise AssertionError(f"unexpected request to {url} {params}")
        resp = self.responses.pop(0)
        resp.url = url
        return resp


@pytest.fixture
def session():
    return FakeSession()

import json
import threading

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from werkzeug.serving import make_server

from backup_client.mock_server import create_app


def make_response(status_code=200, body=None, headers=None, url="http://gocd.test/go/api/backups", reason="OK"):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.url = url
    response.encoding = "utf-8"
    response.headers = CaseInsensitiveDict(headers or {})
    if body is None:
        response._content = b""
    elif isinstance(body, (dict, list)):
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = body.encode("utf-8")
    return response


class FakeSession:
    """Stand-in for requests.Session that replays queued responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def request(self, method, url, headers=None, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "headers": headers or {}, "json": json, "timeout": timeout})
        if not self.responses:
            raise AssertionError(f"unexpected {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class RecordingScheduler:
    def __init__(self):
        self.scheduled = []

    def __call__(self, delay_seconds, fn):
        self.scheduled.append((delay_seconds, fn))

    def run_next(self):
        delay, fn = self.scheduled.pop(0)
        fn()
        return delay


@pytest.fixture
def scheduler():
    return RecordingScheduler()


@pytest.fixture
def live_server():
    """Serve a mock backup API on an ephemeral port; yields a factory taking create_app kwargs."""
    servers = []

    def start(**kwargs):
        kwargs.setdefault("retry_after", 0)
        server = make_server("127.0.0.1", 0, create_app(**kwargs))
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        return f"http://127.0.0.1:{server.server_port}/go"

    yield start

    for server in servers:
        server.shutdown()

"""HTTP stubs for the Cider client tests.

Traffic is served by ``httpx.MockTransport``; every request the client
sends is recorded so tests can assert on method, path, headers and body.
"""

import json
from typing import Any, Callable, List, Optional

import httpx

BASE_URL = "http://cider.test:10767"


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it handled."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


def respond(status_code: int = 200, json_data: Any = None, content: Optional[bytes] = None):
    """Build a handler that always answers with the given status and body."""

    def handler(request: httpx.Request) -> httpx.Response:
        if json_data is not None:
            return httpx.Response(status_code, json=json_data)
        return httpx.Response(status_code, content=content or b"")

    return handler


def fail_with(exc_factory: Callable[[httpx.Request], Exception]):
    """Build a handler that raises a transport exception for every request."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_factory(request)

    return handler


def request_json(request: httpx.Request) -> Any:
    """Decode the JSON body of a recorded request."""
    return json.loads(request.content)

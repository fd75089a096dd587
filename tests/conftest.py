"""Shared fixtures: a scripted gateway behind httpx.MockTransport."""

import json
from typing import Any

import httpx
import pytest

from agile_board.client import GatewayClient

BASE_URL = "http://gateway.test/api"


class FakeGateway:
    """Answers requests from scripted routes and records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], httpx.Response | Exception] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        status: int = 200,
        content: bytes | None = None,
    ) -> None:
        if content is not None:
            response = httpx.Response(status, content=content)
        elif json_body is None:
            response = httpx.Response(status)
        else:
            response = httpx.Response(status, json=json_body)
        self.routes[(method, path)] = response

    def add_data(self, method: str, path: str, data: Any, status: int = 200) -> None:
        """Answer with data wrapped in the gateway envelope."""
        self.add(method, path, {"isSuccessful": True, "data": data, "errors": []}, status=status)

    def fail(self, method: str, path: str, error: Exception) -> None:
        self.routes[(method, path)] = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if isinstance(route, Exception):
            raise route
        return route

    def body(self, index: int = -1) -> Any:
        """Decoded JSON body of a recorded request."""
        return json.loads(self.requests[index].content)

    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path.removeprefix("/api")) for r in self.requests]


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(gateway: FakeGateway) -> GatewayClient:
    return GatewayClient(base_url=BASE_URL, transport=httpx.MockTransport(gateway.handler))

"""Shared test doubles."""

import httpx

PAIR = "5c1a2b3c4d5e6f7a8b9c0d1e/5c1a2b3c4d5e6f7a8b9c0d1f"


class FakeOrigin:
    """Scripted origin that records every request it receives."""

    def __init__(self, status_code: int = 200, json: object = None, content: bytes | None = None, exc: Exception | None = None):
        self.status_code = status_code
        self.json = json
        self.content = content
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content, request=request)
        return httpx.Response(self.status_code, json=self.json, request=request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

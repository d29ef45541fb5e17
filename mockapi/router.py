"""
Route table for the simulated API.

Every matched request goes through the same three steps: artificial latency,
random failure injection, then the route handler. Failure injection happens
before the handler runs, so an injected failure never leaves partial state.
"""

import asyncio
import json
import random
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import httpx

from config.log import get_logger
from models.errors import ApiError, InvalidRequestError

log = get_logger(__name__)

Handler = Callable[..., Awaitable[httpx.Response]]


def json_response(body, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=body)


def read_json(request: httpx.Request):
    """Decode a JSON request body, or raise a 400."""
    if not request.content:
        return {}
    try:
        return json.loads(request.content)
    except ValueError as e:
        raise InvalidRequestError(f"Malformed JSON body: {e}")


@dataclass
class Route:
    method: str
    path: str
    pattern: re.Pattern
    handler: Handler
    failure_message: str


def compile_path(path: str) -> re.Pattern:
    """Turn '/api/jobs/:id' into a regex with named groups."""
    return re.compile("^" + re.sub(r":(\w+)", r"(?P<\1>[^/]+)", path) + "$")


class Router:
    """Matches requests to handlers; the first registered match wins."""

    def __init__(
        self,
        latency_ms: int = 300,
        failure_rate: float = 0.1,
        rng: Optional[random.Random] = None,
    ):
        self.latency_ms = latency_ms
        self.failure_rate = failure_rate
        self.rng = rng or random.Random()
        self.routes: list[Route] = []

    def add(self, method: str, path: str, handler: Handler, failure_message: str) -> None:
        self.routes.append(Route(method.upper(), path, compile_path(path), handler, failure_message))

    def match(self, method: str, path: str) -> tuple[Optional[Route], dict]:
        for route in self.routes:
            if route.method != method:
                continue
            m = route.pattern.match(path)
            if m:
                return route, m.groupdict()
        return None, {}

    def should_fail(self) -> bool:
        return self.rng.random() < self.failure_rate

    async def simulate_delay(self) -> None:
        await asyncio.sleep(self.latency_ms / 1000)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        """Entry point used as the httpx.MockTransport handler."""
        path = request.url.path
        route, params = self.match(request.method, path)
        if route is None:
            return json_response({"error": f"No route for {request.method} {path}"}, 404)

        log.debug("%s %s", request.method, request.url)
        await self.simulate_delay()

        if self.should_fail():
            log.warning("Injected failure on %s %s", request.method, path)
            return json_response({"error": route.failure_message}, 500)

        try:
            return await route.handler(request, **params)
        except ApiError as e:
            log.debug("%s %s -> %d %s", request.method, path, e.status_code, e.message)
            return json_response(e.to_body(), e.status_code)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

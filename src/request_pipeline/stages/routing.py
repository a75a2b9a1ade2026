"""Router stage — dispatches to route handlers by method and path."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from starlette.convertors import Convertor
from starlette.routing import compile_path

from request_pipeline._types import RouteHandler
from request_pipeline.context import RequestContext
from request_pipeline.outcome import CONTINUE, Outcome, Respond
from request_pipeline.response import PipelineResponse
from request_pipeline.stage import Stage, StageCategory
from request_pipeline.stages.guards import RouteGuard


@dataclass(frozen=True)
class Route:
    """One method + path template bound to a handler."""

    method: str
    path: str
    handler: RouteHandler
    guards: tuple[RouteGuard, ...] = ()
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)
    _convertors: dict[str, Convertor[Any]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        regex, _, convertors = compile_path(self.path)
        object.__setattr__(self, "_regex", regex)
        object.__setattr__(self, "_convertors", convertors)

    def match(self, path: str) -> dict[str, Any] | None:
        found = self._regex.match(path)
        if found is None:
            return None
        return {
            key: self._convertors[key].convert(value)
            for key, value in found.groupdict().items()
        }


def _as_response(result: Any) -> PipelineResponse:
    if isinstance(result, PipelineResponse):
        return result
    if result is None:
        return PipelineResponse.empty()
    return PipelineResponse.json(result)


class Router(Stage):
    """Route table consulted after the health check.

    Unmatched requests fall through to the not-found handler. ``HEAD``
    requests use the ``GET`` route when no ``HEAD`` route exists.
    """

    category = StageCategory.ROUTING

    def __init__(self, *, prefix: str = "") -> None:
        self._prefix = prefix.rstrip("/")
        self._routes: list[Route] = []

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    def add_route(
        self,
        method: str,
        path: str,
        handler: RouteHandler,
        *,
        guards: Sequence[RouteGuard] = (),
    ) -> Route:
        route = Route(
            method=method.upper(),
            path=self._prefix + path,
            handler=handler,
            guards=tuple(guards),
        )
        self._routes.append(route)
        return route

    def route(
        self, method: str, path: str, *, guards: Sequence[RouteGuard] = ()
    ) -> Callable[[RouteHandler], RouteHandler]:
        def decorator(handler: RouteHandler) -> RouteHandler:
            self.add_route(method, path, handler, guards=guards)
            return handler

        return decorator

    def get(self, path: str, *, guards: Sequence[RouteGuard] = ()) -> Callable[[RouteHandler], RouteHandler]:
        return self.route("GET", path, guards=guards)

    def post(self, path: str, *, guards: Sequence[RouteGuard] = ()) -> Callable[[RouteHandler], RouteHandler]:
        return self.route("POST", path, guards=guards)

    def put(self, path: str, *, guards: Sequence[RouteGuard] = ()) -> Callable[[RouteHandler], RouteHandler]:
        return self.route("PUT", path, guards=guards)

    def patch(self, path: str, *, guards: Sequence[RouteGuard] = ()) -> Callable[[RouteHandler], RouteHandler]:
        return self.route("PATCH", path, guards=guards)

    def delete(self, path: str, *, guards: Sequence[RouteGuard] = ()) -> Callable[[RouteHandler], RouteHandler]:
        return self.route("DELETE", path, guards=guards)

    def include(
        self, other: Router, *, prefix: str = "", guards: Sequence[RouteGuard] = ()
    ) -> Router:
        """Copy another router's routes under ``prefix``, adding ``guards`` first."""
        for route in other.routes:
            self._routes.append(
                Route(
                    method=route.method,
                    path=self._prefix + prefix.rstrip("/") + route.path,
                    handler=route.handler,
                    guards=tuple(guards) + route.guards,
                )
            )
        return self

    def find(self, method: str, path: str) -> tuple[Route, dict[str, Any]] | None:
        method = method.upper()
        fallback: tuple[Route, dict[str, Any]] | None = None
        for route in self._routes:
            params = route.match(path)
            if params is None:
                continue
            if route.method == method:
                return route, params
            if method == "HEAD" and route.method == "GET" and fallback is None:
                fallback = (route, params)
        return fallback

    async def handle(
        self, method: str, path: str, ctx: RequestContext
    ) -> PipelineResponse | None:
        found = self.find(method, path)
        if found is None:
            return None

        route, params = found
        ctx.path_params = params
        for guard in route.guards:
            await guard.check(ctx)
        return _as_response(await route.handler(ctx))

    async def process(self, ctx: RequestContext) -> Outcome:
        response = await self.handle(ctx.method, ctx.path, ctx)
        if response is None:
            return CONTINUE
        return Respond(response)

"""CORS policy stage."""

from __future__ import annotations

from collections.abc import Sequence

from request_pipeline.context import RequestContext
from request_pipeline.exceptions import PolicyRejected
from request_pipeline.outcome import CONTINUE, Outcome, Respond
from request_pipeline.response import PipelineResponse
from request_pipeline.stage import Stage, StageCategory

DEFAULT_METHODS = ("GET", "HEAD", "PUT", "PATCH", "POST", "DELETE")


class CORSPolicy(Stage):
    """Annotates responses for an allowed origin and answers preflights.

    Requests without an ``Origin`` header are same-origin and pass untouched.
    A disallowed origin never receives ``Access-Control-*`` headers; with
    ``reject_disallowed`` it is refused outright.
    """

    category = StageCategory.CORS

    def __init__(
        self,
        origin: str,
        *,
        allow_credentials: bool = False,
        allow_methods: Sequence[str] = DEFAULT_METHODS,
        allow_headers: Sequence[str] = (),
        max_age: int | None = None,
        reject_disallowed: bool = False,
    ) -> None:
        self._origin = origin.rstrip("/")
        self._allow_credentials = allow_credentials
        self._allow_methods = ", ".join(m.upper() for m in allow_methods)
        self._allow_headers = ", ".join(allow_headers)
        self._max_age = max_age
        self._reject_disallowed = reject_disallowed

    def is_allowed(self, origin: str) -> bool:
        return self._origin == "*" or origin == self._origin

    async def process(self, ctx: RequestContext) -> Outcome:
        origin = ctx.headers.get("origin")
        if origin is None:
            return CONTINUE

        if not self.is_allowed(origin):
            if self._reject_disallowed:
                raise PolicyRejected(f"Origin {origin} not allowed")
            return CONTINUE

        ctx.response_headers.update(self._simple_headers(origin))

        if ctx.method == "OPTIONS" and "access-control-request-method" in ctx.headers:
            return Respond(PipelineResponse.empty(204, headers=self._preflight_headers(ctx)))
        return CONTINUE

    def _simple_headers(self, origin: str) -> dict[str, str]:
        if self._origin == "*" and not self._allow_credentials:
            return {"Access-Control-Allow-Origin": "*"}

        headers = {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
        if self._allow_credentials:
            headers["Access-Control-Allow-Credentials"] = "true"
        return headers

    def _preflight_headers(self, ctx: RequestContext) -> dict[str, str]:
        headers = {"Access-Control-Allow-Methods": self._allow_methods}
        if self._allow_headers:
            headers["Access-Control-Allow-Headers"] = self._allow_headers
        else:
            requested = ctx.headers.get("access-control-request-headers")
            if requested:
                headers["Access-Control-Allow-Headers"] = requested
                headers["Vary"] = "Origin, Access-Control-Request-Headers"
        if self._max_age is not None:
            headers["Access-Control-Max-Age"] = str(self._max_age)
        return headers

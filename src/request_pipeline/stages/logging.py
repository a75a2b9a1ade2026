"""Request logging stage."""

from __future__ import annotations

import time
import uuid

import structlog

from request_pipeline.context import RequestContext
from request_pipeline.observability import get_logger
from request_pipeline.outcome import CONTINUE, Outcome
from request_pipeline.stage import Stage, StageCategory


class RequestLogger(Stage):
    """Logs every request on the way in and its status and timing on the way out."""

    category = StageCategory.LOGGING

    def __init__(
        self,
        *,
        logger: structlog.stdlib.BoundLogger | None = None,
        request_id_header: str = "X-Request-ID",
    ) -> None:
        self._logger = logger or get_logger("request_pipeline.access")
        self._request_id_header = request_id_header

    async def process(self, ctx: RequestContext) -> Outcome:
        request_id = ctx.headers.get(self._request_id_header) or uuid.uuid4().hex
        ctx.state["request_id"] = request_id
        ctx.state["started_at"] = time.perf_counter()
        ctx.response_headers[self._request_id_header] = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)
        self._logger.info("request_started", method=ctx.method, path=ctx.path)
        return CONTINUE

    async def on_response(self, ctx: RequestContext) -> None:
        started = ctx.state.get("started_at", time.perf_counter())
        duration_ms = round((time.perf_counter() - started) * 1000, 3)
        status_code = ctx.response.status_code if ctx.response is not None else None

        log = self._logger.warning if status_code and status_code >= 500 else self._logger.info
        log(
            "request_completed",
            method=ctx.method,
            path=ctx.path,
            status_code=status_code,
            duration_ms=duration_ms,
            authenticated=ctx.is_authenticated,
        )
        structlog.contextvars.unbind_contextvars("request_id")

"""PipelineApp — ASGI adapter feeding HTTP requests through a Pipeline."""

from __future__ import annotations

from collections.abc import Sequence

import anyio
from starlette.requests import ClientDisconnect, Request
from starlette.types import Message, Receive, Scope, Send

from request_pipeline._types import ASGICallable
from request_pipeline.context import RequestContext
from request_pipeline.observability import get_logger
from request_pipeline.pipeline import Pipeline
from request_pipeline.response import PipelineResponse

logger = get_logger(__name__)

_FALLBACK = PipelineResponse.json({"detail": "Internal Server Error"}, status_code=500)


class PipelineApp:
    """ASGI application running each request through one pipeline.

    The request body is read up front, stopping once it passes ``body_limit``;
    while the pipeline runs the connection is watched and a client disconnect
    cancels the in-flight work without sending anything.
    """

    def __init__(
        self,
        pipeline: Pipeline,
        *,
        on_startup: Sequence[ASGICallable] = (),
        on_shutdown: Sequence[ASGICallable] = (),
        body_limit: int | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.body_limit = body_limit
        self._on_startup = list(on_startup)
        self._on_shutdown = list(on_shutdown)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            raise RuntimeError(f"Unsupported scope type: {scope['type']}")

        request = Request(scope, receive)
        try:
            raw_body, too_large = await self._read_body(request)
        except ClientDisconnect:
            logger.info("client_disconnected", path=request.url.path, phase="body")
            return

        ctx = RequestContext(request=request, raw_body=raw_body, body_too_large=too_large)
        if too_large:
            # The rest of the upload is left unread; nothing to watch.
            response: PipelineResponse | None = await self._execute(ctx)
        else:
            response = await self._run(ctx, receive)
        if response is None:
            logger.info("client_disconnected", path=ctx.path, phase="pipeline")
            return
        await response.to_starlette()(scope, receive, send)

    async def _read_body(self, request: Request) -> tuple[bytes, bool]:
        limit = self.body_limit
        if limit is None:
            return await request.body(), False

        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > limit:
            return b"", True

        chunks: list[bytes] = []
        size = 0
        async for chunk in request.stream():
            size += len(chunk)
            if size > limit:
                return b"", True
            chunks.append(chunk)
        return b"".join(chunks), False

    async def _execute(self, ctx: RequestContext) -> PipelineResponse:
        try:
            return await self.pipeline.execute(ctx)
        except Exception:
            logger.exception("pipeline_failed", path=ctx.path)
            return _FALLBACK

    async def _run(self, ctx: RequestContext, receive: Receive) -> PipelineResponse | None:
        result: PipelineResponse | None = None

        async with anyio.create_task_group() as tg:

            async def run_pipeline() -> None:
                nonlocal result
                result = await self._execute(ctx)
                tg.cancel_scope.cancel()

            async def watch_disconnect() -> None:
                while True:
                    message: Message = await receive()
                    if message["type"] == "http.disconnect":
                        break
                tg.cancel_scope.cancel()

            tg.start_soon(watch_disconnect)
            tg.start_soon(run_pipeline)

        return result

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    for callback in self._on_startup:
                        await callback()
                except Exception as exc:
                    logger.exception("startup_failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                try:
                    for callback in self._on_shutdown:
                        await callback()
                except Exception as exc:
                    logger.exception("shutdown_failed")
                    await send({"type": "lifespan.shutdown.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.shutdown.complete"})
                return

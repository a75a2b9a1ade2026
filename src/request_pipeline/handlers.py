"""Terminal sinks — NotFoundHandler and ErrorHandler."""

from __future__ import annotations

from starlette.exceptions import HTTPException

from request_pipeline.context import RequestContext
from request_pipeline.exceptions import RouteNotFound, StageError
from request_pipeline.observability import get_logger
from request_pipeline.response import PipelineResponse

logger = get_logger(__name__)


class NotFoundHandler:
    """Answers requests that no stage responded to."""

    async def handle(self, ctx: RequestContext) -> PipelineResponse:
        error = RouteNotFound()
        return PipelineResponse.json(
            {"detail": error.detail, "path": ctx.path}, status_code=error.status_code
        )


class ErrorHandler:
    """Sole converter of errors into client-visible responses.

    Controlled errors keep their status and detail. Anything else becomes a
    generic 500; the traceback goes to the log only.
    """

    async def handle(self, ctx: RequestContext, error: BaseException) -> PipelineResponse:
        if isinstance(error, StageError):
            if error.status_code >= 500:
                logger.error("stage_error", detail=error.detail, status_code=error.status_code)
            return PipelineResponse.json(
                {"detail": error.detail},
                status_code=error.status_code,
                headers=error.headers,
            )

        if isinstance(error, HTTPException):
            return PipelineResponse.json(
                {"detail": error.detail},
                status_code=error.status_code,
                headers=error.headers or {},
            )

        logger.error(
            "unhandled_error",
            method=ctx.method,
            path=ctx.path,
            error_type=type(error).__name__,
            exc_info=error,
        )
        return PipelineResponse.json({"detail": "Internal Server Error"}, status_code=500)

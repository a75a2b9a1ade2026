"""Liveness probe stage."""

from __future__ import annotations

from request_pipeline.context import RequestContext
from request_pipeline.outcome import CONTINUE, Outcome, Respond
from request_pipeline.response import PipelineResponse
from request_pipeline.stage import Stage, StageCategory


class HealthCheck(Stage):
    """Answers ``GET``/``HEAD`` on the health path with ``{"status": "ok"}``.

    Runs in its own category ahead of routing, so an application route on
    the same path never shadows it.
    """

    category = StageCategory.HEALTH

    def __init__(self, path: str = "/health") -> None:
        self._path = path

    async def process(self, ctx: RequestContext) -> Outcome:
        if ctx.path == self._path and ctx.method in ("GET", "HEAD"):
            return Respond(PipelineResponse.json({"status": "ok"}))
        return CONTINUE

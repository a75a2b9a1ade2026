"""PipelineHook base and convenience hook classes."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from request_pipeline.context import RequestContext
from request_pipeline.outcome import Outcome
from request_pipeline.stage import Stage


class PipelineHook:
    """Base abstraction for lifecycle hooks. All methods are no-op by default."""

    async def on_pipeline_start(self, ctx: RequestContext) -> None:
        pass

    async def on_pipeline_end(self, ctx: RequestContext) -> None:
        pass

    async def on_stage(
        self,
        ctx: RequestContext,
        stage: Stage,
        outcome: Outcome,
    ) -> None:
        pass


class BeforePipeline(PipelineHook):
    """Convenience hook that only fires on pipeline start."""

    def __init__(self, callback: Callable[[RequestContext], Awaitable[None]]) -> None:
        self._callback = callback

    async def on_pipeline_start(self, ctx: RequestContext) -> None:
        await self._callback(ctx)


class AfterPipeline(PipelineHook):
    """Convenience hook that fires once the response is fixed."""

    def __init__(self, callback: Callable[[RequestContext], Awaitable[None]]) -> None:
        self._callback = callback

    async def on_pipeline_end(self, ctx: RequestContext) -> None:
        await self._callback(ctx)


class AfterStage(PipelineHook):
    """Convenience hook that fires after each stage."""

    def __init__(
        self,
        callback: Callable[[RequestContext, Stage, Outcome], Awaitable[None]],
    ) -> None:
        self._callback = callback

    async def on_stage(
        self,
        ctx: RequestContext,
        stage: Stage,
        outcome: Outcome,
    ) -> None:
        await self._callback(ctx, stage, outcome)

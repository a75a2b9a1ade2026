"""Tests for PipelineHook, BeforePipeline, AfterPipeline, AfterStage."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

from request_pipeline.context import RequestContext
from request_pipeline.exceptions import StageError
from request_pipeline.hooks import (
    AfterPipeline,
    AfterStage,
    BeforePipeline,
    PipelineHook,
)
from request_pipeline.outcome import CONTINUE, Continue, Fail, Outcome
from request_pipeline.pipeline import Pipeline
from request_pipeline.stage import Stage, StageCategory


class _AuthStub(Stage):
    category = StageCategory.AUTHENTICATION

    async def process(self, ctx: RequestContext) -> Outcome:
        ctx.state["auth"] = True
        return CONTINUE


class _CustomStub(Stage):
    category = StageCategory.CUSTOM

    async def process(self, ctx: RequestContext) -> Outcome:
        ctx.state["custom"] = True
        return CONTINUE


class _FailStub(Stage):
    category = StageCategory.CUSTOM

    async def process(self, ctx: RequestContext) -> Outcome:
        raise StageError("denied", status_code=403)


class TestPipelineHookBase:
    async def test_default_methods_are_noop(self, make_ctx: Any) -> None:
        class MinimalHook(PipelineHook):
            pass

        hook = MinimalHook()
        ctx = make_ctx()
        await hook.on_pipeline_start(ctx)
        await hook.on_pipeline_end(ctx)
        await hook.on_stage(ctx, _AuthStub(), CONTINUE)


class TestBeforePipeline:
    async def test_callback_fires_before_stages(self, make_ctx: Any) -> None:
        seen: list[bool] = []

        async def callback(ctx: RequestContext) -> None:
            seen.append("auth" in ctx.state)

        pipeline = Pipeline(_AuthStub()).add_hook(BeforePipeline(callback))
        await pipeline.execute(make_ctx())
        assert seen == [False]


class TestAfterPipeline:
    async def test_callback_sees_final_response(self, make_ctx: Any) -> None:
        statuses: list[int | None] = []

        async def callback(ctx: RequestContext) -> None:
            statuses.append(ctx.response.status_code if ctx.response else None)

        pipeline = Pipeline(_AuthStub()).add_hook(AfterPipeline(callback))
        await pipeline.execute(make_ctx())
        assert statuses == [404]

    async def test_fires_on_error(self, make_ctx: Any) -> None:
        callback = AsyncMock()
        pipeline = Pipeline(_FailStub()).add_hook(AfterPipeline(callback))
        await pipeline.execute(make_ctx())
        callback.assert_awaited_once()


class TestAfterStage:
    async def test_fires_per_stage_with_outcome(self, make_ctx: Any) -> None:
        callback = AsyncMock()
        pipeline = Pipeline(_AuthStub(), _CustomStub()).add_hook(AfterStage(callback))
        await pipeline.execute(make_ctx())
        assert callback.await_count == 2
        outcomes = [call.args[2] for call in callback.await_args_list]
        assert all(isinstance(o, Continue) for o in outcomes)

    async def test_receives_fail_outcome(self, make_ctx: Any) -> None:
        callback = AsyncMock()
        pipeline = Pipeline(_AuthStub(), _FailStub()).add_hook(AfterStage(callback))
        await pipeline.execute(make_ctx())
        last_outcome = callback.await_args_list[-1].args[2]
        assert isinstance(last_outcome, Fail)
        assert isinstance(last_outcome.error, StageError)

    async def test_add_hook_invalidates_cache(self) -> None:
        pipeline = Pipeline(_AuthStub())
        r1 = pipeline.resolve()
        pipeline.add_hook(AfterStage(AsyncMock()))
        r2 = pipeline.resolve()
        assert r1 is not r2
        assert len(r2.hooks) == 1


class TestFailingHooks:
    async def test_before_pipeline_failure_is_logged_and_ignored(
        self, make_ctx: Any
    ) -> None:
        pipeline = Pipeline(_AuthStub()).add_hook(
            BeforePipeline(AsyncMock(side_effect=RuntimeError("hook broke")))
        )
        ctx = make_ctx()
        response = await pipeline.execute(ctx)
        assert response.status_code == 404
        assert ctx.state["auth"] is True

    async def test_after_stage_failure_does_not_fail_request(
        self, make_ctx: Any
    ) -> None:
        after = AsyncMock()
        pipeline = (
            Pipeline(_AuthStub(), _CustomStub())
            .add_hook(AfterStage(AsyncMock(side_effect=RuntimeError("hook broke"))))
            .add_hook(AfterPipeline(after))
        )
        ctx = make_ctx()
        response = await pipeline.execute(ctx)
        assert response.status_code == 404
        assert ctx.state["custom"] is True
        after.assert_awaited_once()

    async def test_after_pipeline_failure_keeps_response(self, make_ctx: Any) -> None:
        pipeline = Pipeline(_FailStub()).add_hook(
            AfterPipeline(AsyncMock(side_effect=RuntimeError("hook broke")))
        )
        response = await pipeline.execute(make_ctx())
        assert response.status_code == 403

"""Pipeline — ordered container and execution driver for Stages."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from request_pipeline.context import RequestContext
from request_pipeline.exceptions import ResponseAlreadySet
from request_pipeline.handlers import ErrorHandler, NotFoundHandler
from request_pipeline.observability import get_logger
from request_pipeline.outcome import Fail, Outcome, Respond
from request_pipeline.response import PipelineResponse
from request_pipeline.stage import Stage
from request_pipeline.trace import PipelineTrace, TraceEntry

if TYPE_CHECKING:
    from request_pipeline.hooks import PipelineHook

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedPipeline:
    """Immutable, pre-computed execution plan."""

    stages: tuple[Stage, ...]
    not_found: NotFoundHandler
    error_handler: ErrorHandler
    hooks: tuple[PipelineHook, ...] = ()
    debug: bool = False


class Pipeline:
    """Ordered container of Stage instances plus the two terminal sinks."""

    def __init__(
        self,
        *stages: Stage | Pipeline,
        not_found: NotFoundHandler | None = None,
        error_handler: ErrorHandler | None = None,
        debug: bool = False,
    ) -> None:
        self._items: list[Stage | Pipeline] = list(stages)
        self._hooks: list[PipelineHook] = []
        self._not_found = not_found or NotFoundHandler()
        self._error_handler = error_handler or ErrorHandler()
        self._debug = debug
        self._resolved: ResolvedPipeline | None = None

    def add(self, *stages: Stage | Pipeline) -> Pipeline:
        self._items.extend(stages)
        self._resolved = None
        return self

    def add_hook(self, hook: PipelineHook) -> Pipeline:
        self._hooks.append(hook)
        self._resolved = None
        return self

    def resolve(self) -> ResolvedPipeline:
        if self._resolved is not None:
            return self._resolved

        flat: list[Stage] = []
        self._flatten(self._items, flat)

        sorted_stages = sorted(flat, key=lambda s: s.category.order)

        self._resolved = ResolvedPipeline(
            stages=tuple(sorted_stages),
            not_found=self._not_found,
            error_handler=self._error_handler,
            hooks=tuple(self._hooks),
            debug=self._debug,
        )
        return self._resolved

    @staticmethod
    def _flatten(items: list[Stage | Pipeline], out: list[Stage]) -> None:
        for item in items:
            if isinstance(item, Pipeline):
                Pipeline._flatten(item._items, out)
            elif isinstance(item, Stage):
                out.append(item)
            else:
                raise TypeError(f"Not a stage: {item!r}")

    async def execute(self, ctx: RequestContext) -> PipelineResponse:
        """Run one request through every stage and return the final response.

        Stages run in category order until one responds or fails. A failure
        skips straight to the error handler; if nothing responded the
        not-found handler answers. Stages that ran then observe the response
        in reverse order.
        """
        resolved = self.resolve()
        trace = PipelineTrace() if resolved.debug else None
        flow_start = time.perf_counter()

        for hook in resolved.hooks:
            await _call_hook(hook, "on_pipeline_start", ctx)

        ran: list[Stage] = []
        error: BaseException | None = None

        for stage in resolved.stages:
            ran.append(stage)
            stage_start = time.perf_counter()
            try:
                outcome: Outcome = await stage.process(ctx)
            except Exception as exc:
                outcome = Fail(exc)

            if trace is not None:
                trace.entries.append(_trace_entry(stage, outcome, stage_start))
            for hook in resolved.hooks:
                await _call_hook(hook, "on_stage", ctx, stage, outcome)

            if isinstance(outcome, Fail):
                error = outcome.error
                break
            if isinstance(outcome, Respond):
                if ctx.responded:
                    error = ResponseAlreadySet(f"{stage.name} responded twice")
                else:
                    ctx.respond(outcome.response)
                break
            if ctx.responded:
                break

        if error is None and not ctx.responded:
            try:
                ctx.respond(await resolved.not_found.handle(ctx))
            except Exception as exc:
                error = exc
            else:
                if trace is not None:
                    trace.outcome = "NOT_FOUND"

        if error is not None:
            response = await resolved.error_handler.handle(ctx, error)
            if ctx.responded:
                logger.error(
                    "error_after_response",
                    path=ctx.path,
                    error_type=type(error).__name__,
                )
            else:
                ctx.respond(response)
            if trace is not None:
                trace.outcome = "ERROR"
                trace.error = error

        for stage in reversed(ran):
            try:
                await stage.on_response(ctx)
            except Exception:
                logger.exception("on_response_failed", stage=stage.name)

        if trace is not None:
            trace.total_duration_ms = (time.perf_counter() - flow_start) * 1000
            ctx.state["trace"] = trace

        for hook in resolved.hooks:
            await _call_hook(hook, "on_pipeline_end", ctx)

        assert ctx.response is not None
        return ctx.response


async def _call_hook(hook: PipelineHook, method: str, *args: Any) -> None:
    # Hooks observe; a failing hook is logged and never alters the response.
    try:
        await getattr(hook, method)(*args)
    except Exception:
        logger.exception("hook_failed", hook=type(hook).__name__, method=method)


def _trace_entry(stage: Stage, outcome: Outcome, started: float) -> TraceEntry:
    elapsed = (time.perf_counter() - started) * 1000
    if isinstance(outcome, Fail):
        reason = getattr(outcome.error, "detail", None) or str(outcome.error)
        return TraceEntry(
            stage_name=stage.name,
            category=stage.category,
            duration_ms=elapsed,
            outcome="FAIL",
            reason=reason,
        )
    return TraceEntry(
        stage_name=stage.name,
        category=stage.category,
        duration_ms=elapsed,
        outcome="RESPOND" if isinstance(outcome, Respond) else "CONTINUE",
    )

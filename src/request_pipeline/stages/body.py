"""JSON body parsing stage."""

from __future__ import annotations

import json

from request_pipeline.context import RequestContext
from request_pipeline.exceptions import MalformedInput, PayloadTooLarge
from request_pipeline.outcome import CONTINUE, Outcome
from request_pipeline.stage import Stage, StageCategory

DEFAULT_LIMIT = 100 * 1024


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "application/json":
        return True
    return media_type.startswith("application/") and media_type.endswith("+json")


class JSONBodyParser(Stage):
    """Decodes JSON request bodies into ``ctx.body``.

    Only requests declaring a JSON content type with a non-empty body are
    touched. In strict mode the top-level value must be an object or array.
    A body the server stopped reading at its size limit is rejected whatever
    its content type.
    """

    category = StageCategory.BODY_PARSING

    def __init__(self, *, limit: int = DEFAULT_LIMIT, strict: bool = True) -> None:
        self._limit = limit
        self._strict = strict

    async def process(self, ctx: RequestContext) -> Outcome:
        if ctx.body_too_large:
            raise PayloadTooLarge()

        content_type = ctx.headers.get("content-type", "")
        if not _is_json(content_type) or not ctx.raw_body:
            return CONTINUE

        if len(ctx.raw_body) > self._limit:
            raise PayloadTooLarge(f"Request body exceeds {self._limit} bytes")

        try:
            text = ctx.raw_body.decode("utf-8")
        except UnicodeDecodeError:
            raise MalformedInput("Request body is not valid UTF-8") from None

        try:
            value = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedInput(f"Invalid JSON: {exc.msg}") from None

        if self._strict and not isinstance(value, (dict, list)):
            raise MalformedInput("JSON body must be an object or array")

        ctx.body = value
        return CONTINUE

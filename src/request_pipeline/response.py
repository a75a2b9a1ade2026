"""PipelineResponse — the value a terminal stage writes into the context."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse, Response


@dataclass(frozen=True)
class PipelineResponse:
    """Status, JSON-able body and headers of a finished request."""

    status_code: int = 200
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def json(
        cls,
        body: Any,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> PipelineResponse:
        return cls(status_code=status_code, body=body, headers=dict(headers or {}))

    @classmethod
    def empty(
        cls, status_code: int = 204, headers: Mapping[str, str] | None = None
    ) -> PipelineResponse:
        return cls(status_code=status_code, body=None, headers=dict(headers or {}))

    def with_default_headers(self, defaults: Mapping[str, str]) -> PipelineResponse:
        """Return a copy where ``defaults`` fill in headers not already set."""
        if not defaults:
            return self
        own = {k.lower() for k in self.headers}
        merged = {k: v for k, v in defaults.items() if k.lower() not in own}
        merged.update(self.headers)
        return replace(self, headers=merged)

    def to_starlette(self) -> Response:
        if self.body is None:
            return Response(status_code=self.status_code, headers=dict(self.headers))
        return JSONResponse(
            content=jsonable_encoder(self.body),
            status_code=self.status_code,
            headers=dict(self.headers),
        )

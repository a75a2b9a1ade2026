"""RequestContext — per-request state threaded through the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from starlette.datastructures import Headers, QueryParams
from starlette.requests import Request

from request_pipeline.exceptions import IdentityAlreadyAttached, ResponseAlreadySet
from request_pipeline.identity import Identity
from request_pipeline.response import PipelineResponse


@dataclass
class RequestContext:
    """Per-request state container mutated by pipeline stages.

    ``identity`` and ``response`` are write-once slots: use
    ``attach_identity()`` and ``respond()`` to fill them. ``body_too_large``
    is set when the upload was cut off at the size limit; ``raw_body`` is
    then empty.
    """

    request: Request
    raw_body: bytes = b""
    body_too_large: bool = False
    body: Any = None
    path_params: dict[str, Any] = field(default_factory=dict)
    response_headers: dict[str, str] = field(default_factory=dict)
    state: dict[str, Any] = field(default_factory=dict)
    _identity: Identity | None = field(default=None, init=False, repr=False)
    _response: PipelineResponse | None = field(default=None, init=False, repr=False)

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def path(self) -> str:
        return self.request.url.path

    @property
    def headers(self) -> Headers:
        return self.request.headers

    @property
    def query_params(self) -> QueryParams:
        return self.request.query_params

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def attach_identity(self, identity: Identity) -> None:
        if self._identity is not None:
            raise IdentityAlreadyAttached("Identity already attached to this request")
        self._identity = identity

    @property
    def response(self) -> PipelineResponse | None:
        return self._response

    @property
    def responded(self) -> bool:
        return self._response is not None

    def respond(self, response: PipelineResponse) -> PipelineResponse:
        """Fix the final response, filling in headers stages contributed."""
        if self._response is not None:
            raise ResponseAlreadySet("Response already written for this request")
        self._response = response.with_default_headers(self.response_headers)
        return self._response

"""Shared pytest fixtures for request-pipeline tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest
from starlette.requests import Request

from request_pipeline.config import Settings
from request_pipeline.context import RequestContext
from request_pipeline.identity import Identity


@pytest.fixture
def make_request() -> Any:
    """Factory for creating Starlette Request objects without a server."""

    def _make(
        method: str = "GET",
        path: str = "/",
        headers: dict[str, str] | None = None,
        query_string: str = "",
    ) -> Request:
        scope: dict[str, Any] = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string.encode(),
            "headers": [
                (k.lower().encode(), v.encode()) for k, v in (headers or {}).items()
            ],
            "root_path": "",
            "scheme": "http",
            "server": ("testserver", 80),
        }
        return Request(scope)

    return _make


@pytest.fixture
def make_ctx(make_request: Any) -> Any:
    """Factory for RequestContext objects with an optional raw body."""

    def _make(
        method: str = "GET",
        path: str = "/",
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        query_string: str = "",
    ) -> RequestContext:
        request = make_request(
            method=method, path=path, headers=headers, query_string=query_string
        )
        return RequestContext(request=request, raw_body=body)

    return _make


@pytest.fixture
def sample_identity() -> Identity:
    return Identity(
        subject="user_123",
        session_id="sess_456",
        claims={"sub": "user_123", "sid": "sess_456", "roles": ["admin", "member"]},
    )


@pytest.fixture
def mock_verify(sample_identity: Identity) -> AsyncMock:
    """Mock async verification callback returning the sample identity."""
    return AsyncMock(return_value=sample_identity)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the process environment and any .env file."""
    return Settings(
        _env_file=None,
        cors_origin="http://frontend.test",
        cors_allow_credentials=True,
        auth_timeout_seconds=0.5,
    )

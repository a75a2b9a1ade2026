"""Shared type aliases."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from request_pipeline.context import RequestContext

# Callback types used by routing and identity verification
RouteHandler = Callable[["RequestContext"], Awaitable[Any]]
VerifyCallback = Callable[[str], Awaitable[Any]]
ASGICallable = Callable[[], Awaitable[None]]

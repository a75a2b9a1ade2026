"""Route guards — per-route authentication enforcement."""

from __future__ import annotations

from abc import ABC, abstractmethod

from request_pipeline.context import RequestContext
from request_pipeline.exceptions import AuthenticationRequired, Forbidden


class RouteGuard(ABC):
    """Check run before a route handler. Raises to refuse the request."""

    @abstractmethod
    async def check(self, ctx: RequestContext) -> None: ...


class RequireIdentity(RouteGuard):
    """Asserts an identity was attached."""

    async def check(self, ctx: RequestContext) -> None:
        if ctx.identity is None:
            raise AuthenticationRequired()


class HasRole(RouteGuard):
    """Asserts the attached identity carries the given role."""

    def __init__(self, role: str) -> None:
        self._role = role

    async def check(self, ctx: RequestContext) -> None:
        if ctx.identity is None:
            raise AuthenticationRequired()
        if self._role not in ctx.identity.roles:
            raise Forbidden(f"Role '{self._role}' required")

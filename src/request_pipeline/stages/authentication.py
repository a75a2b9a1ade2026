"""Advisory authentication stage — attaches an identity, never rejects."""

from __future__ import annotations

import asyncio

from request_pipeline.context import RequestContext
from request_pipeline.exceptions import IdentityError
from request_pipeline.identity import Credentials, IdentityProvider
from request_pipeline.observability import get_logger
from request_pipeline.outcome import CONTINUE, Outcome
from request_pipeline.stage import Stage, StageCategory

logger = get_logger(__name__)

DEFAULT_SESSION_COOKIE = "__session"


def extract_credentials(
    ctx: RequestContext,
    *,
    scheme: str = "Bearer",
    header: str = "Authorization",
    cookie_name: str | None = DEFAULT_SESSION_COOKIE,
) -> Credentials | None:
    """Pull a token from the Authorization header, else from the session cookie."""
    auth_value = ctx.headers.get(header)
    if auth_value:
        parts = auth_value.split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == scheme.lower() and parts[1].strip():
            return Credentials(token=parts[1].strip(), source="header")

    if cookie_name:
        cookie_value = ctx.request.cookies.get(cookie_name)
        if cookie_value:
            return Credentials(token=cookie_value, source="cookie")
    return None


class AuthAttachment(Stage):
    """Verifies caller credentials and attaches the identity when valid.

    Missing, invalid or unverifiable credentials leave ``ctx.identity``
    empty; enforcement is left to route guards.
    """

    category = StageCategory.AUTHENTICATION

    def __init__(
        self,
        provider: IdentityProvider,
        *,
        timeout: float = 5.0,
        cookie_name: str | None = DEFAULT_SESSION_COOKIE,
    ) -> None:
        self._provider = provider
        self._timeout = timeout
        self._cookie_name = cookie_name

    async def process(self, ctx: RequestContext) -> Outcome:
        credentials = extract_credentials(ctx, cookie_name=self._cookie_name)
        if credentials is None:
            return CONTINUE

        try:
            identity = await asyncio.wait_for(
                self._provider.verify(credentials), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning("identity_timeout", timeout=self._timeout, source=credentials.source)
            return CONTINUE
        except IdentityError as exc:
            logger.info(
                "identity_rejected",
                reason=str(exc),
                error_type=type(exc).__name__,
                source=credentials.source,
            )
            return CONTINUE
        except Exception:
            logger.exception(
                "identity_provider_failed",
                provider=type(self._provider).__name__,
                source=credentials.source,
            )
            return CONTINUE

        if identity is not None:
            ctx.attach_identity(identity)
        return CONTINUE

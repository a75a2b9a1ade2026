"""Application factory wiring the standard request pipeline."""

from __future__ import annotations

from collections.abc import Sequence

from uvicorn.importer import import_from_string

from request_pipeline.asgi import PipelineApp
from request_pipeline.config import Settings, get_settings
from request_pipeline.hooks import PipelineHook
from request_pipeline.identity import (
    IdentityProvider,
    JWTIdentityProvider,
    NullIdentityProvider,
    RemoteIdentityProvider,
)
from request_pipeline.pipeline import Pipeline
from request_pipeline.stages.authentication import AuthAttachment
from request_pipeline.stages.body import JSONBodyParser
from request_pipeline.stages.cors import CORSPolicy
from request_pipeline.stages.health import HealthCheck
from request_pipeline.stages.logging import RequestLogger
from request_pipeline.stages.routing import Router


def build_identity_provider(settings: Settings) -> IdentityProvider:
    """Pick the identity provider the settings describe."""
    if settings.identity_jwt_key:
        return JWTIdentityProvider(
            settings.identity_jwt_key,
            algorithms=settings.identity_jwt_algorithms,
            issuer=settings.identity_jwt_issuer,
            audience=settings.identity_jwt_audience,
            authorized_parties=settings.identity_authorized_parties,
        )
    if settings.identity_verify_url:
        return RemoteIdentityProvider(
            settings.identity_verify_url, timeout=settings.auth_timeout_seconds
        )
    return NullIdentityProvider()


def load_router(settings: Settings) -> Router:
    """Import the application router named by ``settings.app_router``."""
    if not settings.app_router:
        return Router()
    router = import_from_string(settings.app_router)
    if not isinstance(router, Router):
        raise TypeError(f"{settings.app_router} is not a Router")
    return router


def build_pipeline(
    settings: Settings,
    *,
    router: Router,
    identity_provider: IdentityProvider,
) -> Pipeline:
    return Pipeline(
        RequestLogger(),
        JSONBodyParser(limit=settings.body_limit_bytes),
        CORSPolicy(
            settings.cors_origin,
            allow_credentials=settings.cors_allow_credentials,
            reject_disallowed=settings.cors_reject_disallowed,
        ),
        AuthAttachment(
            identity_provider,
            timeout=settings.auth_timeout_seconds,
            cookie_name=settings.session_cookie,
        ),
        HealthCheck(),
        router,
        debug=settings.debug,
    )


def create_app(
    settings: Settings | None = None,
    *,
    router: Router | None = None,
    identity_provider: IdentityProvider | None = None,
    hooks: Sequence[PipelineHook] = (),
) -> PipelineApp:
    """Compose logger, body parser, CORS, auth, health check and router."""
    settings = settings or get_settings()
    router = router if router is not None else load_router(settings)
    provider = identity_provider or build_identity_provider(settings)

    pipeline = build_pipeline(settings, router=router, identity_provider=provider)
    for hook in hooks:
        pipeline.add_hook(hook)

    return PipelineApp(
        pipeline,
        on_shutdown=[provider.aclose],
        body_limit=settings.body_limit_bytes,
    )

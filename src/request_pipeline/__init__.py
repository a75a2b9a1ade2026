"""Request Pipeline - an ordered, async request-handling pipeline for HTTP servers."""

from request_pipeline.app import create_app
from request_pipeline.asgi import PipelineApp
from request_pipeline.config import Settings, get_settings
from request_pipeline.context import RequestContext
from request_pipeline.exceptions import (
    AuthenticationRequired,
    Forbidden,
    IdentityAlreadyAttached,
    IdentityError,
    IdentityUnavailable,
    InvalidCredentials,
    MalformedInput,
    PayloadTooLarge,
    PipelineException,
    PolicyRejected,
    ResponseAlreadySet,
    RouteNotFound,
    StageError,
)
from request_pipeline.handlers import ErrorHandler, NotFoundHandler
from request_pipeline.hooks import AfterPipeline, AfterStage, BeforePipeline, PipelineHook
from request_pipeline.identity import (
    CallbackIdentityProvider,
    Credentials,
    Identity,
    IdentityProvider,
    JWTIdentityProvider,
    NullIdentityProvider,
    RemoteIdentityProvider,
)
from request_pipeline.outcome import CONTINUE, Continue, Fail, Outcome, Respond
from request_pipeline.pipeline import Pipeline
from request_pipeline.response import PipelineResponse
from request_pipeline.stage import Stage, StageCategory
from request_pipeline.stages import (
    AuthAttachment,
    CORSPolicy,
    HasRole,
    HealthCheck,
    JSONBodyParser,
    RequestLogger,
    RequireIdentity,
    Route,
    RouteGuard,
    Router,
)
from request_pipeline.trace import PipelineTrace, TraceEntry

__all__ = [
    "CONTINUE",
    "AfterPipeline",
    "AfterStage",
    "AuthAttachment",
    "AuthenticationRequired",
    "BeforePipeline",
    "CORSPolicy",
    "CallbackIdentityProvider",
    "Continue",
    "Credentials",
    "ErrorHandler",
    "Fail",
    "Forbidden",
    "HasRole",
    "HealthCheck",
    "Identity",
    "IdentityAlreadyAttached",
    "IdentityError",
    "IdentityProvider",
    "IdentityUnavailable",
    "InvalidCredentials",
    "JSONBodyParser",
    "JWTIdentityProvider",
    "MalformedInput",
    "NotFoundHandler",
    "NullIdentityProvider",
    "Outcome",
    "PayloadTooLarge",
    "Pipeline",
    "PipelineApp",
    "PipelineException",
    "PipelineHook",
    "PipelineResponse",
    "PipelineTrace",
    "PolicyRejected",
    "RemoteIdentityProvider",
    "RequestContext",
    "RequestLogger",
    "RequireIdentity",
    "Respond",
    "ResponseAlreadySet",
    "Route",
    "RouteGuard",
    "RouteNotFound",
    "Router",
    "Settings",
    "Stage",
    "StageCategory",
    "StageError",
    "TraceEntry",
    "create_app",
    "get_settings",
]

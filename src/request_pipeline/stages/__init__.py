"""Built-in pipeline stages."""

from request_pipeline.stages.authentication import AuthAttachment, extract_credentials
from request_pipeline.stages.body import JSONBodyParser
from request_pipeline.stages.cors import CORSPolicy
from request_pipeline.stages.guards import HasRole, RequireIdentity, RouteGuard
from request_pipeline.stages.health import HealthCheck
from request_pipeline.stages.logging import RequestLogger
from request_pipeline.stages.routing import Route, Router

__all__ = [
    "AuthAttachment",
    "CORSPolicy",
    "HasRole",
    "HealthCheck",
    "JSONBodyParser",
    "RequestLogger",
    "RequireIdentity",
    "Route",
    "RouteGuard",
    "Router",
    "extract_credentials",
]

"""PipelineException hierarchy for stage failures and write-once violations."""

from __future__ import annotations

from collections.abc import Mapping


class PipelineException(Exception):
    """Base for all pipeline exceptions."""


class StageError(PipelineException):
    """Controlled failure with an HTTP status code and a client-safe detail."""

    def __init__(
        self,
        detail: str,
        *,
        status_code: int = 400,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.headers = dict(headers or {})


class MalformedInput(StageError):
    """Request body could not be decoded (400)."""

    def __init__(self, detail: str = "Malformed request body") -> None:
        super().__init__(detail, status_code=400)


class PayloadTooLarge(StageError):
    """Request body exceeds the configured limit (413)."""

    def __init__(self, detail: str = "Request body too large") -> None:
        super().__init__(detail, status_code=413)


class PolicyRejected(StageError):
    """Cross-origin request rejected by the CORS policy (403)."""

    def __init__(self, detail: str = "Origin not allowed") -> None:
        super().__init__(detail, status_code=403)


class AuthenticationRequired(StageError):
    """Route requires an attached identity (401)."""

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(detail, status_code=401, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(StageError):
    """Identity lacks a required role (403)."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(detail, status_code=403)


class RouteNotFound(StageError):
    """No route matched (404)."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(detail, status_code=404)


class IdentityError(PipelineException):
    """Identity provider could not produce an identity. Never client-visible."""


class InvalidCredentials(IdentityError):
    """Credentials were presented but did not verify."""


class IdentityUnavailable(IdentityError):
    """Identity provider could not be reached or answered unexpectedly."""


class IdentityAlreadyAttached(PipelineException):
    """The authentication slot was written twice for one request."""


class ResponseAlreadySet(PipelineException):
    """A second terminal stage tried to write the response."""

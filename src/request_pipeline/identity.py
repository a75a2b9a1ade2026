"""Identity value, credentials and the IdentityProvider implementations.

The pipeline only consumes the ``IdentityProvider`` contract::

    async verify(credentials) -> Identity | None

Three providers ship with the package:

- ``CallbackIdentityProvider`` wraps any async callable, useful for tests and
  for bridging an existing verification function.
- ``JWTIdentityProvider`` verifies session tokens locally with PyJWT
  (issuer, audience and ``azp`` authorized-party checks, as hosted identity
  services such as Clerk issue them).
- ``RemoteIdentityProvider`` asks a verification endpoint over HTTP.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, runtime_checkable

import httpx
import jwt

from request_pipeline._types import VerifyCallback
from request_pipeline.exceptions import IdentityUnavailable, InvalidCredentials


@dataclass(frozen=True)
class Credentials:
    """Raw caller credentials pulled off the request."""

    token: str
    source: Literal["header", "cookie"] = "header"


@dataclass(frozen=True)
class Identity:
    """Verified caller identity attached to the request context."""

    subject: str
    session_id: str | None = None
    claims: Mapping[str, Any] = field(default_factory=dict)

    @property
    def roles(self) -> frozenset[str]:
        roles = self.claims.get("roles")
        if isinstance(roles, (list, tuple, set, frozenset)):
            return frozenset(str(r) for r in roles)
        single = self.claims.get("role") or self.claims.get("org_role")
        return frozenset({str(single)}) if single else frozenset()

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> Identity:
        subject = claims.get("sub")
        if not subject:
            raise InvalidCredentials("Token has no subject")
        return cls(subject=str(subject), session_id=claims.get("sid"), claims=dict(claims))


@runtime_checkable
class IdentityProvider(Protocol):
    """External verifier of caller credentials."""

    async def verify(self, credentials: Credentials) -> Identity | None: ...
    async def aclose(self) -> None: ...


class NullIdentityProvider:
    """Provider used when no identity backend is configured."""

    async def verify(self, credentials: Credentials) -> Identity | None:
        return None

    async def aclose(self) -> None:
        pass


class CallbackIdentityProvider:
    """Delegates verification to an async callback."""

    def __init__(self, verify: VerifyCallback) -> None:
        self._verify = verify

    async def verify(self, credentials: Credentials) -> Identity | None:
        try:
            result = await self._verify(credentials.token)
        except (InvalidCredentials, IdentityUnavailable):
            raise
        except Exception as exc:
            raise InvalidCredentials(str(exc)) from exc

        if result is None or isinstance(result, Identity):
            return result
        if isinstance(result, Mapping):
            return Identity.from_claims(result)
        return Identity(subject=str(result))

    async def aclose(self) -> None:
        pass


class JWTIdentityProvider:
    """Verifies signed session tokens with a static key."""

    def __init__(
        self,
        key: str,
        *,
        algorithms: Sequence[str] = ("RS256",),
        issuer: str | None = None,
        audience: str | None = None,
        authorized_parties: Sequence[str] = (),
        leeway: float = 5.0,
    ) -> None:
        self._key = key
        self._algorithms = list(algorithms)
        self._issuer = issuer
        self._audience = audience
        self._authorized_parties = frozenset(authorized_parties)
        self._leeway = leeway

    async def verify(self, credentials: Credentials) -> Identity | None:
        options = {"verify_aud": self._audience is not None}
        try:
            claims = jwt.decode(
                credentials.token,
                self._key,
                algorithms=self._algorithms,
                issuer=self._issuer,
                audience=self._audience,
                leeway=self._leeway,
                options=options,
            )
        except jwt.PyJWTError as exc:
            raise InvalidCredentials(str(exc)) from exc

        azp = claims.get("azp")
        if self._authorized_parties and azp not in self._authorized_parties:
            raise InvalidCredentials(f"Unauthorized party: {azp}")

        return Identity.from_claims(claims)

    async def aclose(self) -> None:
        pass


class RemoteIdentityProvider:
    """Forwards the token to a verification endpoint.

    ``200`` with a JSON claims object verifies; ``401``/``403`` reject;
    transport errors and any other status mean the provider is unavailable.
    """

    def __init__(
        self,
        verify_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
    ) -> None:
        self._verify_url = verify_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def verify(self, credentials: Credentials) -> Identity | None:
        try:
            response = await self._client.get(
                self._verify_url,
                headers={"Authorization": f"Bearer {credentials.token}"},
            )
        except httpx.HTTPError as exc:
            raise IdentityUnavailable(str(exc)) from exc

        if response.status_code in (401, 403):
            raise InvalidCredentials(f"Rejected by provider ({response.status_code})")
        if response.status_code != 200:
            raise IdentityUnavailable(f"Unexpected provider status {response.status_code}")

        try:
            claims = response.json()
        except ValueError as exc:
            raise IdentityUnavailable("Provider returned invalid JSON") from exc
        if not isinstance(claims, Mapping):
            raise IdentityUnavailable("Provider returned a non-object payload")
        return Identity.from_claims(claims)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

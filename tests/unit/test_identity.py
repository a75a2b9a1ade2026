"""Tests for Identity and the identity providers."""

from __future__ import annotations

import time
from typing import Any
from unittest.mock import AsyncMock

import httpx
import jwt
import pytest

from request_pipeline.exceptions import IdentityUnavailable, InvalidCredentials
from request_pipeline.identity import (
    CallbackIdentityProvider,
    Credentials,
    Identity,
    IdentityProvider,
    JWTIdentityProvider,
    NullIdentityProvider,
    RemoteIdentityProvider,
)

SECRET = "test-secret-key-with-enough-length-for-hs256"


def _token(**claims: Any) -> str:
    payload = {"sub": "user_1", "iat": int(time.time()), "exp": int(time.time()) + 60}
    payload.update(claims)
    return jwt.encode(payload, SECRET, algorithm="HS256")


class TestIdentity:
    def test_from_claims(self) -> None:
        identity = Identity.from_claims({"sub": "u1", "sid": "s1", "extra": 1})
        assert identity.subject == "u1"
        assert identity.session_id == "s1"
        assert identity.claims["extra"] == 1

    def test_from_claims_requires_subject(self) -> None:
        with pytest.raises(InvalidCredentials):
            Identity.from_claims({"sid": "s1"})

    def test_roles_from_list(self) -> None:
        identity = Identity(subject="u", claims={"roles": ["admin", "member"]})
        assert identity.roles == frozenset({"admin", "member"})

    def test_roles_from_single_claim(self) -> None:
        assert Identity(subject="u", claims={"org_role": "admin"}).roles == {"admin"}

    def test_no_roles(self) -> None:
        assert Identity(subject="u").roles == frozenset()


class TestProtocolConformance:
    @pytest.mark.parametrize(
        "provider",
        [
            NullIdentityProvider(),
            CallbackIdentityProvider(AsyncMock()),
            JWTIdentityProvider(SECRET, algorithms=["HS256"]),
        ],
    )
    def test_is_identity_provider(self, provider: Any) -> None:
        assert isinstance(provider, IdentityProvider)


class TestNullIdentityProvider:
    async def test_never_verifies(self) -> None:
        assert await NullIdentityProvider().verify(Credentials(token="t")) is None


class TestCallbackIdentityProvider:
    async def test_passes_token_to_callback(self, mock_verify: AsyncMock) -> None:
        provider = CallbackIdentityProvider(mock_verify)
        identity = await provider.verify(Credentials(token="tok"))
        mock_verify.assert_awaited_once_with("tok")
        assert identity is mock_verify.return_value

    async def test_mapping_result_becomes_identity(self) -> None:
        provider = CallbackIdentityProvider(AsyncMock(return_value={"sub": "u9"}))
        identity = await provider.verify(Credentials(token="tok"))
        assert identity == Identity(subject="u9", claims={"sub": "u9"})

    async def test_none_result(self) -> None:
        provider = CallbackIdentityProvider(AsyncMock(return_value=None))
        assert await provider.verify(Credentials(token="tok")) is None

    async def test_callback_error_becomes_invalid_credentials(self) -> None:
        provider = CallbackIdentityProvider(AsyncMock(side_effect=ValueError("bad")))
        with pytest.raises(InvalidCredentials):
            await provider.verify(Credentials(token="tok"))

    async def test_unavailable_passes_through(self) -> None:
        provider = CallbackIdentityProvider(
            AsyncMock(side_effect=IdentityUnavailable("down"))
        )
        with pytest.raises(IdentityUnavailable):
            await provider.verify(Credentials(token="tok"))


class TestJWTIdentityProvider:
    async def test_valid_token(self) -> None:
        provider = JWTIdentityProvider(SECRET, algorithms=["HS256"])
        identity = await provider.verify(Credentials(token=_token(sid="sess_1")))
        assert identity is not None
        assert identity.subject == "user_1"
        assert identity.session_id == "sess_1"

    async def test_bad_signature(self) -> None:
        provider = JWTIdentityProvider("another-secret-key-of-sufficient-length", algorithms=["HS256"])
        with pytest.raises(InvalidCredentials):
            await provider.verify(Credentials(token=_token()))

    async def test_expired_token(self) -> None:
        provider = JWTIdentityProvider(SECRET, algorithms=["HS256"], leeway=0)
        token = _token(exp=int(time.time()) - 120)
        with pytest.raises(InvalidCredentials):
            await provider.verify(Credentials(token=token))

    async def test_garbage_token(self) -> None:
        provider = JWTIdentityProvider(SECRET, algorithms=["HS256"])
        with pytest.raises(InvalidCredentials):
            await provider.verify(Credentials(token="not-a-jwt"))

    async def test_issuer_checked(self) -> None:
        provider = JWTIdentityProvider(
            SECRET, algorithms=["HS256"], issuer="https://issuer.test"
        )
        with pytest.raises(InvalidCredentials):
            await provider.verify(Credentials(token=_token(iss="https://evil.test")))
        identity = await provider.verify(
            Credentials(token=_token(iss="https://issuer.test"))
        )
        assert identity is not None

    async def test_audience_ignored_unless_configured(self) -> None:
        provider = JWTIdentityProvider(SECRET, algorithms=["HS256"])
        identity = await provider.verify(Credentials(token=_token(aud="some-api")))
        assert identity is not None

    async def test_authorized_parties(self) -> None:
        provider = JWTIdentityProvider(
            SECRET, algorithms=["HS256"], authorized_parties=["http://frontend.test"]
        )
        with pytest.raises(InvalidCredentials):
            await provider.verify(Credentials(token=_token(azp="http://evil.test")))
        identity = await provider.verify(
            Credentials(token=_token(azp="http://frontend.test"))
        )
        assert identity is not None


def _remote(handler: Any) -> RemoteIdentityProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RemoteIdentityProvider("http://idp.test/verify", client=client)


class TestRemoteIdentityProvider:
    async def test_verified(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["authorization"])
            return httpx.Response(200, json={"sub": "remote_user", "sid": "s"})

        identity = await _remote(handler).verify(Credentials(token="tok"))
        assert seen == ["Bearer tok"]
        assert identity is not None
        assert identity.subject == "remote_user"

    async def test_rejected(self) -> None:
        provider = _remote(lambda request: httpx.Response(401))
        with pytest.raises(InvalidCredentials):
            await provider.verify(Credentials(token="tok"))

    async def test_server_error_is_unavailable(self) -> None:
        provider = _remote(lambda request: httpx.Response(503))
        with pytest.raises(IdentityUnavailable):
            await provider.verify(Credentials(token="tok"))

    async def test_transport_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(IdentityUnavailable):
            await _remote(handler).verify(Credentials(token="tok"))

    async def test_non_json_is_unavailable(self) -> None:
        provider = _remote(lambda request: httpx.Response(200, text="ok"))
        with pytest.raises(IdentityUnavailable):
            await provider.verify(Credentials(token="tok"))

    async def test_borrowed_client_not_closed(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        provider = RemoteIdentityProvider("http://idp.test/verify", client=client)
        await provider.aclose()
        assert client.is_closed is False
        await client.aclose()

    async def test_owned_client_closed(self) -> None:
        provider = RemoteIdentityProvider("http://idp.test/verify")
        await provider.aclose()
        assert provider._client.is_closed is True

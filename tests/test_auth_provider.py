"""
Tests for token verification against the hosted auth service and locally
"""

from datetime import timedelta

import httpx
import pytest

from tripdesk.config import load_settings
from tripdesk.services.auth_provider import (
    JWTAuthProvider, SupabaseAuthProvider, build_auth_provider
)
from tripdesk.utils.security import create_access_token

BASE_URL = "https://proj.supabase.co"


def supabase_provider(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return SupabaseAuthProvider(BASE_URL, "anon-key", client=client)


class TestSupabaseAuthProvider:

    def test_resolves_user(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["apikey"] = request.headers.get("apikey")
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"id": "u-1", "email": "u@example.com", "is_super_admin": True})

        user = supabase_provider(handler).get_user("user-token")

        assert user.id == "u-1"
        assert user.email == "u@example.com"
        assert user.is_super_admin is True
        assert seen == {
            "url": f"{BASE_URL}/auth/v1/user",
            "apikey": "anon-key",
            "auth": "Bearer user-token",
        }

    def test_super_admin_must_be_true(self):
        def handler(request):
            return httpx.Response(200, json={"id": "u-1", "is_super_admin": "yes"})

        assert supabase_provider(handler).get_user("t").is_super_admin is False

    @pytest.mark.parametrize("response", [
        httpx.Response(401, json={"msg": "invalid JWT"}),
        httpx.Response(500, text="upstream down"),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"email": "no-id@example.com"}),
        httpx.Response(200, json=["unexpected"]),
    ])
    def test_unresolvable(self, response):
        assert supabase_provider(lambda request: response).get_user("t") is None

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert supabase_provider(handler).get_user("t") is None


class TestJWTAuthProvider:

    def test_valid_token(self):
        provider = JWTAuthProvider("secret")
        token = create_access_token({"sub": "u-1", "email": "u@example.com"}, "secret")

        user = provider.get_user(token)
        assert user.id == "u-1"
        assert user.email == "u@example.com"
        assert user.is_super_admin is False

    def test_super_admin_from_app_metadata(self):
        provider = JWTAuthProvider("secret")
        token = create_access_token({"sub": "u-1", "app_metadata": {"is_super_admin": True}}, "secret")
        assert provider.get_user(token).is_super_admin is True

    @pytest.mark.parametrize("token", [
        create_access_token({"sub": "u-1"}, "other-secret"),
        create_access_token({"sub": "u-1"}, "secret", expires_delta=timedelta(seconds=-1)),
        create_access_token({"email": "no-sub@example.com"}, "secret"),
        "not.a.jwt",
    ])
    def test_rejected(self, token):
        assert JWTAuthProvider("secret").get_user(token) is None


class TestBuildAuthProvider:

    def test_jwt(self):
        settings = load_settings(database_url="sqlite://", auth_provider="jwt", jwt_secret="s")
        provider = build_auth_provider(settings)
        assert isinstance(provider, JWTAuthProvider)
        assert provider.secret == "s"

    def test_supabase_prefers_anon_key(self, monkeypatch):
        for name in ("SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY"):
            monkeypatch.delenv(name, raising=False)
        settings = load_settings(
            database_url="sqlite://",
            auth_provider="supabase",
            supabase_url="https://proj.supabase.co/",
            service_role_key="service-key",
            anon_key="anon-key",
        )
        provider = build_auth_provider(settings)
        try:
            assert isinstance(provider, SupabaseAuthProvider)
            assert provider.api_key == "anon-key"
            assert provider.base_url == "https://proj.supabase.co"
        finally:
            provider.close()

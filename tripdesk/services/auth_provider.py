"""
Auth providers

Resolve a bearer token to the identity behind it. The hosted provider asks the
auth service who the token belongs to; the JWT provider verifies the token
signature locally with the project's JWT secret.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..config import Settings, AuthProviderType
from ..utils.security import decode_token

logger = logging.getLogger(__name__)


@dataclass
class AuthUser:
    id: str
    email: Optional[str] = None
    is_super_admin: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "is_super_admin": self.is_super_admin}


class AuthProvider:
    def get_user(self, token: str) -> Optional[AuthUser]:
        """Return the identity for `token`, or None if it cannot be resolved."""
        raise NotImplementedError

    def close(self):
        pass


class SupabaseAuthProvider(AuthProvider):
    """Looks tokens up through `GET {base_url}/auth/v1/user`."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.client = client or httpx.Client(timeout=timeout)

    def get_user(self, token: str) -> Optional[AuthUser]:
        try:
            response = self.client.get(
                f"{self.base_url}/auth/v1/user",
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {token}",
                },
            )
        except httpx.HTTPError as e:
            logger.warning(f"Token verification request failed: {e}")
            return None

        if response.status_code != 200:
            logger.info(f"Token verification rejected with status {response.status_code}")
            return None

        try:
            data = response.json()
        except ValueError:
            logger.warning("Token verification returned a non-JSON body")
            return None

        if not isinstance(data, dict) or not data.get("id"):
            return None

        return AuthUser(
            id=str(data["id"]),
            email=data.get("email"),
            is_super_admin=data.get("is_super_admin") is True,
        )

    def close(self):
        self.client.close()


class JWTAuthProvider(AuthProvider):
    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def get_user(self, token: str) -> Optional[AuthUser]:
        payload = decode_token(token, self.secret, self.algorithm)
        if not payload or not payload.get("sub"):
            return None

        app_metadata = payload.get("app_metadata") or {}
        is_super_admin = (
            payload.get("is_super_admin") is True
            or app_metadata.get("is_super_admin") is True
        )
        return AuthUser(
            id=str(payload["sub"]),
            email=payload.get("email"),
            is_super_admin=is_super_admin,
        )


def build_auth_provider(settings: Settings) -> AuthProvider:
    if settings.auth_provider == AuthProviderType.JWT:
        return JWTAuthProvider(settings.jwt_secret, settings.jwt_algorithm)
    return SupabaseAuthProvider(
        base_url=settings.supabase_url,
        api_key=settings.token_verification_key,
        timeout=settings.auth_timeout_seconds,
    )

"""
Development token utility for tripdesk-backend
Mints an access token signed with JWT_SECRET, for use with AUTH_PROVIDER=jwt.

Usage:
    python issue_dev_token.py <user_id> [email] [--super-admin]

Example:
    python issue_dev_token.py 6f1c0d3e-5b7a-4c2e-9a4f-1d2e3f4a5b6c admin@example.com
"""

import sys

from tripdesk.config import load_settings, AuthProviderType, ConfigurationError
from tripdesk.utils.security import create_access_token


def issue_token(user_id: str, email: str = None, super_admin: bool = False) -> str:
    settings = load_settings()
    if settings.auth_provider != AuthProviderType.JWT:
        raise ConfigurationError("Dev tokens only work with AUTH_PROVIDER=jwt")

    claims = {"sub": user_id}
    if email:
        claims["email"] = email
    if super_admin:
        claims["app_metadata"] = {"is_super_admin": True}
    return create_access_token(claims, settings.jwt_secret, settings.jwt_algorithm)


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    if not args:
        print(__doc__)
        sys.exit(1)

    try:
        token = issue_token(
            args[0],
            email=args[1] if len(args) > 1 else None,
            super_admin="--super-admin" in sys.argv,
        )
    except ConfigurationError as e:
        print(f"❌ {e}")
        sys.exit(1)

    print(token)

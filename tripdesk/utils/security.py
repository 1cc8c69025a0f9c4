from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt

# Audience the hosted auth service stamps on user access tokens
DEFAULT_AUDIENCE = "authenticated"


def create_access_token(
    data: dict,
    secret: str,
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token in the same shape the auth service issues"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    to_encode.update({
        "exp": expire,
        "aud": DEFAULT_AUDIENCE,
        "role": to_encode.get("role", DEFAULT_AUDIENCE),
    })
    return jwt.encode(to_encode, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[dict]:
    """Decode and verify a JWT token; None when the signature or expiry is bad"""
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"verify_aud": False},
        )
    except JWTError:
        return None

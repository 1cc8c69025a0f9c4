"""
Admin authorization

Runs on every admin request; nothing is cached between requests.
"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import AdminAuthPolicy
from ..models.profile import Profile, ProfileRole
from ..utils.errors import APIError, Unauthorized, InvalidToken, Forbidden, StoreError
from ..utils.logging_config import get_logger
from .auth_provider import AuthProvider, AuthUser

logger = get_logger(__name__)


class AdminAuthorizer:
    def __init__(self, provider: AuthProvider, policy: AdminAuthPolicy = AdminAuthPolicy.ALLOW_PROVIDER_SUPER_ADMIN):
        self.provider = provider
        self.policy = policy

    def authenticate(self, token: Optional[str]) -> AuthUser:
        """Resolve the caller; raises Unauthorized / InvalidToken."""
        if not token:
            logger.auth_denied("missing bearer token", 401)
            raise Unauthorized()

        user = self.provider.get_user(token)
        if user is None:
            logger.auth_denied("token could not be verified", 401)
            raise InvalidToken()
        return user

    def get_profile_role(self, db: Session, user_id: str) -> Optional[str]:
        try:
            return db.query(Profile.role).filter(Profile.id == user_id).scalar()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def is_admin(self, user: AuthUser, role: Optional[str]) -> bool:
        if role == ProfileRole.ADMIN.value:
            return True
        if self.policy == AdminAuthPolicy.ALLOW_PROVIDER_SUPER_ADMIN:
            return user.is_super_admin
        return False

    def authorize_admin(self, db: Session, token: Optional[str]) -> AuthUser:
        user = self.authenticate(token)
        role = self.get_profile_role(db, user.id)
        if not self.is_admin(user, role):
            logger.auth_denied(f"role={role or 'none'}", 403, user_id=user.id)
            raise Forbidden()
        return user

    def inspect(self, db: Session, token: Optional[str]) -> dict:
        """Run the admin check and report the outcome instead of raising."""
        try:
            user = self.authorize_admin(db, token)
        except APIError as e:
            return {"ok": False, "status": e.status_code, "error": e.message}
        return {"ok": True, "status": 200, "user": user.to_dict()}

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from ..database import Base
import enum


class ProfileRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class Profile(Base):
    """Identity record; `id` is the auth provider's user id."""
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String(200), nullable=False, default="")
    email = Column(String(255), nullable=False, index=True)
    role = Column(String(20), nullable=False, default=ProfileRole.USER.value)
    phone = Column(String(30), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == ProfileRole.ADMIN.value

    def __repr__(self):
        return f"<Profile {self.email} ({self.role})>"

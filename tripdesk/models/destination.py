import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, Numeric, DateTime
from ..database import Base


class Destination(Base):
    """Catalog entry, managed by admins"""
    __tablename__ = "destinations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    country = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)
    price_per_person = Column(Numeric(10, 2), nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

"""Operator profile model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from sqlalchemy.dialects.postgresql import UUID

from foodpos.database import Base


class Profile(Base):
    """Operator profiles"""
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Authentication (local auth backend only; hosted backends keep credentials elsewhere)
    email = Column(String(255), unique=True)
    hashed_password = Column(String(255))

    # Profile
    full_name = Column(String(255))
    role = Column(String(50), default="operator")  # owner, manager, operator
    avatar_url = Column(String(500))

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

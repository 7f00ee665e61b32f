"""
User model - the agents working campaigns.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, DateTime

from ..database import Base


class User(Base):
    """Agent account. Managed by the user administration collaborator."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Login identity used as the source of call history records
    login_id = Column(String(50), unique=True, nullable=False, index=True)

    # Profile info
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    # Account status
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<User {self.login_id}>"

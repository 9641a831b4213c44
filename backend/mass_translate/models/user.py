"""
User Model - Accounts allowed to use and administer the translation server

Key Fields:
- `email`: Login identifier, unique
- `hashed_password`: passlib hash, never returned by the API
- `is_admin`: Grants access to user management; false for self-registered accounts
"""
from sqlalchemy import Column, String, DateTime, Boolean
from datetime import datetime
import uuid

from .database import Base


class User(Base):
    """User model for authentication and administration"""
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=True)

    is_admin = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        """Convert to dictionary for JSON response"""
        return {
            "id": self.id,
            "email": self.email,
            "is_admin": self.is_admin,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<User {self.email}>"

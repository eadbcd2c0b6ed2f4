"""
User Model - recruiter accounts

Users are created by provisioning (scripts/create_user.py) and are only
mutated by the password reset flow.
"""

from sqlalchemy import Column, String, DateTime
from ats.database import Base
from ats.models.base import TimestampMixin
import uuid


class User(TimestampMixin, Base):
    """
    Recruiter identity.

    Attributes:
        id: UUID primary key
        username: Unique sign-in name
        email: Unique address used to request password resets
        password_hash: bcrypt hash (never serialized)
        reset_password_token: Outstanding reset token, if any
        reset_password_expires: Expiry of the outstanding reset token
    """

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    reset_password_token = Column(String(1024), nullable=True, index=True)
    reset_password_expires = Column(DateTime, nullable=True)

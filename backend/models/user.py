"""User model definitions."""

from sqlalchemy import Column, Integer, String
from backend.database import Base


class UserEmail(Base):
    """Email addresses of patients known to the application."""
    __tablename__ = "user_emails"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    username = Column(String)

# app/models/users.py

from sqlalchemy import CheckConstraint, Column, Integer, String, DateTime
from sqlalchemy.sql import func

from app.database import Base


# Highest first
ROLES = ("owner", "admin", "user", "blocked")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)

    role = Column(String(10), nullable=False, default="user")

    reset_token_hash = Column(String, nullable=True)
    reset_token_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint(
            f"role IN ({', '.join(repr(role) for role in ROLES)})",
            name="ck_users_role_valid",
        ),
    )

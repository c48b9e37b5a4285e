from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from models import Base
from utils.time_utils import utcnow_sa_default

ROLE_OWNER = "owner"
ROLE_EMPLOYEE = "employee"
ROLE_ADMIN = "admin"
ROLES = (ROLE_OWNER, ROLE_EMPLOYEE, ROLE_ADMIN)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Stored lower-cased.
    email = Column(String(320), nullable=False)
    password_hash = Column(String(100), nullable=False)

    role = Column(String(10), nullable=False, default=ROLE_OWNER)
    is_active = Column(Boolean, nullable=False, default=True)

    # Owners: passport data or tax number of their party row.
    party_key = Column(String(11), nullable=True, index=True)
    # Employees: their badge.
    badge_number = Column(
        String(10),
        ForeignKey("employees.badge_number", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )

    created_at = Column(DateTime, nullable=False, default=utcnow_sa_default)

"""
Admin user model with a single canonical role.
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import validates

from beach_admin.db.base import Base, TimestampMixin


class UserRole(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"

    @classmethod
    def normalize(cls, value) -> "UserRole":
        """Map any legacy spelling ("Super Admin", "superadmin", "SUPER_ADMIN") to a role."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower().replace(" ", "_").replace("-", "_")
        if key in ("super_admin", "superadmin"):
            return cls.SUPER_ADMIN
        if key == "admin":
            return cls.ADMIN
        raise ValueError(f"Unknown role: {value!r}")


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False, default="Admin User")
    role = Column(String(20), nullable=False, default=UserRole.ADMIN.value)
    is_active = Column(Boolean, default=True, nullable=False)

    @validates("role")
    def _normalize_role(self, key, value):
        return UserRole.normalize(value).value

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN.value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

"""
User model mirroring accounts held by the external auth provider.

Rows are keyed by the provider's user id (the JWT `sub` claim). The role
decides which side of the marketplace the user acts on.
"""

import enum
import uuid
from sqlalchemy import Column, String, DateTime, Enum, Uuid, func
from app.core.database import Base


class UserRole(str, enum.Enum):
    CLIENT = "client"
    SOURCER = "sourcer"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    full_name = Column(String, nullable=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.CLIENT, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def display_name(self) -> str:
        if self.full_name and self.full_name.strip():
            return self.full_name.strip()
        return "Unknown Sourcer" if self.role == UserRole.SOURCER else self.email

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role.value})>"

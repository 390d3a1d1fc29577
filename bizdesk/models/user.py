"""
User model — the authentication identity, plus its role tags.

Each User represents a login credential (email + hashed password). What a
user may do is decided by the roles attached to it through UserRole rows:

  - ADMIN: full access, may act on other users' wallets and subscriptions
  - MANAGER: manages products and approves/rejects subscriptions
  - SALES: extends offers to leads
  - CUSTOMER: a lead whose subscription has been approved
  - LEAD: a prospective customer — the default role for signup

Roles are additive (a user can be both LEAD and CUSTOMER), which is why
they live in their own table instead of a single enum column on User.

The password is stored as an Argon2id hash — never in plaintext.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bizdesk.database import Base


class Role(str, enum.Enum):
    """
    Role tags a user can carry.

    Inherits from str so the value serializes naturally to JSON and is
    stored as a plain string in the database.
    """
    ADMIN = "admin"
    MANAGER = "manager"
    SALES = "sales"
    CUSTOMER = "customer"
    LEAD = "lead"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Email is the login identifier — must be unique and indexed for fast lookups
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Argon2id hash of the password
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Soft-disable: deactivated users can't log in but their data is preserved
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # --- Relationships ---
    # selectin: roles are needed on nearly every request for access checks
    roles: Mapped[list["UserRole"]] = relationship(
        back_populates="user",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def role_names(self) -> list[str]:
        return sorted(r.role for r in self.roles)

    def has_role(self, *roles: Role | str) -> bool:
        """True if the user carries at least one of ``roles``."""
        wanted = {getattr(r, "value", r) for r in roles}
        return any(r.role in wanted for r in self.roles)


class UserRole(Base):
    __tablename__ = "user_roles"

    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: Mapped["User"] = relationship(back_populates="roles")

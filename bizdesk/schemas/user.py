"""
Pydantic schemas for User-related requests and responses.

hashed_password is NEVER included in any response schema.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from bizdesk.models.user import Role


class UserResponse(BaseModel):
    """Public representation of a User (never includes password hash)."""
    id: uuid.UUID
    email: EmailStr
    name: str
    # Read from User.role_names; serialized as "roles"
    roles: list[str] = Field(validation_alias="role_names")
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class RoleGrantRequest(BaseModel):
    """Request body for POST /admin/users/{id}/roles."""
    role: Role

from pydantic import BaseModel, EmailStr, ConfigDict
from typing import Optional, List

class RoleBase(BaseModel):
    name: str
    description: str | None = None
    level: int = 5

class Role(RoleBase):
    """Schema for reading a role."""
    id: int
    is_active: bool = True
    model_config = ConfigDict(from_attributes=True)

class UserBase(BaseModel):
    """Base user schema with common fields."""
    name: str
    email: EmailStr
    zone: Optional[str] = None
    region: Optional[str] = None
    district: Optional[str] = None

class User(UserBase):
    """Main user schema for reading user data."""
    id: int
    role_id: int
    parent_id: Optional[int] = None
    is_active: bool
    model_config = ConfigDict(from_attributes=True)

class UserContext(BaseModel):
    """The authenticated requester and their role."""
    user: User
    role: Role
    model_config = ConfigDict(from_attributes=True)

class VisibleUsers(BaseModel):
    requester_id: int
    user_ids: List[int]

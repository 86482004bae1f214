from pydantic import BaseModel, ConfigDict
from typing import Any, Optional
from datetime import datetime


class UserResponse(BaseModel):
    id: int
    github_id: str
    username: str
    avatar_url: Optional[str] = None
    role: str
    status: str
    storage_limit: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MeResponse(UserResponse):
    """Current user plus bytes used, for the dashboard storage meter"""
    storage_usage: int = 0


class AdminUserResponse(UserResponse):
    total_storage_used: int = 0


class AdminUserListResponse(BaseModel):
    users: list[AdminUserResponse]
    total: int
    page: int
    limit: int


# Admin bodies are checked in the route so bad values map to 400
class UserStatusUpdate(BaseModel):
    status: Optional[str] = None


class UserQuotaUpdate(BaseModel):
    limit: Any = None

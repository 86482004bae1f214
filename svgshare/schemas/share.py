from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class ShareToggle(BaseModel):
    """enable omitted: flip the current state"""
    enable: Optional[bool] = None


class ShareResponse(BaseModel):
    id: int
    file_id: int
    share_id: str
    is_enabled: int
    visit_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PublicShareResponse(BaseModel):
    """What an anonymous visitor may see; no owner or storage details"""
    share_id: str
    filename: str
    size: int
    width: int
    height: int
    visit_count: int
    created_at: datetime
    updated_at: datetime

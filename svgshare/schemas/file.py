from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class FileResponse(BaseModel):
    id: int
    user_id: int
    filename: str
    size: int
    width: int
    height: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FileListItem(FileResponse):
    """File row with the state of its share, if any"""
    share_enabled: Optional[int] = None
    share_id: Optional[str] = None
    visit_count: Optional[int] = None


class FileRename(BaseModel):
    filename: Optional[str] = None

"""
Share model - public link for a single file
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from svgshare.core.database import Base


def generate_share_token() -> str:
    return str(uuid.uuid4())


class Share(Base):
    """
    Public share of one file.

    Created the first time the owner enables sharing and toggled afterwards;
    the token never changes once issued.
    """
    __tablename__ = "shares"
    __table_args__ = (
        Index("idx_shares_share_id", "share_id", unique=True),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_id = Column(Integer, ForeignKey("files.id", ondelete="CASCADE"), nullable=False, unique=True)
    share_id = Column(String(64), nullable=False, default=generate_share_token)
    # Stored as 0/1
    is_enabled = Column(Integer, nullable=False, default=1)
    visit_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    file = relationship("SvgFile", back_populates="share")

    def __repr__(self):
        return f"<Share {self.share_id} file={self.file_id} enabled={self.is_enabled}>"

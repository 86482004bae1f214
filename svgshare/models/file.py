from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from svgshare.core.database import Base


class SvgFile(Base):
    """Uploaded SVG metadata; the bytes live in object storage under r2_key."""
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False)
    r2_key = Column(String(64), nullable=False, unique=True)
    width = Column(Integer, nullable=False, default=0)
    height = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    owner = relationship("User", back_populates="files")
    share = relationship("Share", back_populates="file", cascade="all, delete-orphan", uselist=False)

    def __repr__(self):
        return f"<SvgFile {self.filename} user={self.user_id}>"

from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from svgshare.core.config import settings
from svgshare.core.database import Base


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    LOCKED = "locked"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    github_id = Column(String(64), unique=True, nullable=False, index=True)
    username = Column(String(255), nullable=False)
    avatar_url = Column(String(1024), nullable=True)
    # String columns instead of Enum to keep the stored values lowercase
    role = Column(String(16), nullable=False, default=UserRole.USER.value)
    status = Column(String(16), nullable=False, default=UserStatus.PENDING.value, index=True)
    storage_limit = Column(BigInteger, nullable=False, default=lambda: settings.DEFAULT_STORAGE_LIMIT)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    files = relationship("SvgFile", back_populates="owner", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self):
        return f"<User {self.username} ({self.status})>"

from .user import User, UserRole, UserStatus
from .file import SvgFile
from .share import Share, generate_share_token

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "SvgFile",
    "Share",
    "generate_share_token",
]

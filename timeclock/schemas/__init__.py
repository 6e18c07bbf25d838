from .auth import AuthResponse, Identity, LoginRequest, RegisterRequest, Role
from .session import CurrentSession, RecordType, SessionStats, TimeRecord, WorkSession
from .user import PasswordChange, User, UserCreate, UserStats, UserUpdate

__all__ = [
    "AuthResponse",
    "CurrentSession",
    "Identity",
    "LoginRequest",
    "PasswordChange",
    "RecordType",
    "RegisterRequest",
    "Role",
    "SessionStats",
    "TimeRecord",
    "User",
    "UserCreate",
    "UserStats",
    "UserUpdate",
    "WorkSession",
]

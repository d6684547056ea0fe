from app.domains.identity.entities import User
from app.domains.identity.schemas import (
    UserLogin, UserUpdate, UserResponse, Token, LoginResponse,
    PasswordChange, RefreshRequest
)

__all__ = [
    "User",
    "UserLogin", "UserUpdate", "UserResponse", "Token", "LoginResponse",
    "PasswordChange", "RefreshRequest"
]

import re
from pydantic import BaseModel, SecretStr, field_validator
from typing import List, Optional
from datetime import datetime


"""
auth/register
"""


class UserRegistrationModel(BaseModel):
    email: str
    username: str
    password: SecretStr
    full_name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, email: str) -> str:
        email = email.strip().lower()
        if not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", email):
            raise ValueError("Email address is not valid.")
        return email

    @field_validator("username")
    @classmethod
    def validate_username(cls, username: str) -> str:
        # Length check (min 3, max 30)
        if not (3 <= len(username) <= 30):
            raise ValueError(
                f"Username must be between 3 and 30 characters long (got {len(username)})."
            )

        # Allow only characters (letters, numbers, underscores, and dots)
        if not re.match(r"^[a-zA-Z0-9_.]+$", username):
            raise ValueError(
                "Username must only contain letters, numbers, underscores, and dots."
            )

        return username.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, password: SecretStr) -> SecretStr:
        password_str = password.get_secret_value()

        # Minimum length of 8 characters (no maximum)
        if len(password_str) < 8:
            raise ValueError("Password must be at least 8 characters long.")

        # Must include letters (upper and lower), numbers, and special characters.
        password_regex = r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[!@#$%^&*()_+={}\[\]|\\;:'\",.<>?/~`]).{8,}$"

        if not re.match(password_regex, password_str):
            # General error message to covers which types of characters are missing.
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, one number, and one special character."
            )

        return password


class UserRegistrationResponseModel(BaseModel):
    id: str
    email: str
    username: str


"""
auth/login
"""


class UserLoginModel(BaseModel):
    email: str
    password: SecretStr


class SessionUser(BaseModel):
    id: str
    email: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class UserLoginResponseModel(BaseModel):
    user: SessionUser
    session_token: str
    expires_at: datetime


"""
auth/logout
"""


class LogoutResponseModel(BaseModel):
    logged_out: bool


"""
auth/session
"""


class SessionTokenModel(BaseModel):
    session_token: str


class ValidateSessionResponseModel(BaseModel):
    user_id: Optional[str]


class RefreshSessionResponseModel(BaseModel):
    refreshed: bool
    expires_at: Optional[datetime] = None


"""
auth/admin/validate
"""


class AdminValidateResponseModel(BaseModel):
    success: bool
    user: SessionUser
    roles: List[str]
    capabilities: List[str]

"""
Pydantic models for account payloads.

``UserRead`` drops every key it does not declare, so a password hash
can never reach a client even if a service forgets to sanitise.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr

from .resources import Amount, read_schema


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[StrictStr] = None
    username: Optional[StrictStr] = None
    name: Optional[StrictStr] = None
    password: Optional[StrictStr] = None
    upiId: Optional[StrictStr] = None
    profilePicture: Optional[StrictStr] = None
    totalSavings: Optional[Amount] = None
    todayRoundUp: Optional[Amount] = None
    currentStreak: Optional[StrictInt] = None


class UserUpdate(UserCreate):
    """Partial profile update; ``password`` sets a new password."""


UserRead = read_schema("users", "UserRead", exclude=("passwordHash",), extra="ignore")


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[StrictStr] = None
    password: Optional[StrictStr] = None


class LoginResponse(BaseModel):
    """Schema returned by ``POST /api/users/login``."""

    user: UserRead
    token: str

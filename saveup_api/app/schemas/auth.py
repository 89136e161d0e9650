"""
Pydantic models for authentication data.

``Principal`` is the identity carried inside a bearer token and
reconstructed on every request; it is never persisted.  The wire
names (``userId``) follow the mobile client, the Python attribute
names follow the rest of the code base.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class Principal(BaseModel):
    user_id: int = Field(..., alias="userId", example=1)
    email: str = Field(..., example="asha@example.com")
    username: str = Field(..., example="asha")

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }

    @classmethod
    def from_user(cls, user: Dict[str, Any]) -> "Principal":
        """Build a principal from a stored (or sanitised) user record."""
        return cls(user_id=user["id"], email=user["email"], username=user["username"])

    def to_claims(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


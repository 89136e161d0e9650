"""Schema returned by the health check."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(..., example="ok")
    storage: str = Field(..., example="sqlite")

"""Error response model"""
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every non-2xx response"""
    error: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error category")

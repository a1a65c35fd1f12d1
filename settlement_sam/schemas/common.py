"""
Common schemas used across multiple endpoints.
"""
from typing import TypeVar, Generic, List, Optional
from pydantic import BaseModel

T = TypeVar("T")


class MessageResponse(BaseModel):
    """Simple message response."""
    success: bool = True
    message: str

    class Config:
        json_schema_extra = {"example": {"success": True, "message": "Code sent successfully."}}


class ErrorResponse(BaseModel):
    """Tagged error body."""
    error: str
    message: str

    class Config:
        json_schema_extra = {"example": {"error": "not_found", "message": "Lead not found"}}


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response."""
    items: List[T]
    total: int
    page: int
    limit: int
    pages: int
    has_next: bool
    has_prev: bool


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"
    datastore: Optional[str] = None

from typing import Generic, List, Literal, Optional, TypeVar
from datetime import datetime

from pydantic import BaseModel, Field, ConfigDict


T = TypeVar("T")

class ApiResponse(BaseModel, Generic[T]):
    """Standard API response wrapper for all endpoints"""
    status: Literal["success"] = Field("success", description="Always 'success' for successful requests")
    success: bool = Field(True, description="Indicates if the request was successful")
    message: Optional[str] = Field(None, description="Human-readable message about the operation")
    results: Optional[int] = Field(None, description="Number of items returned by listing endpoints")
    data: Optional[T] = Field(None, description="Response data payload")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "success",
                "success": True,
                "message": "Folder created successfully",
                "data": {"folder": {"id": "folder-1718000000000", "name": "Docs", "path": "/Docs"}}
            }
        }
    )

class ErrorDetail(BaseModel):
    """Detailed error information for validation and business logic errors"""
    code: str = Field(..., description="Error code identifier")
    message: str = Field(..., description="Human-readable error message")
    field: Optional[str] = Field(None, description="Field name that caused the error (for validation errors)")

class ApiError(BaseModel):
    """Error response wrapper for failed operations"""
    status: Literal["fail", "error"] = Field(..., description="'fail' for client errors, 'error' for server errors")
    success: bool = Field(False, description="Always false for error responses")
    message: str = Field(..., description="Main error message")
    code: Optional[str] = Field(None, description="Machine-readable error code")
    errors: Optional[List[ErrorDetail]] = Field(None, description="Detailed error information")
    stack: Optional[str] = Field(None, description="Stack trace, development mode only")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "fail",
                "success": False,
                "message": "Cannot move a folder into itself or one of its descendants",
                "code": "cyclic_move",
                "timestamp": "2024-01-15T10:30:00Z"
            }
        }
    )

class HealthCheck(BaseModel):
    """Health check response schema"""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Health check timestamp")
    version: Optional[str] = Field(None, description="API version")
    store: Optional[str] = Field(None, description="Active document store backend")
    uptime: Optional[float] = Field(None, description="Service uptime in seconds")

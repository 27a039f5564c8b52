"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import Any, Optional
from datetime import datetime


class CreateLinkRequest(BaseModel):
    """Request to create a short link.

    Fields are left untyped and checked by the allocation service, so
    malformed or wrongly typed input is reported as 400.
    """
    
    url: Optional[Any] = Field(None, description="Destination URL (http or https)")
    code: Optional[Any] = Field(None, description="Optional custom short code (6-8 alphanumeric)")
    email: Optional[Any] = Field(None, description="Owner email address")
    
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "https://example.com/very/long/path/to/resource",
                    "email": "owner@example.com",
                },
                {
                    "url": "https://github.com/user/repo",
                    "code": "myrepo1",
                    "email": "owner@example.com",
                },
            ]
        }
    }


class LinkResponse(BaseModel):
    """A link as exposed by the API."""
    
    code: str = Field(..., description="The short code")
    url: str = Field(..., description="Destination URL")
    email: str = Field(..., description="Owner email")
    total_clicks: int = Field(..., alias="totalClicks", description="Number of redirects served")
    last_clicked: Optional[datetime] = Field(None, alias="lastClicked", description="Time of the latest redirect")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")
    short_url: Optional[str] = Field(None, alias="shortUrl", description="The complete short URL")
    
    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "code": "aB3dE9xZ",
                    "url": "https://example.com/very/long/path",
                    "email": "owner@example.com",
                    "totalClicks": 0,
                    "lastClicked": None,
                    "createdAt": "2024-01-01T12:00:00Z",
                    "shortUrl": "https://short.link/aB3dE9xZ",
                }
            ]
        },
    }


class HealthResponse(BaseModel):
    """Health check response."""
    
    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    store: str = Field(..., description="Storage backend name")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""
    
    detail: str = Field(..., description="Error message")

"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class CreateLinkRequest(BaseModel):
    """Request to create a short link."""

    url: str = Field(..., description="The URL to shorten", max_length=2048)
    max_clicks: Optional[int] = Field(None, description="Click budget, 0 = unbounded (default from config)")
    ttl_seconds: Optional[int] = Field(None, description="Time to live in seconds, 0 = unbounded (default from config)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "https://example.com/very/long/path/to/resource",
                    "max_clicks": 10,
                    "ttl_seconds": 3600,
                },
                {
                    "url": "https://github.com/user/repo",
                },
            ]
        }
    }


class EditLinkRequest(BaseModel):
    """Request to change a link's limits. At least one field is required."""

    max_clicks: Optional[int] = Field(None, description="New click budget, 0 = unbounded")
    ttl_seconds: Optional[int] = Field(None, description="New TTL in seconds (restarts the window), 0 = unbounded")


class LinkResponse(BaseModel):
    """Short link details."""

    code: str = Field(..., description="The short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original URL")
    owner_id: str
    created_at: datetime = Field(..., description="Creation (or TTL reset) timestamp")
    ttl_seconds: int
    max_clicks: int
    click_count: int
    remaining_ttl_seconds: Optional[float] = Field(None, description="Seconds until expiry, null when unbounded")


class LinkListResponse(BaseModel):
    """List of short links."""

    count: int
    links: List[LinkResponse]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    links: int = Field(..., description="Number of stored links")
    reaper: str = Field(..., description="Background reaper status")
    persistence: str = Field(..., description="\"ok\", or the last data file error")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str = Field(..., description="Error message")

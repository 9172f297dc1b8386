"""Pydantic schemas for website operations."""

from typing import List, Optional
from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, field_validator

from uptime_monitor.models.website import ALIAS_MAX_LENGTH

_http_url = TypeAdapter(HttpUrl)


class WebsiteCreate(BaseModel):
    """Schema for registering a website."""
    url: str = Field(..., description="HTTP(S) address to probe")
    alias: str = Field(
        ...,
        min_length=1,
        max_length=ALIAS_MAX_LENGTH,
        pattern=r"^[A-Za-z0-9][A-Za-z0-9_.-]*$",
        description="Short unique name, used in URLs"
    )

    @field_validator('url')
    @classmethod
    def url_must_be_reachable_http(cls, v):
        # Validate only; the address is stored exactly as given
        _http_url.validate_python(v)
        return v


class WebsiteResponse(BaseModel):
    """Schema for a registered website."""
    id: int
    url: str
    alias: str

    model_config = {"from_attributes": True}


class WebsiteSummary(WebsiteResponse):
    """Website with its uptime over the last 24 hours (None without data)."""
    uptime_24h: Optional[float] = None


class WebsiteListResponse(BaseModel):
    """Schema for list of websites."""
    websites: List[WebsiteSummary]
    total: int

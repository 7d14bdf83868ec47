"""Pydantic schemas for request/response validation in the URL shortener.

Schema Hierarchy
=================
::
    ShortenRequest (Input)
    └─ url: str (non-empty)

    ShortenResponse (Output)
    └─ short_url: str ("<BASE_URL>/<short_code>")

    HealthResponse (Output)
    ├─ status: HealthStatus
    └─ registry_size: int

Key Behaviours
===============
- A missing, null, non-string or blank ``url`` fails validation; the app maps
  that failure to a plain-text 400.
- Unknown fields in the request body are ignored.
- The URL is stored exactly as sent; no normalisation happens here.
"""

from pydantic import BaseModel, field_validator

from shortener.enums import HealthStatus

__all__ = ["ShortenRequest", "ShortenResponse", "HealthResponse"]


class ShortenRequest(BaseModel):
    url: str

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("url must not be empty")
        return v


class ShortenResponse(BaseModel):
    short_url: str


class HealthResponse(BaseModel):
    status: HealthStatus
    registry_size: int

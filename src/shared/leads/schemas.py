"""Pydantic schemas for lead intake API."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class LeadSubmission(BaseModel):
    """Schema for a lead magnet / newsletter form submission."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    email: Optional[str] = Field(None, description="Subscriber email address")
    website: Optional[str] = Field(None, description="Honeypot field, left blank by humans")
    timestamp: Optional[str] = Field(None, description="Client-side submission time")
    user_agent: Optional[str] = Field(None, alias="userAgent", description="Browser user agent")


class LeadResponse(BaseModel):
    """
    Envelope returned by every lead endpoint.
    A failed response always carries a machine readable error code.
    """
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    error: Optional[str] = None
    redirect_url: Optional[str] = Field(None, alias="redirectUrl")

    def to_content(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

"""Lead schemas for request/response validation."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LeadCreate(BaseModel):
    """Schema for creating a lead."""

    contact_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    company_name: Optional[str] = Field(None, max_length=255)
    job_title: Optional[str] = Field(None, max_length=255)
    industry: Optional[str] = Field(None, max_length=128)


class LeadRead(BaseModel):
    """Schema for reading a lead (response)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    contact_name: str
    email: str
    company_name: Optional[str] = None
    job_title: Optional[str] = None
    industry: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class LeadProfile(BaseModel):
    """Contact details consumed by the report and email builders."""

    model_config = ConfigDict(from_attributes=True)

    contact_name: str = ""
    email: Optional[str] = None
    company_name: Optional[str] = None
    industry: Optional[str] = None
    job_title: Optional[str] = None

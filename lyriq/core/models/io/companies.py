"""
Company I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CompanyRead(BaseModel):
    """Schema for reading a company from API."""

    id: int
    name: str
    slug: str
    industry: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CompanyCreate(BaseModel):
    """Schema for creating a company via API."""

    name: str = Field(min_length=1, description="Company display name")
    slug: str = Field(min_length=1, pattern=r"^[a-z0-9][a-z0-9-]*$", description="URL-safe unique identifier")
    industry: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = Field(default=None, description="Profile used as chatbot background")


class CompanyUpdate(BaseModel):
    """Schema for updating a company via API."""

    name: Optional[str] = None
    industry: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None

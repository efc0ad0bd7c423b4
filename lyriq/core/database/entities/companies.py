"""
Company entity models.

A company is the tenant boundary: every agent, call, chat session, workflow
and integration belongs to exactly one company.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class CompanyBase(Base):
    """Base fields for a company."""

    name: str = Field(description="Company display name")
    slug: str = Field(index=True, unique=True, description="URL-safe unique identifier")
    industry: Optional[str] = Field(default=None, description="Industry, e.g. 'utilities' or 'retail'")
    phone: Optional[str] = Field(default=None, description="Main contact number")
    email: Optional[str] = Field(default=None, description="Main contact email")
    description: Optional[str] = Field(
        default=None, description="Company profile, used as background for chatbot answers"
    )


class Company(CompanyBase, table=True):
    """Persistent company (tenant) record.

    Table: companies
    """

    __tablename__ = "companies"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Company(id={self.id}, slug={self.slug})"

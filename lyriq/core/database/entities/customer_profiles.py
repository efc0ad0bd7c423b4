"""
Customer profile entity models.

Profiles are keyed by phone number and created on first contact; the voice
webhook keeps the interaction counters current.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class CustomerProfileBase(Base):
    """Base fields for a customer profile."""

    company_id: Optional[int] = Field(default=None, foreign_key="companies.id", index=True)
    user_id: Optional[str] = Field(default=None, index=True, description="Linked login identity, if any")
    phone_number: str = Field(index=True, unique=True)
    name: Optional[str] = Field(default=None)
    email: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    call_history_count: int = Field(default=0)
    last_interaction_at: Optional[datetime] = Field(default=None)


class CustomerProfile(CustomerProfileBase, table=True):
    """Persistent customer profile.

    Table: customer_profiles
    """

    __tablename__ = "customer_profiles"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"CustomerProfile(id={self.id}, phone_number={self.phone_number})"

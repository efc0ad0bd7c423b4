"""Human agent I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lyriq.core.models.domain.enums import HumanAgentStatus

from ._json_fields import decode_json_list


class HumanAgentRead(BaseModel):
    id: int
    company_id: int
    user_id: Optional[str] = None
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    status: HumanAgentStatus
    skills: List[str]
    max_concurrent_calls: int
    last_status_change_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    _decode_skills = field_validator("skills", mode="before")(decode_json_list)

    class Config:
        from_attributes = True


class HumanAgentCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    company_id: int
    user_id: Optional[str] = None
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    status: HumanAgentStatus = HumanAgentStatus.offline
    skills: List[str] = Field(default_factory=list)
    max_concurrent_calls: int = Field(default=1, ge=1)


class HumanAgentUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    skills: Optional[List[str]] = None
    max_concurrent_calls: Optional[int] = Field(default=None, ge=1)


class HumanAgentStatusUpdate(BaseModel):
    """Presence change requested by an agent."""

    model_config = ConfigDict(use_enum_values=True)

    status: HumanAgentStatus

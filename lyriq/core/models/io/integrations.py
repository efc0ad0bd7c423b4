"""
Integration I/O models for API requests and responses.

Credentials are accepted on write but only their key names are ever returned.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from lyriq.core.models.domain.enums import (
    IntegrationProvider,
    IntegrationStatus,
    MappingDirection,
    SyncDirection,
    SyncLogStatus,
)


class IntegrationRead(BaseModel):
    """Schema for reading an integration from API."""

    id: int
    company_id: int
    provider: IntegrationProvider
    name: str
    status: IntegrationStatus
    auto_sync: bool
    sync_interval_minutes: int
    sync_direction: SyncDirection
    create_missing_records: bool
    update_existing_records: bool
    delete_removed_records: bool
    credential_keys: List[str] = Field(default_factory=list, description="Names of the stored credentials")
    connected_at: Optional[datetime] = None
    last_sync_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class IntegrationCreate(BaseModel):
    """Schema for creating an integration via API."""

    model_config = ConfigDict(use_enum_values=True)

    company_id: int
    provider: IntegrationProvider
    name: Optional[str] = None
    credentials: Dict[str, str] = Field(default_factory=dict)
    auto_sync: bool = True
    sync_interval_minutes: int = Field(default=15, ge=1)
    sync_direction: SyncDirection = SyncDirection.bidirectional
    create_missing_records: bool = True
    update_existing_records: bool = True
    delete_removed_records: bool = False


class IntegrationUpdate(BaseModel):
    """Schema for updating integration settings via API."""

    model_config = ConfigDict(use_enum_values=True)

    name: Optional[str] = None
    credentials: Optional[Dict[str, str]] = None
    auto_sync: Optional[bool] = None
    sync_interval_minutes: Optional[int] = Field(default=None, ge=1)
    sync_direction: Optional[SyncDirection] = None
    create_missing_records: Optional[bool] = None
    update_existing_records: Optional[bool] = None
    delete_removed_records: Optional[bool] = None


class FieldMappingRead(BaseModel):
    id: int
    integration_id: int
    local_field: str
    remote_object: str
    remote_field: str
    direction: MappingDirection
    enabled: bool

    class Config:
        from_attributes = True


class FieldMappingCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    local_field: str = Field(min_length=1, description="Dotted local path, e.g. 'call.summary'")
    remote_object: str = Field(min_length=1)
    remote_field: str = Field(min_length=1)
    direction: MappingDirection = MappingDirection.bidirectional
    enabled: bool = True


class FieldMappingUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    local_field: Optional[str] = None
    remote_object: Optional[str] = None
    remote_field: Optional[str] = None
    direction: Optional[MappingDirection] = None
    enabled: Optional[bool] = None


class SyncLogRead(BaseModel):
    id: int
    integration_id: int
    sync_type: str
    records: int
    status: SyncLogStatus
    message: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SyncNowResult(BaseModel):
    workflow_id: str
    signalled: bool = Field(description="True when an already running sync workflow was signalled")
    log: SyncLogRead


class MappingPreviewRequest(BaseModel):
    """A record to translate with the integration's mappings."""

    direction: MappingDirection = MappingDirection.outbound
    record: Dict[str, Any]

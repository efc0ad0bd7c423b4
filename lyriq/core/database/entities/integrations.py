"""
Integration entity models.

This module contains the CRM/helpdesk connection per company, the field
mappings that translate between local records and remote objects, and the
sync log written after each synchronisation.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import Field

from lyriq.core.models.domain.enums import IntegrationStatus, MappingDirection, SyncDirection

from ..base import Base, load_json_dict, utc_now

INTEGRATION_JSON_FIELDS = ("credentials",)


class IntegrationBase(Base):
    """Base fields for an integration."""

    company_id: int = Field(foreign_key="companies.id", index=True)
    provider: str = Field(index=True, description="salesforce, hubspot, zoho, ...")
    name: str = Field(description="Display name")
    status: str = Field(default=IntegrationStatus.disconnected.value)

    # Sync settings
    auto_sync: bool = Field(default=True)
    sync_interval_minutes: int = Field(default=15, ge=1)
    sync_direction: str = Field(default=SyncDirection.bidirectional.value)
    create_missing_records: bool = Field(default=True)
    update_existing_records: bool = Field(default=True)
    delete_removed_records: bool = Field(default=False)


class Integration(IntegrationBase, table=True):
    """Persistent integration record.

    Credentials are stored but never returned by the API.

    Table: integrations
    """

    __tablename__ = "integrations"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    credentials: str = Field(default="{}", description="JSON object of provider credentials")

    connected_at: Optional[datetime] = Field(default=None)
    last_sync_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def get_credentials(self) -> dict:
        return load_json_dict(self.credentials)

    def get_credential_keys(self) -> List[str]:
        return sorted(self.get_credentials().keys())

    @property
    def credential_keys(self) -> List[str]:
        return self.get_credential_keys()

    def __repr__(self) -> str:
        return f"Integration(id={self.id}, provider={self.provider}, status={self.status})"


class FieldMappingBase(Base):
    """Base fields for a field mapping."""

    local_field: str = Field(description="Dotted local path, e.g. 'call.summary'")
    remote_object: str = Field(description="Remote object, e.g. 'Task'")
    remote_field: str = Field(description="Remote field, e.g. 'Description'")
    direction: str = Field(default=MappingDirection.bidirectional.value)
    enabled: bool = Field(default=True)


class FieldMapping(FieldMappingBase, table=True):
    """Persistent field mapping of an integration.

    Table: integration_field_mappings
    """

    __tablename__ = "integration_field_mappings"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    integration_id: int = Field(foreign_key="integrations.id", index=True)

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"FieldMapping(id={self.id}, {self.local_field} -> {self.remote_object}.{self.remote_field})"


class SyncLog(Base, table=True):
    """Result of one synchronisation run.

    Table: integration_sync_logs
    """

    __tablename__ = "integration_sync_logs"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    integration_id: int = Field(foreign_key="integrations.id", index=True)
    sync_type: str = Field(description="Manual, Scheduled, Webhook")
    records: int = Field(default=0)
    status: str = Field(description="success, partial or failed")
    message: Optional[str] = Field(default=None)
    details: str = Field(default="{}", description="JSON object, e.g. the bridge workflow id")

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def get_details(self) -> dict:
        return load_json_dict(self.details)

    def __repr__(self) -> str:
        return f"SyncLog(id={self.id}, integration_id={self.integration_id}, status={self.status})"

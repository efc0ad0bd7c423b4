"""Initial schema for Lyriq

Revision ID: 20261018_000000
Revises: None
Create Date: 2026-10-18 00:00:00.000000

Creates the contact-center tables:
- Tenancy (companies, customer profiles)
- Agents (AI voice agents, human agents)
- Calls and their transcript lines
- Website chat sessions and messages
- Knowledge base entries
- Workflow definitions and recorded executions
- CRM/helpdesk integrations, field mappings and sync logs

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261018_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(with_updated: bool = True) -> list:
    columns = [sa.Column("created_at", sa.DateTime(), nullable=False)]
    if with_updated:
        columns.append(sa.Column("updated_at", sa.DateTime(), nullable=False))
    return columns


def upgrade() -> None:
    """Create all tables."""

    # Create companies table
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("industry", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_companies_slug", "companies", ["slug"], unique=True)

    # Create customer_profiles table
    op.create_table(
        "customer_profiles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=True),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("phone_number", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("call_history_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_interaction_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_customer_profiles_company_id", "customer_profiles", ["company_id"])
    op.create_index("ix_customer_profiles_user_id", "customer_profiles", ["user_id"])
    op.create_index("ix_customer_profiles_phone_number", "customer_profiles", ["phone_number"], unique=True)

    # Create ai_agents table
    op.create_table(
        "ai_agents",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("avatar", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="inactive"),
        sa.Column("phone_number", sa.String(), nullable=True),
        sa.Column("voice_provider", sa.String(), nullable=False, server_default="elevenlabs"),
        sa.Column("voice_id", sa.String(), nullable=False, server_default="Rachel"),
        sa.Column("personality_friendly", sa.Integer(), nullable=False, server_default="70"),
        sa.Column("personality_professional", sa.Integer(), nullable=False, server_default="80"),
        sa.Column("first_message", sa.Text(), nullable=False),
        sa.Column("system_prompt", sa.Text(), nullable=False),
        sa.Column("tools", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("end_of_call_actions", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("knowledge_collections", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("integrations", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("transfer_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("transfer_number", sa.String(), nullable=True),
        sa.Column("transfer_conditions", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("vapi_assistant_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ai_agents_company_id", "ai_agents", ["company_id"])

    # Create human_agents table
    op.create_table(
        "human_agents",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="offline"),
        sa.Column("skills", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("max_concurrent_calls", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("last_status_change_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_human_agents_company_id", "human_agents", ["company_id"])
    op.create_index("ix_human_agents_user_id", "human_agents", ["user_id"])
    op.create_index("ix_human_agents_status", "human_agents", ["status"])

    # Create workflows table
    op.create_table(
        "workflows",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("trigger_type", sa.String(), nullable=False, server_default="temporal-outbound"),
        sa.Column("trigger_source", sa.String(), nullable=False, server_default="manual"),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("tools", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("actions", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("post_call_actions", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("webhook_url", sa.String(), nullable=True),
        sa.Column("ai_agent_id", sa.Integer(), sa.ForeignKey("ai_agents.id"), nullable=True),
        sa.Column("vapi_assistant_id", sa.String(), nullable=True),
        sa.Column("vapi_phone_number_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflows_company_id", "workflows", ["company_id"])
    op.create_index("ix_workflows_status", "workflows", ["status"])
    op.create_index("ix_workflows_updated_at", "workflows", ["updated_at"])

    # Create calls table
    op.create_table(
        "calls",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=True),
        sa.Column("customer_number", sa.String(), nullable=True),
        sa.Column("customer_name", sa.String(), nullable=True),
        sa.Column("direction", sa.String(), nullable=False, server_default="inbound"),
        sa.Column("status", sa.String(), nullable=False, server_default="queued"),
        sa.Column("ai_agent_id", sa.Integer(), sa.ForeignKey("ai_agents.id"), nullable=True),
        sa.Column("agent_id", sa.Integer(), sa.ForeignKey("human_agents.id"), nullable=True),
        sa.Column("customer_profile_id", sa.Integer(), sa.ForeignKey("customer_profiles.id"), nullable=True),
        sa.Column("workflow_id", sa.Integer(), sa.ForeignKey("workflows.id"), nullable=True),
        sa.Column("twilio_call_sid", sa.String(), nullable=True),
        sa.Column("vapi_call_id", sa.String(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("outcome", sa.String(), nullable=True),
        sa.Column("recording_url", sa.String(), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("ended_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_calls_company_id", "calls", ["company_id"])
    op.create_index("ix_calls_customer_number", "calls", ["customer_number"])
    op.create_index("ix_calls_status", "calls", ["status"])
    op.create_index("ix_calls_ai_agent_id", "calls", ["ai_agent_id"])
    op.create_index("ix_calls_agent_id", "calls", ["agent_id"])
    op.create_index("ix_calls_twilio_call_sid", "calls", ["twilio_call_sid"], unique=True)
    op.create_index("ix_calls_vapi_call_id", "calls", ["vapi_call_id"])
    op.create_index("ix_calls_created_at", "calls", ["created_at"])

    # Create call_transcripts table
    op.create_table(
        "call_transcripts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("call_id", sa.Integer(), sa.ForeignKey("calls.id"), nullable=False),
        sa.Column("speaker", sa.String(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_call_transcripts_call_id", "call_transcripts", ["call_id"])
    op.create_index("ix_call_transcripts_created_at", "call_transcripts", ["created_at"])

    # Create chat_sessions table
    op.create_table(
        "chat_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("customer_name", sa.String(), nullable=True),
        sa.Column("customer_email", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("agent_id", sa.Integer(), sa.ForeignKey("human_agents.id"), nullable=True),
        sa.Column("escalation_reason", sa.String(), nullable=True),
        sa.Column("escalated_at", sa.DateTime(), nullable=True),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_chat_sessions_company_id", "chat_sessions", ["company_id"])
    op.create_index("ix_chat_sessions_user_id", "chat_sessions", ["user_id"])
    op.create_index("ix_chat_sessions_status", "chat_sessions", ["status"])
    op.create_index("ix_chat_sessions_agent_id", "chat_sessions", ["agent_id"])
    op.create_index("ix_chat_sessions_created_at", "chat_sessions", ["created_at"])

    # Create chat_messages table
    op.create_table(
        "chat_messages",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("session_id", sa.Integer(), sa.ForeignKey("chat_sessions.id"), nullable=False),
        sa.Column("sender_type", sa.String(), nullable=False),
        sa.Column("sender_id", sa.String(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("message_metadata", sa.Text(), nullable=False, server_default="{}"),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_chat_messages_session_id", "chat_messages", ["session_id"])
    op.create_index("ix_chat_messages_created_at", "chat_messages", ["created_at"])

    # Create knowledge_base table
    op.create_table(
        "knowledge_base",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("collection", sa.String(), nullable=False, server_default="faq"),
        sa.Column("embedding", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_knowledge_base_company_id", "knowledge_base", ["company_id"])
    op.create_index("ix_knowledge_base_category", "knowledge_base", ["category"])
    op.create_index("ix_knowledge_base_collection", "knowledge_base", ["collection"])

    # Create workflow_executions table
    op.create_table(
        "workflow_executions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=True),
        sa.Column("workflow_definition_id", sa.Integer(), sa.ForeignKey("workflows.id"), nullable=True),
        sa.Column("workflow_type", sa.String(), nullable=False),
        sa.Column("workflow_id", sa.String(), nullable=False),
        sa.Column("run_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="RUNNING"),
        sa.Column("input_payload", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_executions_company_id", "workflow_executions", ["company_id"])
    op.create_index(
        "ix_workflow_executions_workflow_definition_id", "workflow_executions", ["workflow_definition_id"]
    )
    op.create_index("ix_workflow_executions_workflow_type", "workflow_executions", ["workflow_type"])
    op.create_index("ix_workflow_executions_workflow_id", "workflow_executions", ["workflow_id"], unique=True)
    op.create_index("ix_workflow_executions_status", "workflow_executions", ["status"])

    # Create integrations table
    op.create_table(
        "integrations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("provider", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="disconnected"),
        sa.Column("auto_sync", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sync_interval_minutes", sa.Integer(), nullable=False, server_default="15"),
        sa.Column("sync_direction", sa.String(), nullable=False, server_default="bidirectional"),
        sa.Column("create_missing_records", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("update_existing_records", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("delete_removed_records", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("credentials", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("connected_at", sa.DateTime(), nullable=True),
        sa.Column("last_sync_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_integrations_company_id", "integrations", ["company_id"])
    op.create_index("ix_integrations_provider", "integrations", ["provider"])

    # Create integration_field_mappings table
    op.create_table(
        "integration_field_mappings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("integration_id", sa.Integer(), sa.ForeignKey("integrations.id"), nullable=False),
        sa.Column("local_field", sa.String(), nullable=False),
        sa.Column("remote_object", sa.String(), nullable=False),
        sa.Column("remote_field", sa.String(), nullable=False),
        sa.Column("direction", sa.String(), nullable=False, server_default="bidirectional"),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_integration_field_mappings_integration_id", "integration_field_mappings", ["integration_id"]
    )

    # Create integration_sync_logs table
    op.create_table(
        "integration_sync_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("integration_id", sa.Integer(), sa.ForeignKey("integrations.id"), nullable=False),
        sa.Column("sync_type", sa.String(), nullable=False),
        sa.Column("records", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("details", sa.Text(), nullable=False, server_default="{}"),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_integration_sync_logs_integration_id", "integration_sync_logs", ["integration_id"])
    op.create_index("ix_integration_sync_logs_created_at", "integration_sync_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("integration_sync_logs")
    op.drop_table("integration_field_mappings")
    op.drop_table("integrations")
    op.drop_table("workflow_executions")
    op.drop_table("knowledge_base")
    op.drop_table("chat_messages")
    op.drop_table("chat_sessions")
    op.drop_table("call_transcripts")
    op.drop_table("calls")
    op.drop_table("workflows")
    op.drop_table("human_agents")
    op.drop_table("ai_agents")
    op.drop_table("customer_profiles")
    op.drop_table("companies")

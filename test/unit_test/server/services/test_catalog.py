"""Unit tests for catalog selection validation."""

from __future__ import annotations

import pytest

from lyriq.server.services.catalog import validate_agent_selection, validate_workflow_selection
from lyriq.server.services.errors import InvalidRequestError


class TestAgentSelection:
    def test_valid_selection(self):
        validate_agent_selection(
            {
                "voice_provider": "openai",
                "voice_id": "Nova",
                "tools": ["transfer", "refund"],
                "end_of_call_actions": ["summary-crm"],
                "integrations": ["hubspot"],
            }
        )

    def test_missing_fields_are_not_checked(self):
        validate_agent_selection({})

    @pytest.mark.parametrize(
        "data, fragment",
        [
            ({"voice_provider": "polly"}, "Unknown voice_provider"),
            ({"voice_provider": "azure", "voice_id": "Rachel"}, "not offered by azure"),
            ({"tools": ["transfer", "teleport"]}, "Unknown tools: teleport"),
            ({"end_of_call_actions": ["fax"]}, "Unknown end_of_call_actions"),
            ({"integrations": ["myspace"]}, "Unknown integrations"),
        ],
    )
    def test_rejects_unknown_ids(self, data, fragment):
        with pytest.raises(InvalidRequestError, match=fragment):
            validate_agent_selection(data)

    def test_error_lists_allowed_ids(self):
        with pytest.raises(InvalidRequestError) as exc_info:
            validate_agent_selection({"tools": ["teleport"]})

        assert exc_info.value.status_code == 400
        assert "transfer" in exc_info.value.details["allowed"]


class TestWorkflowSelection:
    def test_valid_selection(self):
        validate_workflow_selection(
            {"trigger_source": "salesforce", "actions": ["outbound-call"], "post_call_actions": ["log-call"]}
        )

    def test_unknown_trigger_source(self):
        with pytest.raises(InvalidRequestError, match="trigger_source"):
            validate_workflow_selection({"trigger_source": "carrier-pigeon"})

    def test_webhook_trigger_requires_url(self):
        with pytest.raises(InvalidRequestError, match="webhook_url"):
            validate_workflow_selection({"trigger_source": "webhook"})

        validate_workflow_selection({"trigger_source": "webhook"}, webhook_url="http://localhost/hook")

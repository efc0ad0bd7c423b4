"""
Unit tests for the Logfire monitoring module.

This test suite covers:
- Initialization guards (disabled, missing token, configure failure)
- Instrumentation feature flags
- The logging helpers with Logfire active and inactive
"""

from unittest.mock import MagicMock, patch

import pytest

from lyriq.core import monitoring


@pytest.fixture
def mock_logfire():
    with patch.object(monitoring, "logfire") as mock:
        yield mock


@pytest.fixture(autouse=True)
def reset_active_flag():
    monitoring._logfire_active = False
    yield
    monitoring._logfire_active = False


class TestInitializeLogfire:
    def test_disabled_does_nothing(self, mock_logfire):
        with patch.object(monitoring, "LOGFIRE_ENABLED", False):
            monitoring.initialize_logfire()

        mock_logfire.configure.assert_not_called()
        assert monitoring.is_logfire_active() is False

    def test_enabled_without_token_warns(self, mock_logfire):
        with (
            patch.object(monitoring, "LOGFIRE_ENABLED", True),
            patch.object(monitoring, "LOGFIRE_TOKEN", ""),
            patch.object(monitoring, "logger") as mock_logger,
        ):
            monitoring.initialize_logfire()

        mock_logfire.configure.assert_not_called()
        mock_logger.warning.assert_called_once()
        assert monitoring.is_logfire_active() is False

    def test_configure_failure_is_logged(self, mock_logfire):
        mock_logfire.configure.side_effect = RuntimeError("bad token")
        with (
            patch.object(monitoring, "LOGFIRE_ENABLED", True),
            patch.object(monitoring, "LOGFIRE_TOKEN", "tok"),
            patch.object(monitoring, "logger") as mock_logger,
        ):
            monitoring.initialize_logfire()

        mock_logger.error.assert_called_once()
        assert monitoring.is_logfire_active() is False

    def test_full_instrumentation(self, mock_logfire):
        app = MagicMock()
        with (
            patch.object(monitoring, "LOGFIRE_ENABLED", True),
            patch.object(monitoring, "LOGFIRE_TOKEN", "tok"),
            patch.object(monitoring, "LOGFIRE_TRACE_SQLALCHEMY", True),
            patch.object(monitoring, "LOGFIRE_TRACE_HTTPX", True),
            patch.object(monitoring, "LOGFIRE_TRACE_FASTAPI", True),
        ):
            monitoring.initialize_logfire(app)

        mock_logfire.configure.assert_called_once()
        assert mock_logfire.configure.call_args.kwargs["token"] == "tok"
        mock_logfire.instrument_sqlalchemy.assert_called_once()
        mock_logfire.instrument_httpx.assert_called_once()
        mock_logfire.instrument_fastapi.assert_called_once_with(app=app)
        assert monitoring.is_logfire_active() is True

    def test_feature_flags_and_instrumentation_errors(self, mock_logfire):
        mock_logfire.instrument_httpx.side_effect = RuntimeError("no httpx")
        with (
            patch.object(monitoring, "LOGFIRE_ENABLED", True),
            patch.object(monitoring, "LOGFIRE_TOKEN", "tok"),
            patch.object(monitoring, "LOGFIRE_TRACE_SQLALCHEMY", False),
            patch.object(monitoring, "LOGFIRE_TRACE_HTTPX", True),
            patch.object(monitoring, "LOGFIRE_TRACE_FASTAPI", True),
            patch.object(monitoring, "logger") as mock_logger,
        ):
            monitoring.initialize_logfire()

        mock_logfire.instrument_sqlalchemy.assert_not_called()
        mock_logfire.instrument_fastapi.assert_not_called()
        mock_logger.warning.assert_called_once()
        assert monitoring.is_logfire_active() is True


class TestLoggingHelpers:
    def test_inactive_helpers_skip_logfire(self, mock_logfire):
        monitoring.log_api_request("GET", "/health", 200, 1.5)
        monitoring.log_error("ValueError", "boom")
        monitoring.log_workflow_event("call-handling.started", "call-CA1", company_id=1)

        mock_logfire.info.assert_not_called()
        mock_logfire.error.assert_not_called()

    def test_workflow_event_always_logs(self, mock_logfire):
        with patch.object(monitoring, "logger") as mock_logger:
            monitoring.log_workflow_event("lead-processing.started", "lead-1")

        mock_logger.info.assert_called_once()
        assert "lead-1" in mock_logger.info.call_args.args[0]

    def test_active_helpers_report_to_logfire(self, mock_logfire):
        monitoring._logfire_active = True

        monitoring.log_api_request("POST", "/api/v1/calls", 201, 12.0)
        monitoring.log_workflow_event("integration-sync.signalled", "sync-1", company_id=3, integration_id=9)
        monitoring.log_error("WorkflowApiError", "bridge down", {"path": "/x"})

        assert mock_logfire.info.call_count == 2
        request_call, workflow_call = mock_logfire.info.call_args_list
        assert request_call.kwargs["status_code"] == 201
        assert workflow_call.kwargs["integration_id"] == 9
        mock_logfire.error.assert_called_once()
        assert mock_logfire.error.call_args.kwargs["path"] == "/x"

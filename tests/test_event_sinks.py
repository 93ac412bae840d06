"""Tests for session event sinks."""

import logging
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from brand_discovery.adapters.events import CompositeEventSink, LoggingEventSink, SlackEventSink
from brand_discovery.core import EventType

COMPLETED = {"newSitesFound": 2, "duplicatesFiltered": 7, "totalQueries": 12, "errors": 1}


@pytest.mark.asyncio
async def test_slack_posts_completed_event() -> None:
    """Test a completed session is posted to the webhook."""
    sink = SlackEventSink("https://hooks.slack.com/services/test", brand_name="Acme")

    with patch("httpx.AsyncClient") as mock_client:
        mock_response = Mock()
        mock_response.raise_for_status = Mock()
        mock_post = AsyncMock(return_value=mock_response)
        mock_client.return_value.__aenter__.return_value.post = mock_post

        await sink.emit("session-1", EventType.DISCOVERY_COMPLETED, COMPLETED)

        assert mock_post.call_args.args[0] == "https://hooks.slack.com/services/test"
        payload = mock_post.call_args.kwargs["json"]
        assert "Acme" in payload["text"]
        assert "session-1" in payload["text"]
        assert "*2*" in payload["text"]
        assert payload["mrkdwn"] is True


@pytest.mark.asyncio
async def test_slack_skips_progress_events() -> None:
    """Test non-terminal events are not posted."""
    sink = SlackEventSink("https://hooks.slack.com/services/test")

    with patch("httpx.AsyncClient") as mock_client:
        mock_post = AsyncMock()
        mock_client.return_value.__aenter__.return_value.post = mock_post

        await sink.emit("session-1", EventType.DISCOVERY_PROGRESS, {"queriesProcessed": 1})
        await sink.emit("session-1", EventType.PROVIDER_ERROR, {"provider": "bing"})

        mock_post.assert_not_called()


@pytest.mark.asyncio
async def test_slack_without_webhook() -> None:
    """Test the sink is a no-op without a webhook."""
    await SlackEventSink(None).emit("session-1", EventType.DISCOVERY_COMPLETED, COMPLETED)


@pytest.mark.asyncio
async def test_slack_api_error_is_not_raised() -> None:
    """Test webhook failures are logged, not raised."""
    sink = SlackEventSink("https://hooks.slack.com/services/test")

    with patch("httpx.AsyncClient") as mock_client:
        mock_response = Mock()
        mock_response.raise_for_status = Mock(side_effect=httpx.HTTPError("API Error"))
        mock_client.return_value.__aenter__.return_value.post = AsyncMock(return_value=mock_response)

        await sink.emit("session-1", EventType.DISCOVERY_ERROR, {"error": "Cancelled by user"})


def test_slack_error_message() -> None:
    """Test the failure message carries the error."""
    text = SlackEventSink("x").format_message("s1", EventType.DISCOVERY_ERROR, {"error": "boom"})

    assert "failed: boom" in text


@pytest.mark.asyncio
async def test_logging_sink(caplog: pytest.LogCaptureFixture) -> None:
    """Test events are written to the log."""
    with caplog.at_level(logging.DEBUG, logger="brand_discovery"):
        await LoggingEventSink().emit("s1", EventType.PROVIDER_ERROR, {"provider": "bing"})

    assert "provider_error" in caplog.text
    assert caplog.records[0].levelno == logging.WARNING


@pytest.mark.asyncio
async def test_composite_isolates_failures() -> None:
    """Test a failing sink does not stop delivery to the rest."""
    failing = AsyncMock()
    failing.emit.side_effect = RuntimeError("down")
    working = AsyncMock()

    await CompositeEventSink([failing, working]).emit("s1", EventType.DISCOVERY_STARTED, {})

    working.emit.assert_awaited_once_with("s1", EventType.DISCOVERY_STARTED, {})

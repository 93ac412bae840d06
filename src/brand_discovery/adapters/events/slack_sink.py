"""Slack webhook event sink."""

import logging
from typing import Any, Optional

import httpx

from brand_discovery.core import EventSink, EventType

logger = logging.getLogger(__name__)


class SlackEventSink(EventSink):
    """Post session outcomes to a Slack incoming webhook.

    Only terminal events are sent; progress would flood the channel.
    """

    notify_on = frozenset({EventType.DISCOVERY_COMPLETED, EventType.DISCOVERY_ERROR})

    def __init__(self, webhook_url: Optional[str] = None, brand_name: str = "") -> None:
        """Args:
            webhook_url: Slack webhook URL. If None, events are skipped.
            brand_name: brand shown in the message header.
        """
        self.webhook_url = webhook_url
        self.brand_name = brand_name

    def format_message(self, session_id: str, event_type: EventType, payload: dict[str, Any]) -> str:
        header = f"*Brand discovery{' - ' + self.brand_name if self.brand_name else ''}*"
        if event_type is EventType.DISCOVERY_COMPLETED:
            return (
                f"{header}\n"
                f"Session `{session_id}` completed\n"
                f"• New sites: *{payload.get('newSitesFound', 0)}*\n"
                f"• Duplicates filtered: {payload.get('duplicatesFiltered', 0)}\n"
                f"• Queries: {payload.get('totalQueries', 0)}"
                f" ({payload.get('errors', 0)} with errors)"
            )
        return f"{header}\nSession `{session_id}` failed: {payload.get('error', 'unknown error')}"

    async def emit(self, session_id: str, event_type: EventType, payload: dict[str, Any]) -> None:
        if not self.webhook_url or event_type not in self.notify_on:
            return

        message = {
            "text": self.format_message(session_id, event_type, payload),
            "mrkdwn": True,
        }

        async with httpx.AsyncClient(timeout=30.0) as client:
            try:
                response = await client.post(self.webhook_url, json=message)
                response.raise_for_status()
                logger.info("Sent %s for session %s to Slack", event_type.value, session_id)
            except httpx.HTTPError as e:
                logger.warning("Could not post to Slack: %s", e)

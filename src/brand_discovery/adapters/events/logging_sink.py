"""Event sink that writes session events to the log."""

import logging
from typing import Any

from brand_discovery.core import EventSink, EventType

logger = logging.getLogger(__name__)

_WARNING_EVENTS = {EventType.PROVIDER_ERROR, EventType.DISCOVERY_ERROR}


class LoggingEventSink(EventSink):
    """Log every event; provider and session errors at WARNING."""

    async def emit(self, session_id: str, event_type: EventType, payload: dict[str, Any]) -> None:
        level = logging.WARNING if event_type in _WARNING_EVENTS else logging.DEBUG
        if event_type in (EventType.DISCOVERY_STARTED, EventType.DISCOVERY_COMPLETED):
            level = logging.INFO
        logger.log(level, "[%s] %s %s", session_id, event_type.value, payload)

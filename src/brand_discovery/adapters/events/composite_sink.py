"""Fan one event out to several sinks."""

import logging
from typing import Any

from brand_discovery.core import EventSink, EventType

logger = logging.getLogger(__name__)


class CompositeEventSink(EventSink):
    """Deliver to every sink in order; a failing sink does not stop the others."""

    def __init__(self, sinks: list[EventSink]) -> None:
        self.sinks = list(sinks)

    async def emit(self, session_id: str, event_type: EventType, payload: dict[str, Any]) -> None:
        for sink in self.sinks:
            try:
                await sink.emit(session_id, event_type, payload)
            except Exception:
                logger.warning(
                    "%s failed to deliver %s", type(sink).__name__, event_type.value, exc_info=True
                )

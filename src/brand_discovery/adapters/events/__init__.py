"""Session event sinks."""

from brand_discovery.adapters.events.composite_sink import CompositeEventSink
from brand_discovery.adapters.events.logging_sink import LoggingEventSink
from brand_discovery.adapters.events.slack_sink import SlackEventSink

__all__ = ["CompositeEventSink", "LoggingEventSink", "SlackEventSink"]

"""
Unit tests for shared logging configuration.
"""

import structlog

from shared.logging import configure_logging


class TestConfigureLogging:
    """Test cases for configure_logging."""

    def test_timestamp_stays_iso(self):
        configure_logging("gateway", "info")
        processors = structlog.get_config()["processors"]

        stamper = next(
            index for index, processor in enumerate(processors)
            if isinstance(processor, structlog.processors.TimeStamper)
        )
        event = {"event": "Request forwarded"}
        for processor in processors[stamper:-1]:
            event = processor(None, "info", event)

        assert isinstance(event["timestamp"], str)
        assert "T" in event["timestamp"]

"""Tests for structured logging."""

import json
import logging

from clapp.logging_config import JSONFormatter, redact


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="clapp.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Saved %s",
        args=("agent",),
        exc_info=None,
    )
    for name, value in extra.items():
        setattr(record, name, value)
    return record


class TestRedact:
    """Tests for redact()."""

    def test_masks_secrets(self):
        """Test that key material is masked."""
        assert redact({"api_key": "sk-1", "agent_id": "a"}) == {
            "api_key": "***",
            "agent_id": "a",
        }

    def test_masks_nested(self):
        """Test that nested dicts are masked too."""
        masked = redact({"profile": {"apiKey": "sk-1", "braveKey": "b", "name": "x"}})
        assert masked == {"profile": {"apiKey": "***", "braveKey": "***", "name": "x"}}

    def test_leaves_empty_secrets(self):
        """Test that empty values are kept as-is."""
        assert redact({"token": None}) == {"token": None}


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_format(self):
        """Test the JSON record layout."""
        data = json.loads(JSONFormatter().format(make_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "clapp.test"
        assert data["message"] == "Saved agent"
        assert "context" not in data

    def test_context_is_redacted(self):
        """Test that context secrets never reach the sink."""
        record = make_record(context={"agent_id": "a", "token": "local-abc"})
        data = json.loads(JSONFormatter().format(record))
        assert data["context"] == {"agent_id": "a", "token": "***"}

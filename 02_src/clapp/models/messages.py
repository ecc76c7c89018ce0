"""Conversation message data models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class Role(str, Enum):
    """Author of a conversation message."""

    USER = "user"
    AGENT = "agent"
    SYSTEM = "system"


@dataclass
class ConversationMessage:
    """A single entry in an agent's conversation."""

    role: Role
    text: str
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConversationMessage":
        """Raises KeyError, TypeError or ValueError on malformed data."""
        if not isinstance(data, dict):
            raise TypeError("message entry must be an object")
        text = data["text"]
        if not isinstance(text, str):
            raise TypeError("message text must be a string")

        ts = datetime.fromisoformat(data["timestamp"])
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)

        return cls(role=Role(data["role"]), text=text, timestamp=ts)

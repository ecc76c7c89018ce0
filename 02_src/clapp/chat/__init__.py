"""Chat session module."""

from .replies import NO_CONTENT_PLACEHOLDER, decode_reply, extract_reply_text
from .session import ChatSession, IChatSession

__all__ = [
    "ChatSession",
    "IChatSession",
    "NO_CONTENT_PLACEHOLDER",
    "decode_reply",
    "extract_reply_text",
]

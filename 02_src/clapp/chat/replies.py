"""Decoding of the gateway's textual JSON replies.

The reply of an ``agent`` call varies in shape. It is decoded against an
explicit, lenient schema into one of four reply kinds, tried in order:

1. ``PayloadsReply`` non-blank ``result.payloads[].text`` joined by a blank line
2. ``SummaryReply`` ``result.summary``, then a top-level ``summary``
3. ``ErrorReply`` top-level ``error`` (a string or an object with ``message``)
4. ``EmptyReply`` nothing usable, rendered as ``NO_CONTENT_PLACEHOLDER``

Decoding never raises: wrongly typed fields count as absent and malformed
JSON decodes to ``EmptyReply``.
"""

import json
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..errors import ParseError
from ..logging_config import get_logger

logger = get_logger(__name__)

NO_CONTENT_PLACEHOLDER = "[agent returned no text]"
PAYLOAD_SEPARATOR = "\n\n"


def _text_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


class ReplyPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str | None = None

    @field_validator("text", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str | None:
        return _text_or_none(value)


class ReplyResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    payloads: list[ReplyPayload] = []
    summary: str | None = None

    @field_validator("payloads", mode="before")
    @classmethod
    def only_object_payloads(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    @field_validator("summary", mode="before")
    @classmethod
    def coerce_summary(cls, value: Any) -> str | None:
        return _text_or_none(value)


class ReplyEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    result: ReplyResult | None = None
    summary: str | None = None
    error: str | None = None

    @field_validator("result", mode="before")
    @classmethod
    def only_object_result(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @field_validator("error", mode="before")
    @classmethod
    def error_text(cls, value: Any) -> str | None:
        if isinstance(value, dict):
            value = value.get("message")
        return _text_or_none(value)

    @field_validator("summary", mode="before")
    @classmethod
    def coerce_summary(cls, value: Any) -> str | None:
        return _text_or_none(value)


@dataclass(frozen=True)
class PayloadsReply:
    text: str


@dataclass(frozen=True)
class SummaryReply:
    text: str


@dataclass(frozen=True)
class ErrorReply:
    text: str


@dataclass(frozen=True)
class EmptyReply:
    text: str = NO_CONTENT_PLACEHOLDER


GatewayReply = Union[PayloadsReply, SummaryReply, ErrorReply, EmptyReply]


def parse_envelope(raw: str) -> ReplyEnvelope:
    """Parse raw reply text; raises ParseError when it is not a JSON object."""
    try:
        document = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as e:
        # RecursionError: nesting deeper than the decoder can follow
        raise ParseError("Gateway reply is not valid JSON", str(e)) from e
    if not isinstance(document, dict):
        raise ParseError("Gateway reply is not a JSON object")
    try:
        return ReplyEnvelope.model_validate(document)
    except ValidationError as e:
        raise ParseError("Gateway reply has an unexpected shape", str(e)) from e


def classify(envelope: ReplyEnvelope) -> GatewayReply:
    result = envelope.result
    if result is not None:
        parts = [p.text for p in result.payloads if p.text and p.text.strip()]
        if parts:
            return PayloadsReply(PAYLOAD_SEPARATOR.join(parts))
        if result.summary:
            return SummaryReply(result.summary)
    if envelope.summary:
        return SummaryReply(envelope.summary)
    if envelope.error:
        return ErrorReply(envelope.error)
    return EmptyReply()


def decode_reply(raw: str) -> GatewayReply:
    try:
        envelope = parse_envelope(raw)
    except ParseError as e:
        logger.warning(f"Treating unreadable gateway reply as empty: {e}")
        return EmptyReply()
    return classify(envelope)


def extract_reply_text(raw: str) -> str:
    """Reply text for a raw gateway response, never raising."""
    return decode_reply(raw).text

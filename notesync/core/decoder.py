"""
Decoder from inbound protocol messages to reducer actions.

Each message maps to exactly one action or raises a DecodeError. Nothing
is coerced: a payload that does not match its tag's schema is rejected.
"""

import json
from collections.abc import Mapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

from notesync.models.actions import Action, Building, Focus, Initialize, Remove, Update
from notesync.models.messages import (
    PAYLOAD_TAGS,
    BuildingMessage,
    FocusMessage,
    InitializeMessage,
    Message,
    MessageTag,
    RemoveMessage,
    UpdateMessage,
)
from notesync.utils.exceptions import MalformedMessageError, MissingPayloadError, UnknownTagError

_message_adapter: TypeAdapter = TypeAdapter(Message)

_KNOWN_TAGS = frozenset(tag.value for tag in MessageTag)


class EventDecoder:
    """Validates message envelopes and turns them into actions."""

    def decode(self, raw: str | bytes | Mapping[str, Any]) -> Action:
        """
        Decode one inbound message.

        Args:
            raw: JSON text/bytes, or an already parsed envelope

        Returns:
            The action the message stands for

        Raises:
            MalformedMessageError: Not JSON, not an envelope, or invalid payload
            MissingPayloadError: Tag requires content and none was sent
            UnknownTagError: Tag is not part of the protocol
        """
        envelope = self._parse(raw)
        message = self.validate(envelope)
        return self.to_action(message)

    def _parse(self, raw: str | bytes | Mapping[str, Any]) -> dict[str, Any]:
        if isinstance(raw, Mapping):
            return dict(raw)

        try:
            envelope = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise MalformedMessageError(f"Message is not valid JSON: {e}") from e

        if not isinstance(envelope, dict):
            raise MalformedMessageError(
                "Message is not an object",
                context={"type": type(envelope).__name__},
            )
        return envelope

    def validate(self, envelope: Mapping[str, Any]) -> Message:
        """
        Check the envelope tag and payload.

        Returns:
            Typed message model
        """
        tag = envelope.get("tag")
        if not isinstance(tag, str):
            raise MalformedMessageError("Message has no string tag", context={"tag": tag})

        if tag not in _KNOWN_TAGS:
            raise UnknownTagError(f"Unknown message tag: {tag}", context={"tag": tag})

        if MessageTag(tag) in PAYLOAD_TAGS and envelope.get("content") is None:
            raise MissingPayloadError(f"Message '{tag}' has no content", context={"tag": tag})

        try:
            return _message_adapter.validate_python(dict(envelope))
        except ValidationError as e:
            raise MalformedMessageError(
                f"Invalid '{tag}' payload: {e.error_count()} validation error(s)",
                context={"tag": tag, "errors": e.errors(include_url=False)},
            ) from e

    def to_action(self, message: Message) -> Action:
        """Map a validated message to its action."""
        if isinstance(message, BuildingMessage):
            return Building()
        if isinstance(message, InitializeMessage):
            payload = message.content
            return Initialize(
                outgoing_links=payload.outgoing_links,
                titles=payload.titles,
                default_note_id=payload.default_note,
            )
        if isinstance(message, UpdateMessage):
            return Update(entries=message.content)
        if isinstance(message, RemoveMessage):
            return Remove(ids=message.content)
        if isinstance(message, FocusMessage):
            return Focus(id=message.content)

        # Unreachable while Message and MessageTag agree
        raise UnknownTagError(f"No action for message: {type(message).__name__}")

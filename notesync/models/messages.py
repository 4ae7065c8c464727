"""
Inbound protocol messages streamed by the notes authority.

Every message is an envelope ``{"tag": ..., "content": ...}``. The
envelope variants form a discriminated union on ``tag`` and are
validated once, at the decode boundary.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class MessageTag(str, Enum):
    """Tags understood by the decoder."""

    BUILDING = "building"
    INITIALIZE = "initialize"
    UPDATE = "update"
    REMOVE = "remove"
    FOCUS = "focus"


# Tags whose envelope must carry a "content" payload
PAYLOAD_TAGS = frozenset(
    {MessageTag.INITIALIZE, MessageTag.UPDATE, MessageTag.REMOVE, MessageTag.FOCUS}
)


class InitializePayload(BaseModel):
    """Full snapshot of the link graph and titles."""

    model_config = ConfigDict(strict=True)

    outgoing_links: dict[str, list[str]]
    titles: dict[str, str]
    default_note: str | None = None


class NoteUpdate(BaseModel):
    """Change record for a single note."""

    model_config = ConfigDict(strict=True, frozen=True)

    id: str
    title: str
    links: list[str]
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class BuildingMessage(BaseModel):
    model_config = ConfigDict(strict=True)

    tag: Literal["building"]


class InitializeMessage(BaseModel):
    model_config = ConfigDict(strict=True)

    tag: Literal["initialize"]
    content: InitializePayload


class UpdateMessage(BaseModel):
    model_config = ConfigDict(strict=True)

    tag: Literal["update"]
    content: list[NoteUpdate]


class RemoveMessage(BaseModel):
    model_config = ConfigDict(strict=True)

    tag: Literal["remove"]
    content: list[str]


class FocusMessage(BaseModel):
    model_config = ConfigDict(strict=True)

    tag: Literal["focus"]
    content: str


Message = Annotated[
    BuildingMessage | InitializeMessage | UpdateMessage | RemoveMessage | FocusMessage,
    Field(discriminator="tag"),
]

"""
Message variants — one model per message kind.

The `type` field of every variant is a single-valued Literal, so the wire
discriminator always matches the class that built the message.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field, TypeAdapter

from line_messaging.models.common import Area, Dimensions, Emoji, ExternalLink, Sender, WireModel

MAX_TEXT_LENGTH = 5000
MAX_EMOJIS = 20
MAX_IMAGEMAP_ACTIONS = 50


class URIAction(WireModel):
    """Imagemap action that opens a URI."""
    type: Literal["uri"] = "uri"
    label: Optional[str] = None
    link_uri: str = Field(alias="linkUri")
    area: Area


class MessageAction(WireModel):
    """Imagemap action that sends `text` as the user."""
    type: Literal["message"] = "message"
    label: Optional[str] = None
    text: str
    area: Area


ImagemapAction = Annotated[Union[URIAction, MessageAction], Field(discriminator="type")]


class ImagemapVideo(WireModel):
    """Video played inside an imagemap, with an optional link shown after playback."""
    original_content_url: str = Field(alias="originalContentUrl")
    preview_image_url: str = Field(alias="previewImageUrl")
    area: Area
    external_link: Optional[ExternalLink] = Field(default=None, alias="externalLink")


class TextMessage(WireModel):
    type: Literal["text"] = "text"
    sender: Optional[Sender] = None
    text: str = Field(min_length=1, max_length=MAX_TEXT_LENGTH)
    emojis: Optional[Annotated[tuple[Emoji, ...], Field(max_length=MAX_EMOJIS)]] = None


class StickerMessage(WireModel):
    type: Literal["sticker"] = "sticker"
    sender: Optional[Sender] = None
    package_id: str = Field(alias="packageId")
    sticker_id: str = Field(alias="stickerId")


class ImageMessage(WireModel):
    type: Literal["image"] = "image"
    sender: Optional[Sender] = None
    original_content_url: str = Field(alias="originalContentUrl")
    preview_image_url: str = Field(alias="previewImageUrl")


class VideoMessage(WireModel):
    type: Literal["video"] = "video"
    sender: Optional[Sender] = None
    original_content_url: str = Field(alias="originalContentUrl")
    preview_image_url: str = Field(alias="previewImageUrl")
    tracking_id: Optional[str] = Field(default=None, alias="trackingId")


class AudioMessage(WireModel):
    type: Literal["audio"] = "audio"
    sender: Optional[Sender] = None
    original_content_url: str = Field(alias="originalContentUrl")
    duration: int = Field(ge=0)  # milliseconds


class LocationMessage(WireModel):
    type: Literal["location"] = "location"
    sender: Optional[Sender] = None
    title: str
    address: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class ImagemapMessage(WireModel):
    type: Literal["imagemap"] = "imagemap"
    sender: Optional[Sender] = None
    base_url: str = Field(alias="baseUrl")
    alt_text: str = Field(alias="altText")
    base_size: Dimensions = Field(alias="baseSize")
    video: Optional[ImagemapVideo] = None
    actions: tuple[ImagemapAction, ...] = Field(default=(), max_length=MAX_IMAGEMAP_ACTIONS)


Message = Annotated[
    Union[
        TextMessage,
        StickerMessage,
        ImageMessage,
        VideoMessage,
        AudioMessage,
        LocationMessage,
        ImagemapMessage,
    ],
    Field(discriminator="type"),
]

MESSAGE_TYPES: tuple[type[WireModel], ...] = (
    TextMessage,
    StickerMessage,
    ImageMessage,
    VideoMessage,
    AudioMessage,
    LocationMessage,
    ImagemapMessage,
)

_message_adapter: TypeAdapter[Message] = TypeAdapter(Message)


def parse_message(data: dict[str, Any]) -> Message:
    """Decode a wire dict into the variant named by its `type` field."""
    return _message_adapter.validate_python(data)


def is_message(value: Any) -> bool:
    return isinstance(value, MESSAGE_TYPES)

"""
line-messaging — LINE Messaging API SDK for Python.

Compose message batches, target narrowcast audiences with recursive
recipient / demographic filters, and deliver them over an async transport.
"""

from line_messaging.client import LineMessaging, AsyncLineMessaging
from line_messaging.messaging import MessagingAPI
from line_messaging.errors import (
    LineMessagingError,
    AuthError,
    CapacityExceededError,
    InvalidEmojiPlacementError,
    FilterError,
    EmptyOperatorError,
    MalformedFilterError,
    EncodingError,
    TransportError,
    MissingRequestIdError,
    DecodeError,
    GatewayError,
)
from line_messaging.models.common import Area, Dimensions, Emoji, ExternalLink, Sender
from line_messaging.models.message import (
    TextMessage,
    StickerMessage,
    ImageMessage,
    VideoMessage,
    AudioMessage,
    LocationMessage,
    ImagemapMessage,
    ImagemapVideo,
    URIAction,
    MessageAction,
    Message,
    parse_message,
)
from line_messaging.models.batch import MessageBatch
from line_messaging.models.filter import (
    AudienceRecipient,
    RedeliveryRecipient,
    GenderFilter,
    AgeFilter,
    AppTypeFilter,
    AreaFilter,
    SubscriptionPeriodFilter,
    Filter,
    Limit,
    recipient_and,
    recipient_or,
    recipient_not,
    demographic_and,
    demographic_or,
    demographic_not,
    parse_recipient,
    parse_demographic,
)
from line_messaging.models.response import DeliveryResponse, NarrowcastProgress, Phase, ContentResponse
from line_messaging.transport.http import HttpTransport, Transport

__version__ = "0.1.0"
__all__ = [
    "LineMessaging",
    "AsyncLineMessaging",
    "MessagingAPI",
    "LineMessagingError",
    "AuthError",
    "CapacityExceededError",
    "InvalidEmojiPlacementError",
    "FilterError",
    "EmptyOperatorError",
    "MalformedFilterError",
    "EncodingError",
    "TransportError",
    "MissingRequestIdError",
    "DecodeError",
    "GatewayError",
    "Area",
    "Dimensions",
    "Emoji",
    "ExternalLink",
    "Sender",
    "TextMessage",
    "StickerMessage",
    "ImageMessage",
    "VideoMessage",
    "AudioMessage",
    "LocationMessage",
    "ImagemapMessage",
    "ImagemapVideo",
    "URIAction",
    "MessageAction",
    "Message",
    "parse_message",
    "MessageBatch",
    "AudienceRecipient",
    "RedeliveryRecipient",
    "GenderFilter",
    "AgeFilter",
    "AppTypeFilter",
    "AreaFilter",
    "SubscriptionPeriodFilter",
    "Filter",
    "Limit",
    "recipient_and",
    "recipient_or",
    "recipient_not",
    "demographic_and",
    "demographic_or",
    "demographic_not",
    "parse_recipient",
    "parse_demographic",
    "DeliveryResponse",
    "NarrowcastProgress",
    "Phase",
    "ContentResponse",
    "HttpTransport",
    "Transport",
]

"""
LINE Messaging error types.

Composition errors (capacity, emoji placement, filter shape) are raised at the
call that broke the rule. Transport and decode errors keep the raw status and
body for diagnostics.
"""

from typing import Any, Optional


class LineMessagingError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class AuthError(LineMessagingError):
    def __init__(self, message: str, code: str = "auth_error"):
        super().__init__(code, message)


class CapacityExceededError(LineMessagingError):
    def __init__(self, limit: int):
        super().__init__("capacity_exceeded", f"Message batch limit is {limit}", {"limit": limit})
        self.limit = limit


class InvalidEmojiPlacementError(LineMessagingError):
    def __init__(self, message: str, index: int):
        super().__init__("invalid_emoji_placement", message, {"index": index})
        self.index = index


class FilterError(LineMessagingError):
    """Base for audience filter construction and decoding errors."""


class EmptyOperatorError(FilterError):
    def __init__(self, operator: str):
        super().__init__("empty_operator", f"'{operator}' operator needs at least one child", {"operator": operator})
        self.operator = operator


class MalformedFilterError(FilterError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("malformed_filter", message, details)


class EncodingError(LineMessagingError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("encoding_error", message, details)


class TransportError(LineMessagingError):
    def __init__(self, message: str):
        super().__init__("transport_error", message)


class MissingRequestIdError(LineMessagingError):
    def __init__(self, status: int, raw_body: str = ""):
        super().__init__(
            "missing_request_id",
            f"HTTP {status} response carried no X-Line-Request-Id header",
            {"status": status},
        )
        self.status = status
        self.raw_body = raw_body


class DecodeError(LineMessagingError):
    def __init__(self, message: str, status: int, raw_body: str = ""):
        super().__init__("decode_error", message, {"status": status})
        self.status = status
        self.raw_body = raw_body


class GatewayError(LineMessagingError):
    """Non-2xx reply from an endpoint that returns a typed result."""

    def __init__(self, status: int, raw_body: str = "", error: Any = None):
        message = getattr(error, "message", None) or raw_body[:200]
        super().__init__("http_error", f"HTTP {status}: {message}", {"status": status})
        self.status = status
        self.raw_body = raw_body
        self.error = error

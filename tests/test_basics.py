"""Basic unit tests for line-messaging package."""

import pytest

from line_messaging import (
    AsyncLineMessaging,
    LineMessaging,
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
    MessageBatch,
    TextMessage,
    __version__,
)


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert LineMessaging is not None
    assert AsyncLineMessaging is not None


def test_error_hierarchy():
    for cls in (
        AuthError, CapacityExceededError, InvalidEmojiPlacementError, FilterError,
        EncodingError, TransportError, MissingRequestIdError, DecodeError, GatewayError,
    ):
        assert issubclass(cls, LineMessagingError)
    assert issubclass(EmptyOperatorError, FilterError)
    assert issubclass(MalformedFilterError, FilterError)


def test_error_attributes():
    err = LineMessagingError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    full = CapacityExceededError(5)
    assert full.code == "capacity_exceeded"
    assert full.details == {"limit": 5}

    empty = EmptyOperatorError("and")
    assert empty.code == "empty_operator"
    assert empty.operator == "and"

    missing = MissingRequestIdError(200, "{}")
    assert missing.status == 200
    assert missing.raw_body == "{}"


def test_client_requires_token():
    with pytest.raises(AuthError):
        AsyncLineMessaging()


def test_sync_client_runs_operations(transport):
    transport.reply_with(200, {"sentMessages": [{"id": "1001"}]}, headers={"X-Line-Request-Id": "r-1"})
    with LineMessaging(channel_access_token="tok", transport=transport) as client:
        result = client.push("U1", MessageBatch.of(TextMessage(text="hi")))
        transport.reply_with(200, {"type": "limited", "value": 1000})
        quota = client.get_quota()

    assert result.status == 200
    assert result.request_id == "r-1"
    assert result.sent_messages[0].id == "1001"
    assert transport.posts[0]["url"] == "https://api.line.me/v2/bot/message/push"
    assert transport.last_payload == {"to": "U1", "messages": [{"type": "text", "text": "hi"}]}
    assert quota.value == 1000

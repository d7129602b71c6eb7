"""Delivery operations against an in-memory transport."""

import json
from datetime import date

import pytest

from line_messaging import (
    AgeFilter,
    AsyncLineMessaging,
    AudienceRecipient,
    DecodeError,
    EncodingError,
    GatewayError,
    GenderFilter,
    Limit,
    MessageBatch,
    MissingRequestIdError,
    Phase,
    StickerMessage,
    TextMessage,
    TransportError,
    recipient_not,
)
from line_messaging.messaging import MessagingAPI

TOKEN = "channel-token"


def _api(transport) -> MessagingAPI:
    return MessagingAPI(transport, TOKEN)


def _hello() -> MessageBatch:
    batch = MessageBatch()
    batch.add(TextMessage(text="hello"))
    return batch


class TestReply:
    @pytest.mark.asyncio
    async def test_reply_success(self, transport):
        result = await _api(transport).reply("reply-token", _hello())
        assert result.ok
        assert result.status == 200
        assert result.system_message == ""
        assert result.error is None

        call = transport.posts[0]
        assert call["token"] == TOKEN
        assert call["url"] == "https://api.line.me/v2/bot/message/reply"
        assert transport.last_payload == {
            "replyToken": "reply-token",
            "messages": [{"type": "text", "text": "hello"}],
        }

    @pytest.mark.asyncio
    async def test_reply_requires_token(self, transport):
        with pytest.raises(EncodingError):
            await _api(transport).reply("", _hello())
        assert transport.posts == []

    @pytest.mark.asyncio
    async def test_empty_batch_never_dispatched(self, transport):
        with pytest.raises(EncodingError):
            await _api(transport).reply("reply-token", MessageBatch())
        assert transport.posts == []

    @pytest.mark.asyncio
    async def test_error_body_decoded(self, transport):
        transport.reply_with(400, {
            "message": "The request body has 1 error(s)",
            "details": [{"message": "May not be empty", "property": "messages[0].text"}],
        })
        result = await _api(transport).reply("reply-token", _hello())
        assert not result.ok
        assert result.status == 400
        assert result.system_message == "The request body has 1 error(s)"
        assert result.error.details[0].property == "messages[0].text"
        assert "May not be empty" in result.raw_body

    @pytest.mark.asyncio
    async def test_unparseable_error_body_kept_raw(self, transport):
        transport.reply_with(502, b"<html>Bad Gateway</html>")
        result = await _api(transport).reply("reply-token", _hello())
        assert result.status == 502
        assert result.error is None
        assert result.raw_body == "<html>Bad Gateway</html>"

    @pytest.mark.asyncio
    async def test_success_body_must_be_json(self, transport):
        transport.reply_with(200, b"not json")
        with pytest.raises(DecodeError) as exc:
            await _api(transport).reply("reply-token", _hello())
        assert exc.value.status == 200
        assert exc.value.raw_body == "not json"


class TestPushAndMulticast:
    @pytest.mark.asyncio
    async def test_push_payload(self, transport):
        transport.reply_with(200, {"sentMessages": [{"id": "461230966842064897", "quoteToken": "IStG5h1Tz7b"}]},
                             headers={"x-line-request-id": "req-1"})
        batch = MessageBatch.of(TextMessage(text="hi"), StickerMessage(package_id="446", sticker_id="1988"))
        result = await _api(transport).push("U123", batch, notification_disabled=True)

        assert transport.posts[0]["url"].endswith("/v2/bot/message/push")
        payload = transport.last_payload
        assert payload["to"] == "U123"
        assert payload["notificationDisabled"] is True
        assert [m["type"] for m in payload["messages"]] == ["text", "sticker"]
        assert result.sent_messages[0].id == "461230966842064897"
        assert result.sent_messages[0].quote_token == "IStG5h1Tz7b"
        assert result.request_id == "req-1"

    @pytest.mark.asyncio
    async def test_multicast_payload(self, transport):
        await _api(transport).multicast(["U1", "U2"], _hello())
        assert transport.last_payload["to"] == ["U1", "U2"]

    @pytest.mark.asyncio
    async def test_multicast_bounds(self, transport):
        api = _api(transport)
        with pytest.raises(EncodingError):
            await api.multicast([], _hello())
        with pytest.raises(EncodingError):
            await api.multicast([f"U{i}" for i in range(501)], _hello())
        with pytest.raises(EncodingError):
            await api.multicast("U1", _hello())
        assert transport.posts == []


class TestNarrowcast:
    @pytest.mark.asyncio
    async def test_payload(self, transport):
        transport.reply_with(202, b"{}", headers={"X-Line-Request-Id": "nc-1"})
        result = await _api(transport).narrowcast(
            _hello(),
            recipient=recipient_not(AudienceRecipient(42)),
            filter=GenderFilter(["female"]),
            limit=Limit(max=10),
        )
        assert result.status == 202
        assert result.request_id == "nc-1"
        payload = transport.last_payload
        assert payload["recipient"] == {"type": "operator", "not": {"type": "audience", "audienceGroupId": 42}}
        assert payload["filter"] == {"demographic": {"type": "gender", "oneOf": ["female"]}}
        assert payload["limit"] == {"max": 10, "upToRemainingQuota": False}
        assert "notificationDisabled" not in payload

    @pytest.mark.asyncio
    async def test_recipient_type_checked(self, transport):
        with pytest.raises(EncodingError):
            await _api(transport).narrowcast(_hello(), recipient=AgeFilter(gte="age_20"))

    @pytest.mark.asyncio
    async def test_deep_recipient_encodes(self, transport):
        node = AudienceRecipient(1)
        for _ in range(2000):
            node = recipient_not(node)
        await _api(transport).narrowcast(_hello(), recipient=node)
        body = transport.posts[0]["body"].decode()
        assert body.count('"not":') == 2000


class TestBroadcast:
    @pytest.mark.asyncio
    async def test_request_id_required(self, transport):
        transport.reply_with(200, b"{}")
        with pytest.raises(MissingRequestIdError) as exc:
            await _api(transport).broadcast(_hello())
        assert exc.value.status == 200

    @pytest.mark.asyncio
    async def test_request_id_read_from_header(self, transport):
        transport.reply_with(200, b"{}", headers={"X-Line-Request-Id": "bc-7"})
        result = await _api(transport).broadcast(_hello())
        assert result.request_id == "bc-7"
        assert transport.last_payload == {"messages": [{"type": "text", "text": "hello"}]}

    @pytest.mark.asyncio
    async def test_failure_does_not_need_request_id(self, transport):
        transport.reply_with(429, {"message": "You have reached your monthly limit."})
        result = await _api(transport).broadcast(_hello())
        assert result.status == 429
        assert result.error.message == "You have reached your monthly limit."


class TestNarrowcastStatus:
    @pytest.mark.asyncio
    async def test_succeeded(self, transport):
        transport.reply_with(200, {"phase": "succeeded", "success_count": 10, "failure_count": 0})
        progress = await _api(transport).get_narrowcast_status("req-9")
        assert progress.phase is Phase.SUCCEEDED
        assert progress.success_count == 10
        assert progress.failure_count == 0
        assert progress.is_terminal
        assert transport.gets[0]["query"] == {"requestId": "req-9"}
        assert transport.gets[0]["url"] == "https://api.line.me/v2/bot/message/progress/narrowcast"

    @pytest.mark.asyncio
    async def test_camel_case_fields(self, transport):
        transport.reply_with(200, {
            "phase": "failed",
            "failedDescription": "unknown",
            "errorCode": 1,
            "acceptedTime": "2020-12-03T10:43:05.824Z",
        })
        progress = await _api(transport).get_narrowcast_status("req-9")
        assert progress.phase is Phase.FAILED
        assert progress.failed_description == "unknown"
        assert progress.error_code == 1

    @pytest.mark.asyncio
    async def test_sending_is_not_terminal(self, transport):
        transport.reply_with(200, {"phase": "sending"})
        progress = await _api(transport).get_narrowcast_status("req-9")
        assert not progress.is_terminal
        assert progress.raw_body == '{"phase": "sending"}'

    @pytest.mark.asyncio
    async def test_unknown_phase(self, transport):
        transport.reply_with(200, {"phase": "paused"})
        with pytest.raises(DecodeError):
            await _api(transport).get_narrowcast_status("req-9")

    @pytest.mark.asyncio
    async def test_gateway_error(self, transport):
        transport.reply_with(404, {"message": "Not found"})
        with pytest.raises(GatewayError) as exc:
            await _api(transport).get_narrowcast_status("req-9")
        assert exc.value.status == 404
        assert exc.value.error.message == "Not found"


class TestQueries:
    @pytest.mark.asyncio
    async def test_quota(self, transport):
        transport.reply_with(200, {"type": "limited", "value": 1000})
        quota = await _api(transport).get_quota()
        assert quota.type == "limited"
        assert quota.value == 1000

    @pytest.mark.asyncio
    async def test_quota_consumption(self, transport):
        transport.reply_with(200, {"totalUsage": 500})
        consumption = await _api(transport).get_quota_consumption()
        assert consumption.total_usage == 500

    @pytest.mark.asyncio
    async def test_delivery_count(self, transport):
        transport.reply_with(200, {"status": "ready", "success": 10000})
        count = await _api(transport).get_delivery_count("push", date(2024, 1, 31))
        assert count.count_status.value == "ready"
        assert count.success == 10000
        assert transport.gets[0]["url"].endswith("/v2/bot/message/delivery/push")
        assert transport.gets[0]["query"] == {"date": "20240131"}

    @pytest.mark.asyncio
    async def test_delivery_count_kind(self, transport):
        with pytest.raises(ValueError):
            await _api(transport).get_delivery_count("narrowcast", "20240131")


class TestContent:
    @pytest.mark.asyncio
    async def test_binary_content(self, transport):
        png = b"\x89PNG\r\n\x1a\n\x00\xff"
        transport.reply_with(200, png)
        result = await _api(transport).get_content("325708")
        assert result.content == png
        assert result.system_message == ""
        assert transport.gets[0]["url"] == "https://api-data.line.me/v2/bot/message/325708/content"

    @pytest.mark.asyncio
    async def test_text_content(self, transport):
        transport.reply_with(404, {"message": "Not found"})
        result = await _api(transport).get_content("325708")
        assert result.status == 404
        assert json.loads(result.system_message) == {"message": "Not found"}


class TestTransportErrors:
    @pytest.mark.asyncio
    async def test_passed_through(self):
        class Broken:
            async def post_json(self, token, url, body):
                raise TransportError("connection reset")

        with pytest.raises(TransportError):
            await MessagingAPI(Broken(), TOKEN).push("U1", _hello())


class TestClient:
    @pytest.mark.asyncio
    async def test_delegates_to_messaging(self, transport):
        async with AsyncLineMessaging(channel_access_token=TOKEN, transport=transport,
                                      api_base_url="http://localhost:8080/") as client:
            await client.push("U1", _hello())
        assert transport.posts[0]["url"] == "http://localhost:8080/v2/bot/message/push"

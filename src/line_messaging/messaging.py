"""
Messaging API — delivery operations and their replies.

Each send operation follows the same steps: validate and encode the batch,
hand the body to the transport (the only await), decode the reply.
"""

from __future__ import annotations

import json
import logging
from datetime import date as Date
from typing import Any, Mapping, Optional, Sequence, TypeVar, Union
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from line_messaging.errors import DecodeError, EncodingError, GatewayError, MissingRequestIdError
from line_messaging.models.batch import MessageBatch
from line_messaging.models.filter import DemographicNode, Filter, Limit, RecipientNode
from line_messaging.models.response import (
    ContentResponse,
    DeliveryCount,
    DeliveryResponse,
    ErrorBody,
    MessageQuota,
    NarrowcastProgress,
    QuotaConsumption,
    SentMessage,
)
from line_messaging.serialization import dumps_bytes
from line_messaging.transport.http import Transport

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.line.me"
DEFAULT_DATA_API_BASE_URL = "https://api-data.line.me"

REPLY_PATH = "/v2/bot/message/reply"
PUSH_PATH = "/v2/bot/message/push"
MULTICAST_PATH = "/v2/bot/message/multicast"
NARROWCAST_PATH = "/v2/bot/message/narrowcast"
BROADCAST_PATH = "/v2/bot/message/broadcast"
NARROWCAST_PROGRESS_PATH = "/v2/bot/message/progress/narrowcast"
QUOTA_PATH = "/v2/bot/message/quota"
QUOTA_CONSUMPTION_PATH = "/v2/bot/message/quota/consumption"
DELIVERY_COUNT_PATH = "/v2/bot/message/delivery/{kind}"
CONTENT_PATH = "/v2/bot/message/{message_id}/content"

REQUEST_ID_HEADER = "X-Line-Request-Id"
MAX_MULTICAST_RECIPIENTS = 500
DELIVERY_COUNT_KINDS = ("reply", "push", "multicast", "broadcast")

M = TypeVar("M", bound=BaseModel)


def _text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


def _json_object(text: str) -> Optional[dict[str, Any]]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    if not headers:
        return None
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in headers.items():
            if key.lower() == lowered:
                value = candidate
                break
    return value or None


def _error_body(text: str) -> Optional[ErrorBody]:
    data = _json_object(text)
    if data is None or "message" not in data:
        return None
    try:
        return ErrorBody.model_validate(data)
    except ValidationError:
        return None


def _is_success(status: int) -> bool:
    return 200 <= status < 300


class MessagingAPI:
    def __init__(
        self,
        transport: Transport,
        channel_access_token: str,
        api_base_url: str = DEFAULT_API_BASE_URL,
        data_api_base_url: str = DEFAULT_DATA_API_BASE_URL,
    ):
        self._transport = transport
        self._token = channel_access_token
        self._api_base_url = api_base_url.rstrip("/")
        self._data_api_base_url = data_api_base_url.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self._api_base_url}{path}"

    # -- sending -------------------------------------------------------------

    async def reply(
        self, reply_token: str, batch: MessageBatch, notification_disabled: Optional[bool] = None,
    ) -> DeliveryResponse:
        """Answer a webhook event using its reply token."""
        if not reply_token:
            raise EncodingError("reply_token is required")
        return await self._send(REPLY_PATH, {"replyToken": reply_token}, batch, notification_disabled)

    async def push(
        self, to: str, batch: MessageBatch, notification_disabled: Optional[bool] = None,
    ) -> DeliveryResponse:
        """Send to one user, group or room id."""
        if not to:
            raise EncodingError("Push target is required")
        return await self._send(PUSH_PATH, {"to": to}, batch, notification_disabled)

    async def multicast(
        self, to: Sequence[str], batch: MessageBatch, notification_disabled: Optional[bool] = None,
    ) -> DeliveryResponse:
        """Send to up to 500 user ids."""
        if isinstance(to, str):
            raise EncodingError("Multicast expects a list of user ids, not a single string")
        targets = list(to)
        if not targets or len(targets) > MAX_MULTICAST_RECIPIENTS:
            raise EncodingError(
                f"Multicast needs 1 to {MAX_MULTICAST_RECIPIENTS} recipients, got {len(targets)}",
                {"count": len(targets)},
            )
        if not all(isinstance(t, str) and t for t in targets):
            raise EncodingError("Multicast recipients must be non-empty strings")
        return await self._send(MULTICAST_PATH, {"to": targets}, batch, notification_disabled)

    async def narrowcast(
        self,
        batch: MessageBatch,
        recipient: Optional[RecipientNode] = None,
        filter: Optional[Union[Filter, DemographicNode]] = None,
        limit: Optional[Limit] = None,
        notification_disabled: Optional[bool] = None,
    ) -> DeliveryResponse:
        """Send to the friends selected by `recipient` and the demographic `filter`.

        The gateway accepts the request asynchronously (HTTP 202); poll
        `get_narrowcast_status` with `request_id` for the outcome.
        """
        target: dict[str, Any] = {}
        if recipient is not None:
            if not isinstance(recipient, RecipientNode):
                raise EncodingError(f"recipient must be a recipient filter, got {type(recipient).__name__}")
            target["recipient"] = recipient.to_wire()
        if filter is not None:
            if isinstance(filter, DemographicNode):
                filter = Filter(filter)
            if not isinstance(filter, Filter):
                raise EncodingError(f"filter must be a demographic filter, got {type(filter).__name__}")
            target["filter"] = filter.to_wire()
        if limit is not None:
            target["limit"] = limit.to_wire()
        return await self._send(NARROWCAST_PATH, target, batch, notification_disabled)

    async def broadcast(
        self, batch: MessageBatch, notification_disabled: Optional[bool] = None,
    ) -> DeliveryResponse:
        """Send to every friend of the account. A successful reply must carry a request id."""
        result = await self._send(BROADCAST_PATH, {}, batch, notification_disabled)
        if result.ok and result.request_id is None:
            raise MissingRequestIdError(result.status, result.raw_body)
        return result

    async def _send(
        self,
        path: str,
        target: dict[str, Any],
        batch: MessageBatch,
        notification_disabled: Optional[bool],
    ) -> DeliveryResponse:
        body = self._encode(target, batch, notification_disabled)
        url = self._url(path)
        logger.debug("Dispatching %d message(s) to %s", len(batch), url)
        status, raw, headers = await self._transport.post_json(self._token, url, body)
        return self._decode_delivery(path, status, raw, headers)

    @staticmethod
    def _encode(target: dict[str, Any], batch: MessageBatch, notification_disabled: Optional[bool]) -> bytes:
        if not isinstance(batch, MessageBatch):
            raise EncodingError(f"Expected a MessageBatch, got {type(batch).__name__}")
        messages = batch.validate()
        payload = dict(target)
        payload["messages"] = [message.to_wire() for message in messages]
        if notification_disabled is not None:
            payload["notificationDisabled"] = bool(notification_disabled)
        return dumps_bytes(payload)

    @staticmethod
    def _decode_delivery(
        path: str, status: int, raw: bytes, headers: Optional[Mapping[str, str]],
    ) -> DeliveryResponse:
        text = _text(raw)
        request_id = _header(headers, REQUEST_ID_HEADER)

        if not _is_success(status):
            error = _error_body(text)
            logger.warning("%s returned HTTP %s: %s", path, status, error.message if error else text[:200])
            return DeliveryResponse(
                status=status,
                system_message=error.message if error else "",
                error=error,
                raw_body=text,
                request_id=request_id,
            )

        if not text.strip():
            return DeliveryResponse(status=status, raw_body=text, request_id=request_id)
        data = _json_object(text)
        if data is None:
            raise DecodeError(f"{path} returned a body that is not a JSON object", status, text)
        message = data.get("message")
        try:
            sent = [SentMessage.model_validate(m) for m in data.get("sentMessages") or []]
        except (ValidationError, TypeError) as e:
            raise DecodeError(f"Unexpected sentMessages in {path} reply: {e}", status, text) from e
        return DeliveryResponse(
            status=status,
            system_message=message if isinstance(message, str) else "",
            sent_messages=sent,
            raw_body=text,
            request_id=request_id,
        )

    # -- queries -------------------------------------------------------------

    async def get_narrowcast_status(self, request_id: str) -> NarrowcastProgress:
        """Fetch the progress of a narrowcast started earlier."""
        if not request_id:
            raise EncodingError("request_id is required")
        return await self._get_model(
            NarrowcastProgress, self._url(NARROWCAST_PROGRESS_PATH), {"requestId": request_id},
        )

    async def get_quota(self) -> MessageQuota:
        return await self._get_model(MessageQuota, self._url(QUOTA_PATH))

    async def get_quota_consumption(self) -> QuotaConsumption:
        return await self._get_model(QuotaConsumption, self._url(QUOTA_CONSUMPTION_PATH))

    async def get_delivery_count(self, kind: str, date: Union[str, Date]) -> DeliveryCount:
        """Number of messages of `kind` sent on `date` (yyyyMMdd, Asia/Tokyo)."""
        if kind not in DELIVERY_COUNT_KINDS:
            raise ValueError(f"kind must be one of {', '.join(DELIVERY_COUNT_KINDS)}, got {kind!r}")
        day = date.strftime("%Y%m%d") if isinstance(date, Date) else date
        return await self._get_model(
            DeliveryCount, self._url(DELIVERY_COUNT_PATH.format(kind=kind)), {"date": day},
        )

    async def _get_model(self, model: type[M], url: str, query: Optional[dict[str, str]] = None) -> M:
        status, raw = await self._transport.get(self._token, url, query)
        text = _text(raw)
        if not _is_success(status):
            error = _error_body(text)
            logger.warning("GET %s returned HTTP %s", url, status)
            raise GatewayError(status, text, error)
        data = _json_object(text)
        if data is None:
            raise DecodeError(f"GET {url} returned a body that is not a JSON object", status, text)
        try:
            result = model.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Unexpected reply from GET {url}: {e}", status, text) from e
        update: dict[str, Any] = {}
        if "status" in model.model_fields and model.model_fields["status"].annotation is int:
            update["status"] = status
        if "raw_body" in model.model_fields:
            update["raw_body"] = text
        return result.model_copy(update=update) if update else result

    # -- content -------------------------------------------------------------

    async def get_content(self, message_id: str) -> ContentResponse:
        """Download the media a user sent. Content bytes are returned untouched."""
        if not message_id:
            raise EncodingError("message_id is required")
        url = f"{self._data_api_base_url}{CONTENT_PATH.format(message_id=quote(message_id, safe=''))}"
        status, raw = await self._transport.get(self._token, url, None)
        try:
            system_message = raw.decode("utf-8")
        except UnicodeDecodeError:
            system_message = ""
        if not _is_success(status):
            logger.warning("GET %s returned HTTP %s", url, status)
        return ContentResponse(status=status, content=raw, system_message=system_message)

"""
LineMessaging / AsyncLineMessaging — main SDK clients.
"""

import asyncio
from datetime import date as Date
from typing import Any, Optional, Sequence, Union

from line_messaging.errors import AuthError
from line_messaging.messaging import DEFAULT_API_BASE_URL, DEFAULT_DATA_API_BASE_URL, MessagingAPI
from line_messaging.models.batch import MessageBatch
from line_messaging.models.filter import DemographicNode, Filter, Limit, RecipientNode
from line_messaging.models.response import (
    ContentResponse,
    DeliveryCount,
    DeliveryResponse,
    MessageQuota,
    NarrowcastProgress,
    QuotaConsumption,
)
from line_messaging.transport.http import HttpTransport, Transport


class AsyncLineMessaging:
    """Async LINE Messaging client (primary)."""

    def __init__(
        self,
        channel_access_token: Optional[str] = None,
        api_base_url: str = DEFAULT_API_BASE_URL,
        data_api_base_url: str = DEFAULT_DATA_API_BASE_URL,
        transport: Optional[Transport] = None,
        timeout: float = 30.0,
    ):
        if not channel_access_token:
            raise AuthError("channel_access_token required. Issue one in the LINE Developers console.")
        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpTransport(timeout=timeout)
        self.messaging = MessagingAPI(
            self.transport,
            channel_access_token,
            api_base_url=api_base_url,
            data_api_base_url=data_api_base_url,
        )

    async def __aenter__(self) -> "AsyncLineMessaging":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_transport and isinstance(self.transport, HttpTransport):
            await self.transport.close()

    async def reply(self, reply_token: str, batch: MessageBatch, **kwargs: Any) -> DeliveryResponse:
        return await self.messaging.reply(reply_token, batch, **kwargs)

    async def push(self, to: str, batch: MessageBatch, **kwargs: Any) -> DeliveryResponse:
        return await self.messaging.push(to, batch, **kwargs)

    async def multicast(self, to: Sequence[str], batch: MessageBatch, **kwargs: Any) -> DeliveryResponse:
        return await self.messaging.multicast(to, batch, **kwargs)

    async def narrowcast(
        self,
        batch: MessageBatch,
        recipient: Optional[RecipientNode] = None,
        filter: Optional[Union[Filter, DemographicNode]] = None,
        limit: Optional[Limit] = None,
        **kwargs: Any,
    ) -> DeliveryResponse:
        return await self.messaging.narrowcast(batch, recipient=recipient, filter=filter, limit=limit, **kwargs)

    async def broadcast(self, batch: MessageBatch, **kwargs: Any) -> DeliveryResponse:
        return await self.messaging.broadcast(batch, **kwargs)

    async def get_narrowcast_status(self, request_id: str) -> NarrowcastProgress:
        return await self.messaging.get_narrowcast_status(request_id)

    async def get_quota(self) -> MessageQuota:
        return await self.messaging.get_quota()

    async def get_quota_consumption(self) -> QuotaConsumption:
        return await self.messaging.get_quota_consumption()

    async def get_delivery_count(self, kind: str, date: Union[str, Date]) -> DeliveryCount:
        return await self.messaging.get_delivery_count(kind, date)

    async def get_content(self, message_id: str) -> ContentResponse:
        return await self.messaging.get_content(message_id)


class LineMessaging:
    """Sync wrapper around AsyncLineMessaging. Runs the event loop internally."""

    def __init__(self, **kwargs: Any):
        self._async = AsyncLineMessaging(**kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def messaging(self) -> MessagingAPI:
        return self._async.messaging

    def close(self) -> None:
        self._run(self._async.close())
        self._loop.close()

    def __enter__(self) -> "LineMessaging":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def reply(self, reply_token: str, batch: MessageBatch, **kwargs: Any) -> DeliveryResponse:
        return self._run(self._async.reply(reply_token, batch, **kwargs))

    def push(self, to: str, batch: MessageBatch, **kwargs: Any) -> DeliveryResponse:
        return self._run(self._async.push(to, batch, **kwargs))

    def multicast(self, to: Sequence[str], batch: MessageBatch, **kwargs: Any) -> DeliveryResponse:
        return self._run(self._async.multicast(to, batch, **kwargs))

    def narrowcast(self, batch: MessageBatch, **kwargs: Any) -> DeliveryResponse:
        return self._run(self._async.narrowcast(batch, **kwargs))

    def broadcast(self, batch: MessageBatch, **kwargs: Any) -> DeliveryResponse:
        return self._run(self._async.broadcast(batch, **kwargs))

    def get_narrowcast_status(self, request_id: str) -> NarrowcastProgress:
        return self._run(self._async.get_narrowcast_status(request_id))

    def get_quota(self) -> MessageQuota:
        return self._run(self._async.get_quota())

    def get_quota_consumption(self) -> QuotaConsumption:
        return self._run(self._async.get_quota_consumption())

    def get_delivery_count(self, kind: str, date: Union[str, Date]) -> DeliveryCount:
        return self._run(self._async.get_delivery_count(kind, date))

    def get_content(self, message_id: str) -> ContentResponse:
        return self._run(self._async.get_content(message_id))

"""
Decoded gateway replies.
"""

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class ErrorDetail(BaseModel):
    message: Optional[str] = None
    property: Optional[str] = None


class ErrorBody(BaseModel):
    """Structured error body: {"message": ..., "details": [...]}"""
    message: str = ""
    details: list[ErrorDetail] = []


class SentMessage(BaseModel):
    id: str
    quote_token: Optional[str] = Field(default=None, alias="quoteToken")

    model_config = {"populate_by_name": True}


class DeliveryResponse(BaseModel):
    """Result of reply / push / multicast / narrowcast / broadcast.

    Non-2xx replies are returned too; `error` holds the parsed error body
    when there was one, and `raw_body` always holds the text as received.
    """
    status: int
    system_message: str = ""
    error: Optional[ErrorBody] = None
    sent_messages: list[SentMessage] = []
    raw_body: str = ""
    request_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Phase(str, Enum):
    WAITING = "waiting"
    SENDING = "sending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_PHASES = {Phase.SUCCEEDED, Phase.FAILED}


def _alias(camel: str, snake: str) -> AliasChoices:
    return AliasChoices(camel, snake)


class NarrowcastProgress(BaseModel):
    """Progress of a narrowcast; poll until `is_terminal`."""
    status: int = 200
    phase: Phase
    success_count: Optional[int] = Field(default=None, validation_alias=_alias("successCount", "success_count"))
    failure_count: Optional[int] = Field(default=None, validation_alias=_alias("failureCount", "failure_count"))
    target_count: Optional[int] = Field(default=None, validation_alias=_alias("targetCount", "target_count"))
    failed_description: Optional[str] = Field(
        default=None, validation_alias=_alias("failedDescription", "failed_description"),
    )
    error_code: Optional[int] = Field(default=None, validation_alias=_alias("errorCode", "error_code"))
    accepted_time: Optional[str] = Field(default=None, validation_alias=_alias("acceptedTime", "accepted_time"))
    completed_time: Optional[str] = Field(default=None, validation_alias=_alias("completedTime", "completed_time"))
    raw_body: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES


class MessageQuota(BaseModel):
    """Monthly message limit; `type` is "none" (unlimited) or "limited"."""
    status: int = 200
    type: str
    value: Optional[int] = None


class QuotaConsumption(BaseModel):
    status: int = 200
    total_usage: int = Field(validation_alias=_alias("totalUsage", "total_usage"))


class DeliveryCountStatus(str, Enum):
    READY = "ready"
    UNREADY = "unready"
    OUT_OF_SERVICE = "out_of_service"


class DeliveryCount(BaseModel):
    """Messages sent on one day; `success` is only set once `count_status` is ready."""
    count_status: DeliveryCountStatus = Field(validation_alias=_alias("status", "count_status"))
    success: Optional[int] = None


class ContentResponse(BaseModel):
    status: int
    content: bytes = b""
    system_message: str = ""

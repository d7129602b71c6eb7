"""
Message batch — the ordered list of up to five messages sent in one request.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from line_messaging.errors import CapacityExceededError, EncodingError, InvalidEmojiPlacementError, LineMessagingError
from line_messaging.models.message import Message, TextMessage, is_message

MAX_MESSAGES = 5


def check_emoji_placement(message: TextMessage) -> None:
    """Every emoji index must point inside the text, one emoji per index."""
    if not message.emojis:
        return
    seen: set[int] = set()
    for emoji in message.emojis:
        if emoji.index >= len(message.text):
            raise InvalidEmojiPlacementError(
                f"Emoji index {emoji.index} is outside text of length {len(message.text)}",
                emoji.index,
            )
        if emoji.index in seen:
            raise InvalidEmojiPlacementError(f"Two emojis placed at index {emoji.index}", emoji.index)
        seen.add(emoji.index)


class MessageBatch:
    """Ordered, bounded collection of messages. Insertion order is delivery order.

    A batch is built by one owner and handed to a single delivery call;
    it is not safe to mutate from several tasks at once.
    """

    MAX_MESSAGES = MAX_MESSAGES

    def __init__(self) -> None:
        self._messages: list[Message] = []

    @classmethod
    def of(cls, *messages: Message) -> MessageBatch:
        batch = cls()
        batch.extend(messages)
        return batch

    def add(self, message: Message) -> None:
        """Append a message. Raises CapacityExceededError when the batch already holds five."""
        if len(self._messages) >= MAX_MESSAGES:
            raise CapacityExceededError(MAX_MESSAGES)
        self._check(message)
        self._messages.append(message)

    def extend(self, messages: Iterable[Message]) -> None:
        """Append several messages, or none of them if any would be rejected."""
        pending = list(messages)
        if len(self._messages) + len(pending) > MAX_MESSAGES:
            raise CapacityExceededError(MAX_MESSAGES)
        for message in pending:
            self._check(message)
        self._messages.extend(pending)

    @staticmethod
    def _check(message: Any) -> None:
        if not is_message(message):
            raise TypeError(f"Expected a message variant, got {type(message).__name__}")
        if isinstance(message, TextMessage):
            check_emoji_placement(message)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def is_full(self) -> bool:
        return len(self._messages) >= MAX_MESSAGES

    def validate(self) -> tuple[Message, ...]:
        """Re-check the batch right before encoding and return a snapshot of it."""
        snapshot = tuple(self._messages)
        if not snapshot:
            raise EncodingError("Message batch is empty")
        if len(snapshot) > MAX_MESSAGES:
            raise EncodingError(f"Message batch holds {len(snapshot)} messages, limit is {MAX_MESSAGES}")
        for message in snapshot:
            try:
                self._check(message)
            except (LineMessagingError, TypeError) as e:
                raise EncodingError(f"Invalid message in batch: {e}") from e
        return snapshot

    def to_wire(self) -> list[dict[str, Any]]:
        return [message.to_wire() for message in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __repr__(self) -> str:
        kinds = ", ".join(message.type for message in self._messages)
        return f"MessageBatch([{kinds}])"

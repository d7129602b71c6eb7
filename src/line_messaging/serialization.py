"""
Compact JSON encoding for request bodies.

`json.dumps` recurses once per nesting level, which a deep narrowcast filter
can exceed. This encoder walks containers with an explicit stack and only
hands scalars to the json module.
"""

import json
from typing import Any

from line_messaging.errors import EncodingError


class _Token(str):
    """Literal JSON text already rendered."""


_OPEN_OBJECT = _Token("{")
_CLOSE_OBJECT = _Token("}")
_OPEN_ARRAY = _Token("[")
_CLOSE_ARRAY = _Token("]")
_COMMA = _Token(",")


def _scalar(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Cannot encode {type(value).__name__} value: {e}") from e


def dumps(value: Any) -> str:
    chunks: list[str] = []
    stack: list[Any] = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, _Token):
            chunks.append(item)
        elif isinstance(item, dict):
            chunks.append(_OPEN_OBJECT)
            pending: list[Any] = [_CLOSE_OBJECT]
            entries = list(item.items())
            for i in range(len(entries) - 1, -1, -1):
                key, member = entries[i]
                if not isinstance(key, str):
                    raise EncodingError(f"Object keys must be strings, got {type(key).__name__}")
                pending.append(member)
                pending.append(_Token(_scalar(key) + ":"))
                if i:
                    pending.append(_COMMA)
            stack.extend(pending)
        elif isinstance(item, (list, tuple)):
            chunks.append(_OPEN_ARRAY)
            pending = [_CLOSE_ARRAY]
            for i in range(len(item) - 1, -1, -1):
                pending.append(item[i])
                if i:
                    pending.append(_COMMA)
            stack.extend(pending)
        else:
            chunks.append(_scalar(item))
    return "".join(chunks)


def dumps_bytes(value: Any) -> bytes:
    return dumps(value).encode("utf-8")

"""
Narrowcast audience filters.

Two separate boolean expression trees:

- Recipient:   audience-group leaves combined with and / or / not
- Demographic: gender, age, app type, area and subscription-period leaves
               combined with and / or / not

Operators hold exactly one of and / or / not. Encoding and decoding walk the
tree with an explicit stack, so depth is bounded by memory, not by the
interpreter's recursion limit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Optional, Sequence

from line_messaging.errors import EmptyOperatorError, MalformedFilterError

OPERATOR_KEYS = ("and", "or", "not")

GENDERS = ("male", "female")
AGE_BUCKETS = (
    "age_15", "age_20", "age_25", "age_30", "age_35", "age_40",
    "age_45", "age_50", "age_55", "age_60", "age_65", "age_70",
)
APP_TYPES = ("ios", "android")
SUBSCRIPTION_PERIODS = ("day_7", "day_30", "day_90", "day_180", "day_365")

MAX_AUDIENCE_GROUP_ID = 2**64 - 1


class FilterNode:
    """Common base of both trees."""

    def children(self) -> tuple[FilterNode, ...]:
        return ()

    def _key(self) -> tuple[Any, ...]:
        """Fields of this node alone, children excluded."""
        return ()

    def _encode(self, encoded_children: list[dict[str, Any]]) -> dict[str, Any]:
        raise NotImplementedError

    def to_wire(self) -> dict[str, Any]:
        return encode_tree(self)

    # Equality and hashing use an explicit stack, like encode_tree.

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FilterNode):
            return NotImplemented
        stack: list[tuple[FilterNode, FilterNode]] = [(self, other)]
        while stack:
            a, b = stack.pop()
            if a is b:
                continue
            if type(a) is not type(b) or a._key() != b._key():
                return False
            kids_a, kids_b = a.children(), b.children()
            if len(kids_a) != len(kids_b):
                return False
            stack.extend(zip(kids_a, kids_b))
        return True

    def __hash__(self) -> int:
        shape: list[tuple[Any, ...]] = []
        stack: list[FilterNode] = [self]
        while stack:
            node = stack.pop()
            kids = node.children()
            shape.append((type(node).__qualname__, node._key(), len(kids)))
            stack.extend(reversed(kids))
        return hash(tuple(shape))


class RecipientNode(FilterNode):
    """Node of a recipient tree."""


class DemographicNode(FilterNode):
    """Node of a demographic tree."""


def encode_tree(root: FilterNode) -> dict[str, Any]:
    """Post-order walk; each node is encoded once its children are."""
    out: list[dict[str, Any]] = []
    stack: list[tuple[FilterNode, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        kids = node.children()
        if kids and not expanded:
            stack.append((node, True))
            stack.extend((kid, False) for kid in reversed(kids))
            continue
        split = len(out) - len(kids)
        encoded = out[split:]
        del out[split:]
        out.append(node._encode(encoded))
    return out[0]


# -- operators ---------------------------------------------------------------

@dataclass(frozen=True, repr=False, eq=False)
class _NaryOperator(FilterNode):
    operands: tuple[FilterNode, ...]

    op: ClassVar[str] = ""
    family: ClassVar[type] = FilterNode

    def __post_init__(self) -> None:
        children = self.operands
        if isinstance(children, FilterNode):
            children = (children,)
        children = tuple(children)
        if not children:
            raise EmptyOperatorError(self.op)
        for child in children:
            _check_family(child, self.family, self.op)
        object.__setattr__(self, "operands", children)

    def children(self) -> tuple[FilterNode, ...]:
        return self.operands

    def _encode(self, encoded_children: list[dict[str, Any]]) -> dict[str, Any]:
        return {"type": "operator", self.op: encoded_children}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(<{len(self.operands)} children>)"


@dataclass(frozen=True, repr=False, eq=False)
class _NotOperator(FilterNode):
    child: FilterNode

    op: ClassVar[str] = "not"
    family: ClassVar[type] = FilterNode

    def __post_init__(self) -> None:
        _check_family(self.child, self.family, self.op)

    def children(self) -> tuple[FilterNode, ...]:
        return (self.child,)

    def _encode(self, encoded_children: list[dict[str, Any]]) -> dict[str, Any]:
        return {"type": "operator", "not": encoded_children[0]}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(<{type(self.child).__name__}>)"


def _check_family(child: Any, family: type, op: str) -> None:
    if not isinstance(child, family):
        raise MalformedFilterError(
            f"'{op}' operator expects {family.__name__} children, got {type(child).__name__}",
            {"operator": op},
        )


# -- recipient tree ----------------------------------------------------------

@dataclass(frozen=True, eq=False)
class AudienceRecipient(RecipientNode):
    audience_group_id: int

    def __post_init__(self) -> None:
        if isinstance(self.audience_group_id, bool) or not isinstance(self.audience_group_id, int) \
                or not 0 <= self.audience_group_id <= MAX_AUDIENCE_GROUP_ID:
            raise MalformedFilterError(f"Invalid audience group id: {self.audience_group_id!r}")

    def _key(self) -> tuple[Any, ...]:
        return (self.audience_group_id,)

    def _encode(self, encoded_children: list[dict[str, Any]]) -> dict[str, Any]:
        return {"type": "audience", "audienceGroupId": self.audience_group_id}


@dataclass(frozen=True, eq=False)
class RedeliveryRecipient(RecipientNode):
    """Users who received the message sent with `request_id`."""
    request_id: str

    def __post_init__(self) -> None:
        if not self.request_id:
            raise MalformedFilterError("Redelivery recipient needs a request id")

    def _key(self) -> tuple[Any, ...]:
        return (self.request_id,)

    def _encode(self, encoded_children: list[dict[str, Any]]) -> dict[str, Any]:
        return {"type": "redelivery", "requestId": self.request_id}


@dataclass(frozen=True, repr=False, eq=False)
class RecipientAnd(_NaryOperator, RecipientNode):
    op: ClassVar[str] = "and"
    family: ClassVar[type] = RecipientNode


@dataclass(frozen=True, repr=False, eq=False)
class RecipientOr(_NaryOperator, RecipientNode):
    op: ClassVar[str] = "or"
    family: ClassVar[type] = RecipientNode


@dataclass(frozen=True, repr=False, eq=False)
class RecipientNot(_NotOperator, RecipientNode):
    family: ClassVar[type] = RecipientNode


def recipient_and(*children: RecipientNode) -> RecipientAnd:
    return RecipientAnd(children)


def recipient_or(*children: RecipientNode) -> RecipientOr:
    return RecipientOr(children)


def recipient_not(child: RecipientNode) -> RecipientNot:
    return RecipientNot(child)


# -- demographic tree --------------------------------------------------------

@dataclass(frozen=True, eq=False)
class _OneOfFilter(DemographicNode):
    one_of: tuple[str, ...]

    kind: ClassVar[str] = ""

    def __post_init__(self) -> None:
        values = self.one_of
        if isinstance(values, str):
            values = (values,)
        values = tuple(values)
        if not values:
            raise MalformedFilterError(f"'{self.kind}' filter needs at least one value")
        for value in values:
            if not isinstance(value, str):
                raise MalformedFilterError(f"'{self.kind}' filter values must be strings, got {value!r}")
        object.__setattr__(self, "one_of", values)

    def _key(self) -> tuple[Any, ...]:
        return self.one_of

    def _encode(self, encoded_children: list[dict[str, Any]]) -> dict[str, Any]:
        return {"type": self.kind, "oneOf": list(self.one_of)}


@dataclass(frozen=True, eq=False)
class _RangeFilter(DemographicNode):
    gte: Optional[str] = None
    lt: Optional[str] = None

    kind: ClassVar[str] = ""

    def __post_init__(self) -> None:
        if self.gte is None and self.lt is None:
            raise MalformedFilterError(f"'{self.kind}' filter needs gte, lt or both")
        for bound in (self.gte, self.lt):
            if bound is not None and not isinstance(bound, str):
                raise MalformedFilterError(f"'{self.kind}' bounds must be strings, got {bound!r}")

    def _key(self) -> tuple[Any, ...]:
        return (self.gte, self.lt)

    def _encode(self, encoded_children: list[dict[str, Any]]) -> dict[str, Any]:
        wire: dict[str, Any] = {"type": self.kind}
        if self.gte is not None:
            wire["gte"] = self.gte
        if self.lt is not None:
            wire["lt"] = self.lt
        return wire


@dataclass(frozen=True, eq=False)
class GenderFilter(_OneOfFilter):
    kind: ClassVar[str] = "gender"


@dataclass(frozen=True, eq=False)
class AgeFilter(_RangeFilter):
    kind: ClassVar[str] = "age"


@dataclass(frozen=True, eq=False)
class AppTypeFilter(_OneOfFilter):
    kind: ClassVar[str] = "appType"


@dataclass(frozen=True, eq=False)
class AreaFilter(_OneOfFilter):
    """Region codes such as "jp_13"."""
    kind: ClassVar[str] = "area"


@dataclass(frozen=True, eq=False)
class SubscriptionPeriodFilter(_RangeFilter):
    """Time since the user added the account as a friend."""
    kind: ClassVar[str] = "subscriptionPeriod"


@dataclass(frozen=True, repr=False, eq=False)
class DemographicAnd(_NaryOperator, DemographicNode):
    op: ClassVar[str] = "and"
    family: ClassVar[type] = DemographicNode


@dataclass(frozen=True, repr=False, eq=False)
class DemographicOr(_NaryOperator, DemographicNode):
    op: ClassVar[str] = "or"
    family: ClassVar[type] = DemographicNode


@dataclass(frozen=True, repr=False, eq=False)
class DemographicNot(_NotOperator, DemographicNode):
    family: ClassVar[type] = DemographicNode


def demographic_and(*children: DemographicNode) -> DemographicAnd:
    return DemographicAnd(children)


def demographic_or(*children: DemographicNode) -> DemographicOr:
    return DemographicOr(children)


def demographic_not(child: DemographicNode) -> DemographicNot:
    return DemographicNot(child)


# -- decoding ----------------------------------------------------------------

def _one_of(data: dict[str, Any]) -> Sequence[str]:
    values = data.get("oneOf", data.get("one_of"))
    if not isinstance(values, list):
        raise MalformedFilterError(f"'{data.get('type')}' filter needs a oneOf list")
    return values


def _parse_audience(data: dict[str, Any]) -> RecipientNode:
    group_id = data.get("audienceGroupId")
    if group_id is None:
        raise MalformedFilterError("Audience recipient is missing audienceGroupId")
    return AudienceRecipient(group_id)


def _parse_redelivery(data: dict[str, Any]) -> RecipientNode:
    return RedeliveryRecipient(data.get("requestId", ""))


_RECIPIENT_LEAVES: dict[str, Callable[[dict[str, Any]], FilterNode]] = {
    "audience": _parse_audience,
    "redelivery": _parse_redelivery,
}

_DEMOGRAPHIC_LEAVES: dict[str, Callable[[dict[str, Any]], FilterNode]] = {
    "gender": lambda d: GenderFilter(tuple(_one_of(d))),
    "appType": lambda d: AppTypeFilter(tuple(_one_of(d))),
    "area": lambda d: AreaFilter(tuple(_one_of(d))),
    "age": lambda d: AgeFilter(gte=d.get("gte"), lt=d.get("lt")),
    "subscriptionPeriod": lambda d: SubscriptionPeriodFilter(gte=d.get("gte"), lt=d.get("lt")),
}

_RECIPIENT_OPERATORS: dict[str, type] = {"and": RecipientAnd, "or": RecipientOr, "not": RecipientNot}
_DEMOGRAPHIC_OPERATORS: dict[str, type] = {"and": DemographicAnd, "or": DemographicOr, "not": DemographicNot}


def _operator_operands(data: dict[str, Any]) -> tuple[str, list[Any]]:
    present = [key for key in OPERATOR_KEYS if data.get(key) is not None]
    if len(present) != 1:
        raise MalformedFilterError(
            "Operator must set exactly one of and / or / not",
            {"present": present},
        )
    op = present[0]
    operand = data[op]
    if op == "not":
        return op, [operand]
    if not isinstance(operand, list):
        raise MalformedFilterError(f"'{op}' operator expects a list")
    if not operand:
        raise EmptyOperatorError(op)
    return op, operand


def _parse_tree(
    data: Any,
    leaves: dict[str, Callable[[dict[str, Any]], FilterNode]],
    operators: dict[str, type],
) -> FilterNode:
    out: list[FilterNode] = []
    stack: list[tuple[Any, bool]] = [(data, False)]
    while stack:
        item, expanded = stack.pop()
        if not isinstance(item, dict):
            raise MalformedFilterError(f"Filter node must be an object, got {type(item).__name__}")
        kind = item.get("type")
        if not isinstance(kind, str):
            raise MalformedFilterError(f"Filter type must be a string, got {kind!r}")
        if kind != "operator":
            parser = leaves.get(kind)
            if parser is None:
                raise MalformedFilterError(f"Unknown filter type: {kind!r}")
            out.append(parser(item))
            continue
        op, operands = _operator_operands(item)
        if not expanded:
            stack.append((item, True))
            stack.extend((operand, False) for operand in reversed(operands))
            continue
        split = len(out) - len(operands)
        children = out[split:]
        del out[split:]
        if op == "not":
            out.append(operators[op](children[0]))
        else:
            out.append(operators[op](tuple(children)))
    return out[0]


def parse_recipient(data: dict[str, Any]) -> RecipientNode:
    """Decode a wire recipient object, rejecting ambiguous operators."""
    return _parse_tree(data, _RECIPIENT_LEAVES, _RECIPIENT_OPERATORS)  # type: ignore[return-value]


def parse_demographic(data: dict[str, Any]) -> DemographicNode:
    """Decode a wire demographic object, rejecting ambiguous operators."""
    return _parse_tree(data, _DEMOGRAPHIC_LEAVES, _DEMOGRAPHIC_OPERATORS)  # type: ignore[return-value]


# -- narrowcast envelope -----------------------------------------------------

@dataclass(frozen=True)
class Filter:
    demographic: DemographicNode

    def __post_init__(self) -> None:
        _check_family(self.demographic, DemographicNode, "filter")

    def to_wire(self) -> dict[str, Any]:
        return {"demographic": self.demographic.to_wire()}


@dataclass(frozen=True)
class Limit:
    """Upper bound on narrowcast recipients."""
    max: Optional[int] = None
    up_to_remaining_quota: bool = False

    def __post_init__(self) -> None:
        if self.max is not None and (isinstance(self.max, bool) or not isinstance(self.max, int) or self.max < 1):
            raise ValueError(f"Limit max must be a positive integer, got {self.max!r}")

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"upToRemainingQuota": self.up_to_remaining_quota}
        if self.max is not None:
            wire["max"] = self.max
        return wire


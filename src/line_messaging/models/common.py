"""
Leaf value types shared by message variants.
"""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field


class WireModel(BaseModel):
    """Immutable model that dumps to the gateway's camelCase wire form."""

    model_config = {"populate_by_name": True, "frozen": True}

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Area(WireModel):
    """Clickable rectangle, in pixels relative to the base image."""
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int = Field(ge=0)
    height: int = Field(ge=0)


class Dimensions(WireModel):
    width: int = Field(ge=0)
    height: int = Field(ge=0)


class ExternalLink(WireModel):
    link_uri: str = Field(alias="linkUri")
    label: str


class Emoji(WireModel):
    """LINE emoji placed at a character offset of a text message."""
    index: int = Field(ge=0)
    product_id: str = Field(
        validation_alias=AliasChoices("productId", "product_id", "package_id"),
        serialization_alias="productId",
    )
    emoji_id: str = Field(
        validation_alias=AliasChoices("emojiId", "emoji_id"),
        serialization_alias="emojiId",
    )

    @property
    def package_id(self) -> str:
        return self.product_id


class Sender(WireModel):
    name: Optional[str] = None
    icon_url: Optional[str] = Field(default=None, alias="iconUrl")

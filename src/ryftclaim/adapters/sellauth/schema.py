"""Pydantic models describing the SellAuth invoice payloads."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from decimal import Decimal  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class SellAuthBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ProductImage(SellAuthBaseModel):
    url: str | None = None


class ProductPayload(SellAuthBaseModel):
    name: str | None = None
    category: str | None = None
    images: list[ProductImage] = Field(default_factory=list)

    _normalize_text = field_validator("name", "category", mode="before")(_blank_to_none)


class VariantPayload(SellAuthBaseModel):
    name: str | None = None

    _normalize_name = field_validator("name", mode="before")(_blank_to_none)


class InvoiceItemPayload(SellAuthBaseModel):
    product: ProductPayload | None = None
    variant: VariantPayload | None = None
    price_usd: Decimal | None = None
    quantity: int | None = None
    delivered: bool = False

    @field_validator("delivered", mode="before")
    @classmethod
    def _none_is_false(cls, value: object) -> object:
        return False if value is None else value

    @property
    def first_image_url(self) -> str | None:
        if self.product is None:
            return None
        for image in self.product.images:
            if image.url:
                return image.url
        return None


class InvoicePayload(SellAuthBaseModel):
    """One invoice as returned by ``GET /shops/{shop}/invoices/{invoice}``."""

    id: int | str
    email: str = ""
    created_at: datetime | None = None
    custom_field: str | None = None
    items: list[InvoiceItemPayload] = Field(default_factory=list)

    @field_validator("email", mode="before")
    @classmethod
    def _none_is_blank(cls, value: object) -> object:
        return "" if value is None else value

    _normalize_custom_field = field_validator("custom_field", mode="before")(_blank_to_none)

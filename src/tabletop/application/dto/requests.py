from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class OrderItemRequest(CamelBaseModel):
    menu_item_id: str | None = None
    quantity: int = 0
    special_instructions: str | None = None


class PlaceOrderRequest(CamelBaseModel):
    table_id: str | None = None
    restaurant_id: str | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    items: list[OrderItemRequest] = Field(default_factory=list)
    notes: str | None = None


class PlaceManualOrderRequest(CamelBaseModel):
    table_id: str | None = None
    table_number: str | int | None = None
    customer_name: str | None = None
    summary: str | None = None
    total_amount: Decimal | None = None
    payment_method: str | None = None
    items: list[OrderItemRequest] = Field(default_factory=list)


class AcceptOrderRequest(CamelBaseModel):
    preparation_time: int | None = Field(default=None, ge=0)


class RejectOrderRequest(CamelBaseModel):
    reason: str | None = None


class PrintOrderRequest(CamelBaseModel):
    printer_id: str


class CreateTableRequest(CamelBaseModel):
    table_number: str | int | None = None


class UpdateTableRequest(CamelBaseModel):
    table_number: str | int | None = None
    is_active: bool | None = None


class CreateCategoryRequest(CamelBaseModel):
    name: str | None = None
    description: str | None = None
    sort_order: int | None = None


class UpdateCategoryRequest(CamelBaseModel):
    name: str | None = None
    description: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None


class CreateMenuItemRequest(CamelBaseModel):
    category_id: str | None = None
    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    image_url: str | None = None
    is_vegetarian: bool | None = None
    is_vegan: bool | None = None
    allergens: list[str] | None = None
    sort_order: int | None = None


class UpdateMenuItemRequest(CreateMenuItemRequest):
    is_available: bool | None = None


class WaiterCallRequest(CamelBaseModel):
    table_id: str | None = None
    restaurant_id: str | None = None
    message: str | None = None


class RespondWaiterCallRequest(CamelBaseModel):
    response_text: str | None = None


class LabelRequest(CamelBaseModel):
    menu_item_id: str | None = None
    label_name: str | None = None
    ticket_id: str | None = None
    prepared_by: str | None = None
    prepared_at: str | None = None
    expires_at: str | None = None
    printed_by: str | None = None
    printed_at: str | None = None
    track_code: str | None = None
    notes: str | None = None


class RecipeRequest(CamelBaseModel):
    id: str | None = None
    name: str | None = None
    category: str | None = None
    description: str | None = None
    prep_time: str | None = None
    portion_yield: int | None = Field(default=None, alias="yield")
    ingredients: list[Any] | None = None
    instructions: list[Any] | None = None


class UpdateProfileRequest(CamelBaseModel):
    name: str | None = None
    phone: str | None = None
    address: str | None = None
    theme_color: str | None = None
    logo_url: str | None = None
    is_accepting_orders: bool | None = None
    service_hours: Any = None
    offline_notice: str | None = None

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MoneyResponse(BaseModel):
    amountCents: int
    amount: Decimal
    currency: str


class MessageResponse(BaseModel):
    message: str


class OrderLineResponse(BaseModel):
    lineId: str
    menuItemId: str
    itemName: str
    quantity: int
    unitPrice: MoneyResponse
    totalPrice: MoneyResponse
    specialInstructions: str | None = None


class OrderResponse(BaseModel):
    orderId: str
    restaurantId: str
    tableId: str
    tableNumber: str
    status: str
    customerName: str | None = None
    customerPhone: str | None = None
    items: list[OrderLineResponse] = Field(default_factory=list)
    total: MoneyResponse
    notes: str | None = None
    preparationTime: int | None = None
    rejectionReason: str | None = None
    createdAt: datetime
    acceptedAt: datetime | None = None
    rejectedAt: datetime | None = None
    cookingStartedAt: datetime | None = None
    finishedAt: datetime | None = None


class OrderEnvelope(BaseModel):
    message: str
    order: OrderResponse


class OrderListResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)
    nextCursor: str | None = None


class OrderStatsBody(BaseModel):
    pending: int = 0
    accepted: int = 0
    cooking: int = 0
    finished: int = 0
    rejected: int = 0
    totalRevenue: MoneyResponse


class OrderStatsResponse(BaseModel):
    date: str
    stats: OrderStatsBody


class PrintResultResponse(BaseModel):
    success: bool
    type: str
    data: str
    connectionString: str | None = None
    message: str


class PrintEnvelope(BaseModel):
    message: str
    printResult: PrintResultResponse


class RestaurantResponse(BaseModel):
    restaurantId: str
    name: str
    email: str
    phone: str | None = None
    address: str | None = None
    logoUrl: str | None = None
    themeColor: str | None = None
    isActive: bool
    isAcceptingOrders: bool
    serviceHours: Any = None
    offlineNotice: str | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


class RestaurantEnvelope(BaseModel):
    message: str | None = None
    restaurant: RestaurantResponse


class MenuItemResponse(BaseModel):
    itemId: str
    categoryId: str
    name: str
    description: str | None = None
    price: MoneyResponse
    imageUrl: str | None = None
    isAvailable: bool
    isVegetarian: bool
    isVegan: bool
    allergens: list[str] = Field(default_factory=list)
    sortOrder: int


class CategoryResponse(BaseModel):
    categoryId: str
    name: str
    description: str | None = None
    sortOrder: int
    isActive: bool
    items: list[MenuItemResponse] = Field(default_factory=list)


class TableRefResponse(BaseModel):
    tableId: str
    tableNumber: str


class PublicMenuResponse(BaseModel):
    restaurant: RestaurantResponse
    table: TableRefResponse | None = None
    menu: list[CategoryResponse] = Field(default_factory=list)


class CategoryEnvelope(BaseModel):
    message: str
    category: CategoryResponse


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse] = Field(default_factory=list)


class MenuItemEnvelope(BaseModel):
    message: str
    item: MenuItemResponse


class MenuItemListResponse(BaseModel):
    items: list[MenuItemResponse] = Field(default_factory=list)


class TableResponse(BaseModel):
    tableId: str
    restaurantId: str
    tableNumber: str
    isActive: bool
    qrCodeUrl: str | None = None
    createdAt: datetime | None = None


class TableEnvelope(BaseModel):
    message: str
    table: TableResponse


class TableListResponse(BaseModel):
    tables: list[TableResponse] = Field(default_factory=list)


class WaiterCallResponse(BaseModel):
    callId: str
    restaurantId: str
    tableId: str
    tableNumber: str
    status: str
    customerMessage: str | None = None
    responseMessage: str | None = None
    createdAt: datetime
    respondedAt: datetime | None = None
    resolvedAt: datetime | None = None


class WaiterCallEnvelope(BaseModel):
    call: WaiterCallResponse


class WaiterCallListResponse(BaseModel):
    calls: list[WaiterCallResponse] = Field(default_factory=list)


class PrinterResponse(BaseModel):
    printerId: str
    name: str
    type: str
    status: str
    isActive: bool
    updatedAt: datetime | None = None


class PrinterListResponse(BaseModel):
    printers: list[PrinterResponse] = Field(default_factory=list)


class MenuItemRefResponse(BaseModel):
    itemId: str
    name: str


class LabelResponse(BaseModel):
    labelId: str
    menuItemId: str
    menuItemName: str
    labelName: str
    ticketId: str
    preparedBy: str | None = None
    preparedAt: datetime
    expiresAt: datetime
    printedBy: str | None = None
    printedAt: datetime
    trackCode: str
    notes: str | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


class LabelEnvelope(BaseModel):
    message: str
    label: LabelResponse


class LabelListResponse(BaseModel):
    labels: list[LabelResponse] = Field(default_factory=list)
    menuItems: list[MenuItemRefResponse] = Field(default_factory=list)
    printers: list[PrinterResponse] = Field(default_factory=list)


class RecipeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipeId: str
    name: str
    category: str | None = None
    description: str = ""
    prepTime: str = ""
    portionYield: int = Field(default=1, serialization_alias="yield")
    ingredients: list[Any] = Field(default_factory=list)
    instructions: list[Any] = Field(default_factory=list)
    createdAt: datetime | None = None


class RecipeEnvelope(BaseModel):
    message: str
    recipe: RecipeResponse


class RecipeListResponse(BaseModel):
    recipes: list[RecipeResponse] = Field(default_factory=list)

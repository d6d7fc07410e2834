from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from tabletop.domain.common.ids import LabelId, MenuItemId, PrinterId, RecipeId, RestaurantId

TRACK_CODE_LENGTH = 3


class PrinterType(str, Enum):
    ESCPOS = "escpos"
    PRINTNODE = "printnode"


@dataclass(frozen=True)
class Printer:
    printer_id: PrinterId
    restaurant_id: RestaurantId
    name: str
    printer_type: str
    is_active: bool = True
    connection_string: str | None = None
    printnode_id: str | None = None
    updated_at: datetime | None = None

    @property
    def status(self) -> str:
        if not self.is_active:
            return "offline"
        if self.printer_type == PrinterType.PRINTNODE.value and not self.printnode_id:
            return "disconnected"
        if self.printer_type == PrinterType.ESCPOS.value and not self.connection_string:
            return "disconnected"
        return "active"


@dataclass(frozen=True)
class ItemLabel:
    label_id: LabelId
    restaurant_id: RestaurantId
    menu_item_id: MenuItemId
    label_name: str
    ticket_id: str
    prepared_at: datetime
    expires_at: datetime
    printed_at: datetime
    track_code: str
    prepared_by: str | None = None
    printed_by: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if len(self.track_code) != TRACK_CODE_LENGTH or not self.track_code.isdigit():
            raise ValueError("track_code must be a 3-digit string")


@dataclass(frozen=True)
class Recipe:
    recipe_id: RecipeId
    restaurant_id: RestaurantId
    name: str
    category: str | None = None
    description: str = ""
    prep_time: str = ""
    portion_yield: int = 1
    ingredients: list[Any] = field(default_factory=list)
    instructions: list[Any] = field(default_factory=list)
    created_at: datetime | None = None


def build_ticket_id() -> str:
    return f"TKT-{uuid4().hex[:8].upper()}"


def build_track_code() -> str:
    return f"{secrets.randbelow(1000):03d}"

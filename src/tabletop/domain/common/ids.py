from __future__ import annotations

from typing import NewType

RestaurantId = NewType("RestaurantId", str)
TableId = NewType("TableId", str)
CategoryId = NewType("CategoryId", str)
MenuItemId = NewType("MenuItemId", str)
OrderId = NewType("OrderId", str)
OrderLineId = NewType("OrderLineId", str)
WaiterCallId = NewType("WaiterCallId", str)
PrinterId = NewType("PrinterId", str)
LabelId = NewType("LabelId", str)
RecipeId = NewType("RecipeId", str)
SessionId = NewType("SessionId", str)

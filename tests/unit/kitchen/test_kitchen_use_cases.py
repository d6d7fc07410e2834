from __future__ import annotations

import base64
import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tabletop.application.dto.requests import LabelRequest, RecipeRequest
from tabletop.application.errors import ConflictError, InvalidInputError
from tabletop.application.ports.repositories import DuplicateKeyError
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.labels import (
    CreateLabel,
    DeleteLabel,
    LabelNotFoundError,
    ListLabels,
    UpdateLabel,
    normalize_label_payload,
)
from tabletop.application.use_cases.order_composition import MenuItemNotFoundError
from tabletop.application.use_cases.order_transitions import OrderNotFoundError
from tabletop.application.use_cases.print_order import (
    ListPrinters,
    PrinterNotFoundError,
    PrintOrder,
    UnsupportedPrinterError,
    order_number,
)
from tabletop.application.use_cases.recipes import (
    CreateRecipe,
    GetRecipe,
    RecipeNotFoundError,
    UpdateRecipe,
)
from tabletop.domain.common.ids import (
    CategoryId,
    LabelId,
    MenuItemId,
    OrderId,
    OrderLineId,
    PrinterId,
    RecipeId,
    RestaurantId,
    TableId,
)
from tabletop.domain.common.money import Money
from tabletop.domain.kitchen.entities import ItemLabel, Printer, Recipe
from tabletop.domain.menu.entities import MenuItem
from tabletop.domain.order.entities import OrderLine, create_pending_order
from tabletop.domain.restaurant.entities import Restaurant
from tabletop.infrastructure.printing.plain_text import PlainTextReceiptRenderer

TENANT = TenantContext(restaurant_id=RestaurantId("rst_001"))
OTHER_TENANT = TenantContext(restaurant_id=RestaurantId("rst_002"))
NOW = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)


class FakeMenuRepository:
    def __init__(self) -> None:
        self._item = MenuItem(
            item_id=MenuItemId("itm_001"),
            restaurant_id=RestaurantId("rst_001"),
            category_id=CategoryId("cat_001"),
            name="Chili",
            description=None,
            price_money=Money(amount_cents=700, currency="USD"),
        )

    def get_item(self, item_id, restaurant_id) -> MenuItem | None:
        if item_id == self._item.item_id and restaurant_id == self._item.restaurant_id:
            return self._item
        return None

    def list_items(self, restaurant_id, category_id=None) -> list[MenuItem]:
        return [self._item] if restaurant_id == self._item.restaurant_id else []


class FakeLabelRepository:
    def __init__(self) -> None:
        self.labels: dict[str, ItemLabel] = {}

    def list_for_restaurant(self, restaurant_id) -> list[ItemLabel]:
        return [label for label in self.labels.values() if label.restaurant_id == restaurant_id]

    def add(self, label: ItemLabel) -> None:
        self.labels[str(label.label_id)] = label

    def update(self, label: ItemLabel) -> ItemLabel | None:
        existing = self.labels.get(str(label.label_id))
        if existing is None or existing.restaurant_id != label.restaurant_id:
            return None
        updated = replace(label, created_at=existing.created_at)
        self.labels[str(label.label_id)] = updated
        return updated

    def delete(self, label_id, restaurant_id) -> bool:
        label = self.labels.get(str(label_id))
        if label is None or label.restaurant_id != restaurant_id:
            return False
        del self.labels[str(label_id)]
        return True


class FakePrinterRepository:
    def __init__(self, printers: list[Printer]) -> None:
        self._printers = printers

    def list_for_restaurant(self, restaurant_id, active_only=True) -> list[Printer]:
        return [
            printer
            for printer in self._printers
            if printer.restaurant_id == restaurant_id and (printer.is_active or not active_only)
        ]

    def get_active(self, printer_id, restaurant_id) -> Printer | None:
        for printer in self.list_for_restaurant(restaurant_id):
            if printer.printer_id == printer_id:
                return printer
        return None


class FakeRecipeRepository:
    def __init__(self) -> None:
        self.recipes: dict[str, Recipe] = {}

    def get(self, recipe_id, restaurant_id) -> Recipe | None:
        recipe = self.recipes.get(str(recipe_id))
        if recipe is None or recipe.restaurant_id != restaurant_id:
            return None
        return recipe

    def add(self, recipe: Recipe) -> None:
        if str(recipe.recipe_id) in self.recipes:
            raise DuplicateKeyError(str(recipe.recipe_id))
        self.recipes[str(recipe.recipe_id)] = recipe

    def update(self, recipe_id, restaurant_id, changes) -> Recipe | None:
        recipe = self.get(recipe_id, restaurant_id)
        if recipe is None:
            return None
        updated = replace(recipe, **changes)
        self.recipes[str(recipe_id)] = updated
        return updated


def _printers() -> FakePrinterRepository:
    return FakePrinterRepository(
        [
            Printer(
                printer_id=PrinterId("prn_kitchen"),
                restaurant_id=RestaurantId("rst_001"),
                name="Kitchen",
                printer_type="escpos",
                connection_string="tcp://10.0.0.5:9100",
            ),
            Printer(
                printer_id=PrinterId("prn_cloud"),
                restaurant_id=RestaurantId("rst_001"),
                name="Cloud",
                printer_type="printnode",
                printnode_id="42",
            ),
            Printer(
                printer_id=PrinterId("prn_off"),
                restaurant_id=RestaurantId("rst_001"),
                name="Bar",
                printer_type="escpos",
                is_active=False,
            ),
        ]
    )


def _label_request(**overrides) -> LabelRequest:
    payload = {
        "menuItemId": "itm_001",
        "labelName": "Chili batch",
        "preparedAt": "2026-10-19T08:00:00",
        "expiresAt": "2026-10-22T08:00:00+00:00",
    }
    payload.update(overrides)
    return LabelRequest.model_validate(payload)


def test_label_validation_reports_every_missing_field() -> None:
    with pytest.raises(InvalidInputError) as exc_info:
        normalize_label_payload(LabelRequest(), NOW)

    assert str(exc_info.value) == "Select a menu item"
    assert exc_info.value.details["errors"] == [
        "Select a menu item",
        "Label name is required",
        "Prepared date/time is required",
        "Expiry date/time is required",
    ]


def test_label_defaults_fill_ticket_track_code_and_print_time() -> None:
    payload = normalize_label_payload(_label_request(trackCode="12x"), NOW)

    assert payload["ticket_id"].startswith("TKT-")
    assert len(payload["track_code"]) == 3 and payload["track_code"].isdigit()
    assert payload["printed_at"] == NOW
    assert payload["prepared_at"].tzinfo is not None


def test_label_lifecycle_for_tenant() -> None:
    labels = FakeLabelRepository()
    menu = FakeMenuRepository()

    created = CreateLabel(labels, menu).execute(TENANT, _label_request(trackCode="007"))
    label_id = LabelId(created.label.labelId)
    updated = UpdateLabel(labels, menu).execute(
        TENANT,
        label_id,
        _label_request(labelName="Chili batch 2", trackCode="007"),
    )
    listing = ListLabels(labels, menu, _printers()).execute(TENANT)

    assert created.message == "Label created"
    assert created.label.menuItemName == "Chili"
    assert created.label.trackCode == "007"
    assert updated.label.labelName == "Chili batch 2"
    assert [item.name for item in listing.menuItems] == ["Chili"]
    assert len(listing.printers) == 3

    with pytest.raises(LabelNotFoundError):
        DeleteLabel(labels).execute(OTHER_TENANT, label_id)
    assert DeleteLabel(labels).execute(TENANT, label_id).message == "Label deleted"


def test_label_for_foreign_menu_item_is_not_found() -> None:
    with pytest.raises(MenuItemNotFoundError):
        CreateLabel(FakeLabelRepository(), FakeMenuRepository()).execute(
            OTHER_TENANT,
            _label_request(),
        )


def test_recipe_create_accepts_client_id_and_yield_alias() -> None:
    recipes = FakeRecipeRepository()
    request_dto = RecipeRequest.model_validate(
        {"id": "rcp_chili", "name": "Chili", "yield": 8, "ingredients": ["beans", "beef"]}
    )

    created = CreateRecipe(recipes).execute(TENANT, request_dto)

    assert created.recipe.recipeId == "rcp_chili"
    assert created.recipe.model_dump(by_alias=True)["yield"] == 8
    with pytest.raises(ConflictError):
        CreateRecipe(recipes).execute(TENANT, request_dto)


def test_recipe_update_touches_only_provided_fields() -> None:
    recipes = FakeRecipeRepository()
    CreateRecipe(recipes).execute(
        TENANT,
        RecipeRequest(id="rcp_1", name="Soup", description="Warm", ingredients=["water"]),
    )

    updated = UpdateRecipe(recipes).execute(
        TENANT,
        RecipeId("rcp_1"),
        RecipeRequest.model_validate({"prepTime": "20 min"}),
    )

    assert updated.recipe.prepTime == "20 min"
    assert updated.recipe.description == "Warm"
    assert updated.recipe.ingredients == ["water"]
    with pytest.raises(InvalidInputError):
        UpdateRecipe(recipes).execute(TENANT, RecipeId("rcp_1"), RecipeRequest(name=" "))
    with pytest.raises(RecipeNotFoundError):
        GetRecipe(recipes).execute(OTHER_TENANT, RecipeId("rcp_1"))


class FakeOrderRepository:
    def __init__(self) -> None:
        line = OrderLine(
            line_id=OrderLineId("orl_1"),
            item_id=MenuItemId("itm_001"),
            name="Chili",
            quantity=2,
            unit_price=Money(amount_cents=700, currency="USD"),
            line_total=Money(amount_cents=1400, currency="USD"),
            special_instructions="extra hot",
        )
        self._order = create_pending_order(
            order_id=OrderId("ord_ab12cd34ef56"),
            restaurant_id=RestaurantId("rst_001"),
            table_id=TableId("tbl_001"),
            table_number="T001",
            lines=[line],
            now=NOW,
            currency="USD",
            customer_name="Ada",
        )

    def get(self, order_id, restaurant_id):
        if order_id == self._order.order_id and restaurant_id == self._order.restaurant_id:
            return self._order
        return None


class FakeRestaurantRepository:
    def get(self, restaurant_id):
        return Restaurant(restaurant_id=restaurant_id, name="Demo Bistro", email="demo@x.io")


def _print_use_case() -> PrintOrder:
    return PrintOrder(
        order_repository=FakeOrderRepository(),
        printer_repository=_printers(),
        restaurant_repository=FakeRestaurantRepository(),
        renderer=PlainTextReceiptRenderer(),
    )


def test_order_number_strips_prefix() -> None:
    assert order_number("ord_ab12cd34ef56") == "AB12CD34"
    assert order_number("plainid") == "PLAINID"


def test_print_order_renders_receipt() -> None:
    envelope = _print_use_case().execute(TENANT, OrderId("ord_ab12cd34ef56"), "prn_kitchen")

    receipt = base64.b64decode(envelope.printResult.data).decode("utf-8")
    assert envelope.printResult.success is True
    assert envelope.printResult.connectionString == "tcp://10.0.0.5:9100"
    assert "Demo Bistro" in receipt
    assert "Order #AB12CD34" in receipt
    assert "2 x Chili" in receipt
    assert "* extra hot" in receipt
    assert "14.00 USD" in receipt


def test_print_order_rejects_inactive_foreign_or_unsupported_printers() -> None:
    use_case = _print_use_case()

    with pytest.raises(PrinterNotFoundError):
        use_case.execute(TENANT, OrderId("ord_ab12cd34ef56"), "prn_off")
    with pytest.raises(UnsupportedPrinterError):
        use_case.execute(TENANT, OrderId("ord_ab12cd34ef56"), "prn_cloud")
    with pytest.raises(OrderNotFoundError):
        use_case.execute(OTHER_TENANT, OrderId("ord_ab12cd34ef56"), "prn_kitchen")


def test_printer_status_reflects_configuration() -> None:
    unconfigured = Printer(
        printer_id=PrinterId("prn_new"),
        restaurant_id=RestaurantId("rst_001"),
        name="New",
        printer_type="escpos",
    )
    listing = ListPrinters(_printers()).execute(TENANT)

    assert {printer.printerId: printer.status for printer in listing.printers} == {
        "prn_kitchen": "active",
        "prn_cloud": "active",
    }
    assert unconfigured.status == "disconnected"
    assert replace(unconfigured, is_active=False).status == "offline"

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from tabletop.application.dto.requests import LabelRequest
from tabletop.application.dto.responses import (
    LabelEnvelope,
    LabelListResponse,
    MenuItemRefResponse,
    MessageResponse,
)
from tabletop.application.errors import InvalidInputError, NotFoundError
from tabletop.application.mappers.kitchen_mapper import to_label_response, to_printer_response
from tabletop.application.ports.repositories import (
    LabelRepository,
    MenuRepository,
    PrinterRepository,
)
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.order_composition import MenuItemNotFoundError
from tabletop.domain.common.ids import LabelId, MenuItemId, RestaurantId
from tabletop.domain.kitchen.entities import (
    TRACK_CODE_LENGTH,
    ItemLabel,
    build_ticket_id,
    build_track_code,
)


class LabelNotFoundError(NotFoundError):
    code = "LABEL_NOT_FOUND"


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def _parse_datetime(value: str | None) -> datetime | None:
    cleaned = _clean(value)
    if cleaned is None:
        return None
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def normalize_label_payload(request_dto: LabelRequest, now: datetime) -> dict[str, Any]:
    """Validate a label payload, reporting every problem at once."""
    errors: list[str] = []
    menu_item_id = _clean(request_dto.menu_item_id)
    if menu_item_id is None:
        errors.append("Select a menu item")
    label_name = _clean(request_dto.label_name)
    if label_name is None:
        errors.append("Label name is required")
    prepared_at = _parse_datetime(request_dto.prepared_at)
    if prepared_at is None:
        errors.append("Prepared date/time is required")
    expires_at = _parse_datetime(request_dto.expires_at)
    if expires_at is None:
        errors.append("Expiry date/time is required")
    if errors:
        raise InvalidInputError(errors[0], details={"errors": errors})

    track_code = _clean(request_dto.track_code)
    if track_code is None or len(track_code) != TRACK_CODE_LENGTH or not track_code.isdigit():
        track_code = build_track_code()

    return {
        "menu_item_id": MenuItemId(menu_item_id or ""),
        "label_name": label_name,
        "ticket_id": _clean(request_dto.ticket_id) or build_ticket_id(),
        "prepared_by": _clean(request_dto.prepared_by),
        "prepared_at": prepared_at,
        "expires_at": expires_at,
        "printed_by": _clean(request_dto.printed_by),
        "printed_at": _parse_datetime(request_dto.printed_at) or now,
        "track_code": track_code,
        "notes": _clean(request_dto.notes),
    }


class _LabelUseCase:
    def __init__(self, label_repository: LabelRepository, menu_repository: MenuRepository) -> None:
        self._label_repository = label_repository
        self._menu_repository = menu_repository

    def _menu_item_names(self, restaurant_id: RestaurantId) -> dict[str, str]:
        items = self._menu_repository.list_items(restaurant_id)
        return {str(item.item_id): item.name for item in items}

    def _ensure_menu_item(self, restaurant_id: RestaurantId, menu_item_id: MenuItemId) -> None:
        if self._menu_repository.get_item(menu_item_id, restaurant_id) is None:
            raise MenuItemNotFoundError(
                "Menu item not found",
                details={"menuItemId": str(menu_item_id)},
            )


class ListLabels(_LabelUseCase):
    def __init__(
        self,
        label_repository: LabelRepository,
        menu_repository: MenuRepository,
        printer_repository: PrinterRepository,
    ) -> None:
        super().__init__(label_repository, menu_repository)
        self._printer_repository = printer_repository

    def execute(self, tenant: TenantContext) -> LabelListResponse:
        names = self._menu_item_names(tenant.restaurant_id)
        labels = self._label_repository.list_for_restaurant(tenant.restaurant_id)
        printers = self._printer_repository.list_for_restaurant(
            tenant.restaurant_id,
            active_only=False,
        )
        return LabelListResponse(
            labels=[to_label_response(label, names) for label in labels],
            menuItems=[
                MenuItemRefResponse(itemId=item_id, name=name)
                for item_id, name in sorted(names.items(), key=lambda entry: entry[1])
            ],
            printers=[to_printer_response(printer) for printer in printers],
        )


class CreateLabel(_LabelUseCase):
    def execute(self, tenant: TenantContext, request_dto: LabelRequest) -> LabelEnvelope:
        now = datetime.now(timezone.utc)
        payload = normalize_label_payload(request_dto, now)
        self._ensure_menu_item(tenant.restaurant_id, payload["menu_item_id"])

        label = ItemLabel(
            label_id=LabelId(f"lbl_{uuid4().hex[:12]}"),
            restaurant_id=tenant.restaurant_id,
            created_at=now,
            updated_at=now,
            **payload,
        )
        self._label_repository.add(label)
        return LabelEnvelope(
            message="Label created",
            label=to_label_response(label, self._menu_item_names(tenant.restaurant_id)),
        )


class UpdateLabel(_LabelUseCase):
    def execute(
        self,
        tenant: TenantContext,
        label_id: LabelId,
        request_dto: LabelRequest,
    ) -> LabelEnvelope:
        now = datetime.now(timezone.utc)
        payload = normalize_label_payload(request_dto, now)
        self._ensure_menu_item(tenant.restaurant_id, payload["menu_item_id"])

        candidate = ItemLabel(
            label_id=label_id,
            restaurant_id=tenant.restaurant_id,
            updated_at=now,
            **payload,
        )
        updated = self._label_repository.update(candidate)
        if updated is None:
            raise LabelNotFoundError("Label not found")
        return LabelEnvelope(
            message="Label updated",
            label=to_label_response(updated, self._menu_item_names(tenant.restaurant_id)),
        )


class DeleteLabel:
    def __init__(self, label_repository: LabelRepository) -> None:
        self._label_repository = label_repository

    def execute(self, tenant: TenantContext, label_id: LabelId) -> MessageResponse:
        if not self._label_repository.delete(label_id, tenant.restaurant_id):
            raise LabelNotFoundError("Label not found")
        return MessageResponse(message="Label deleted")

from __future__ import annotations

from tabletop.application.dto.responses import LabelResponse, PrinterResponse, RecipeResponse
from tabletop.domain.kitchen.entities import ItemLabel, Printer, Recipe


def to_printer_response(printer: Printer) -> PrinterResponse:
    return PrinterResponse(
        printerId=str(printer.printer_id),
        name=printer.name,
        type=printer.printer_type,
        status=printer.status,
        isActive=printer.is_active,
        updatedAt=printer.updated_at,
    )


def to_label_response(label: ItemLabel, menu_item_names: dict[str, str]) -> LabelResponse:
    return LabelResponse(
        labelId=str(label.label_id),
        menuItemId=str(label.menu_item_id),
        menuItemName=menu_item_names.get(str(label.menu_item_id), label.label_name),
        labelName=label.label_name,
        ticketId=label.ticket_id,
        preparedBy=label.prepared_by,
        preparedAt=label.prepared_at,
        expiresAt=label.expires_at,
        printedBy=label.printed_by,
        printedAt=label.printed_at,
        trackCode=label.track_code,
        notes=label.notes,
        createdAt=label.created_at,
        updatedAt=label.updated_at,
    )


def to_recipe_response(recipe: Recipe) -> RecipeResponse:
    return RecipeResponse(
        recipeId=str(recipe.recipe_id),
        name=recipe.name,
        category=recipe.category,
        description=recipe.description,
        prepTime=recipe.prep_time,
        portionYield=recipe.portion_yield,
        ingredients=list(recipe.ingredients),
        instructions=list(recipe.instructions),
        createdAt=recipe.created_at,
    )

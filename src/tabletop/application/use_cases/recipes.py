from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from tabletop.application.dto.requests import RecipeRequest
from tabletop.application.dto.responses import MessageResponse, RecipeEnvelope, RecipeListResponse
from tabletop.application.errors import ConflictError, InvalidInputError, NotFoundError
from tabletop.application.mappers.kitchen_mapper import to_recipe_response
from tabletop.application.ports.repositories import DuplicateKeyError, RecipeRepository
from tabletop.application.use_cases.context import TenantContext
from tabletop.domain.common.ids import RecipeId
from tabletop.domain.kitchen.entities import Recipe


class RecipeNotFoundError(NotFoundError):
    code = "RECIPE_NOT_FOUND"


def _list_or_empty(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else []


class ListRecipes:
    def __init__(self, recipe_repository: RecipeRepository) -> None:
        self._recipe_repository = recipe_repository

    def execute(self, tenant: TenantContext) -> RecipeListResponse:
        recipes = self._recipe_repository.list_for_restaurant(tenant.restaurant_id)
        return RecipeListResponse(recipes=[to_recipe_response(recipe) for recipe in recipes])


class GetRecipe:
    def __init__(self, recipe_repository: RecipeRepository) -> None:
        self._recipe_repository = recipe_repository

    def execute(self, tenant: TenantContext, recipe_id: RecipeId) -> RecipeEnvelope:
        recipe = self._recipe_repository.get(recipe_id, tenant.restaurant_id)
        if recipe is None:
            raise RecipeNotFoundError("Recipe not found")
        return RecipeEnvelope(message="Recipe loaded", recipe=to_recipe_response(recipe))


class CreateRecipe:
    def __init__(self, recipe_repository: RecipeRepository) -> None:
        self._recipe_repository = recipe_repository

    def execute(self, tenant: TenantContext, request_dto: RecipeRequest) -> RecipeEnvelope:
        name = (request_dto.name or "").strip()
        if not name:
            raise InvalidInputError("Recipe name is required")

        recipe_id = (request_dto.id or "").strip() or f"rcp_{uuid4().hex[:12]}"
        recipe = Recipe(
            recipe_id=RecipeId(recipe_id),
            restaurant_id=tenant.restaurant_id,
            name=name,
            category=request_dto.category,
            description=request_dto.description or "",
            prep_time=request_dto.prep_time or "",
            portion_yield=request_dto.portion_yield or 1,
            ingredients=_list_or_empty(request_dto.ingredients),
            instructions=_list_or_empty(request_dto.instructions),
            created_at=datetime.now(timezone.utc),
        )
        try:
            self._recipe_repository.add(recipe)
        except DuplicateKeyError as exc:
            raise ConflictError("Recipe already exists", details={"recipeId": recipe_id}) from exc
        return RecipeEnvelope(message="Recipe created", recipe=to_recipe_response(recipe))


class UpdateRecipe:
    def __init__(self, recipe_repository: RecipeRepository) -> None:
        self._recipe_repository = recipe_repository

    def execute(
        self,
        tenant: TenantContext,
        recipe_id: RecipeId,
        request_dto: RecipeRequest,
    ) -> RecipeEnvelope:
        provided = request_dto.model_dump(exclude_unset=True, by_alias=False)
        provided.pop("id", None)
        changes: dict[str, Any] = {}
        if "name" in provided:
            name = (provided["name"] or "").strip()
            if not name:
                raise InvalidInputError("Recipe name is required")
            changes["name"] = name
        if "category" in provided:
            changes["category"] = provided["category"]
        if "description" in provided:
            changes["description"] = provided["description"] or ""
        if "prep_time" in provided:
            changes["prep_time"] = provided["prep_time"] or ""
        if "portion_yield" in provided:
            changes["portion_yield"] = provided["portion_yield"] or 1
        for key in ("ingredients", "instructions"):
            if key in provided:
                changes[key] = _list_or_empty(provided[key])

        recipe = self._recipe_repository.update(recipe_id, tenant.restaurant_id, changes)
        if recipe is None:
            raise RecipeNotFoundError("Recipe not found")
        return RecipeEnvelope(message="Recipe updated", recipe=to_recipe_response(recipe))


class DeleteRecipe:
    def __init__(self, recipe_repository: RecipeRepository) -> None:
        self._recipe_repository = recipe_repository

    def execute(self, tenant: TenantContext, recipe_id: RecipeId) -> MessageResponse:
        if not self._recipe_repository.delete(recipe_id, tenant.restaurant_id):
            raise RecipeNotFoundError("Recipe not found")
        return MessageResponse(message="Recipe deleted")

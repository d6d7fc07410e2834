from __future__ import annotations

from fastapi import APIRouter, Depends, status

from tabletop.api.dependencies.auth import require_tenant
from tabletop.application.dto.requests import LabelRequest, RecipeRequest
from tabletop.application.dto.responses import (
    LabelEnvelope,
    LabelListResponse,
    MessageResponse,
    PrinterListResponse,
    RecipeEnvelope,
    RecipeListResponse,
)
from tabletop.application.use_cases.context import TenantContext
from tabletop.application.use_cases.labels import CreateLabel, DeleteLabel, ListLabels, UpdateLabel
from tabletop.application.use_cases.print_order import ListPrinters
from tabletop.application.use_cases.recipes import (
    CreateRecipe,
    DeleteRecipe,
    GetRecipe,
    ListRecipes,
    UpdateRecipe,
)
from tabletop.domain.common.ids import LabelId, RecipeId
from tabletop.infrastructure.db.repositories.kitchen_repo import (
    SqlAlchemyLabelRepository,
    SqlAlchemyPrinterRepository,
    SqlAlchemyRecipeRepository,
)
from tabletop.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository

router = APIRouter(prefix="/api", tags=["kitchen"])


def _list_labels_use_case() -> ListLabels:
    return ListLabels(
        label_repository=SqlAlchemyLabelRepository(),
        menu_repository=SqlAlchemyMenuRepository(),
        printer_repository=SqlAlchemyPrinterRepository(),
    )


def _create_label_use_case() -> CreateLabel:
    return CreateLabel(
        label_repository=SqlAlchemyLabelRepository(),
        menu_repository=SqlAlchemyMenuRepository(),
    )


def _update_label_use_case() -> UpdateLabel:
    return UpdateLabel(
        label_repository=SqlAlchemyLabelRepository(),
        menu_repository=SqlAlchemyMenuRepository(),
    )


def _recipe_repository() -> SqlAlchemyRecipeRepository:
    return SqlAlchemyRecipeRepository()


@router.get("/printers", response_model=PrinterListResponse)
def list_printers(tenant: TenantContext = Depends(require_tenant)) -> PrinterListResponse:
    return ListPrinters(SqlAlchemyPrinterRepository()).execute(tenant)


@router.get("/labels", response_model=LabelListResponse)
def list_labels(tenant: TenantContext = Depends(require_tenant)) -> LabelListResponse:
    return _list_labels_use_case().execute(tenant)


@router.post("/labels", response_model=LabelEnvelope, status_code=status.HTTP_201_CREATED)
def create_label(
    request_dto: LabelRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> LabelEnvelope:
    return _create_label_use_case().execute(tenant, request_dto)


@router.put("/labels/{label_id}", response_model=LabelEnvelope)
def update_label(
    label_id: str,
    request_dto: LabelRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> LabelEnvelope:
    return _update_label_use_case().execute(tenant, LabelId(label_id), request_dto)


@router.delete("/labels/{label_id}", response_model=MessageResponse)
def delete_label(
    label_id: str,
    tenant: TenantContext = Depends(require_tenant),
) -> MessageResponse:
    return DeleteLabel(SqlAlchemyLabelRepository()).execute(tenant, LabelId(label_id))


@router.get("/recipes", response_model=RecipeListResponse)
def list_recipes(tenant: TenantContext = Depends(require_tenant)) -> RecipeListResponse:
    return ListRecipes(_recipe_repository()).execute(tenant)


@router.get("/recipes/{recipe_id}", response_model=RecipeEnvelope)
def get_recipe(
    recipe_id: str,
    tenant: TenantContext = Depends(require_tenant),
) -> RecipeEnvelope:
    return GetRecipe(_recipe_repository()).execute(tenant, RecipeId(recipe_id))


@router.post("/recipes", response_model=RecipeEnvelope, status_code=status.HTTP_201_CREATED)
def create_recipe(
    request_dto: RecipeRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> RecipeEnvelope:
    return CreateRecipe(_recipe_repository()).execute(tenant, request_dto)


@router.put("/recipes/{recipe_id}", response_model=RecipeEnvelope)
def update_recipe(
    recipe_id: str,
    request_dto: RecipeRequest,
    tenant: TenantContext = Depends(require_tenant),
) -> RecipeEnvelope:
    return UpdateRecipe(_recipe_repository()).execute(tenant, RecipeId(recipe_id), request_dto)


@router.delete("/recipes/{recipe_id}", response_model=MessageResponse)
def delete_recipe(
    recipe_id: str,
    tenant: TenantContext = Depends(require_tenant),
) -> MessageResponse:
    return DeleteRecipe(_recipe_repository()).execute(tenant, RecipeId(recipe_id))

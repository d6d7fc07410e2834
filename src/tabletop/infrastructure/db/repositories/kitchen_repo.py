from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Engine, delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tabletop.application.ports.repositories import (
    DuplicateKeyError,
    LabelRepository,
    PrinterRepository,
    RecipeRepository,
)
from tabletop.domain.common.ids import LabelId, MenuItemId, PrinterId, RecipeId, RestaurantId
from tabletop.domain.kitchen.entities import ItemLabel, Printer, Recipe
from tabletop.infrastructure.db.models.kitchen import ItemLabelModel, PrinterModel, RecipeModel
from tabletop.infrastructure.db.repositories.common import as_utc
from tabletop.infrastructure.db.session import get_engine


class SqlAlchemyPrinterRepository(PrinterRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        active_only: bool = True,
    ) -> list[Printer]:
        statement = select(PrinterModel).where(PrinterModel.restaurant_id == str(restaurant_id))
        if active_only:
            statement = statement.where(PrinterModel.is_active.is_(True))
        statement = statement.order_by(PrinterModel.name)
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def get_active(self, printer_id: PrinterId, restaurant_id: RestaurantId) -> Printer | None:
        statement = select(PrinterModel).where(
            PrinterModel.id == str(printer_id),
            PrinterModel.restaurant_id == str(restaurant_id),
            PrinterModel.is_active.is_(True),
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        return None if model is None else self._to_domain(model)

    def _to_domain(self, model: PrinterModel) -> Printer:
        return Printer(
            printer_id=PrinterId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            name=model.name,
            printer_type=model.printer_type,
            is_active=model.is_active,
            connection_string=model.connection_string,
            printnode_id=model.printnode_id,
            updated_at=as_utc(model.updated_at),
        )


class SqlAlchemyLabelRepository(LabelRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[ItemLabel]:
        statement = (
            select(ItemLabelModel)
            .where(ItemLabelModel.restaurant_id == str(restaurant_id))
            .order_by(ItemLabelModel.created_at.desc(), ItemLabelModel.id.desc())
        )
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def add(self, label: ItemLabel) -> None:
        now = datetime.now(timezone.utc)
        with Session(self._engine) as session:
            session.add(
                ItemLabelModel(
                    id=str(label.label_id),
                    restaurant_id=str(label.restaurant_id),
                    created_at=label.created_at or now,
                    updated_at=label.updated_at or now,
                    **self._values(label),
                )
            )
            session.commit()

    def update(self, label: ItemLabel) -> ItemLabel | None:
        scope = (
            ItemLabelModel.id == str(label.label_id),
            ItemLabelModel.restaurant_id == str(label.restaurant_id),
        )
        values = self._values(label)
        values["updated_at"] = label.updated_at or datetime.now(timezone.utc)
        with Session(self._engine) as session:
            statement = update(ItemLabelModel).where(*scope).values(**values)
            updated = session.execute(statement).rowcount == 1
            session.commit()
            if not updated:
                return None
            model = session.execute(select(ItemLabelModel).where(*scope)).scalar_one()
            return self._to_domain(model)

    def delete(self, label_id: LabelId, restaurant_id: RestaurantId) -> bool:
        with Session(self._engine) as session:
            deleted = session.execute(
                delete(ItemLabelModel).where(
                    ItemLabelModel.id == str(label_id),
                    ItemLabelModel.restaurant_id == str(restaurant_id),
                )
            ).rowcount > 0
            session.commit()
        return deleted

    def _values(self, label: ItemLabel) -> dict[str, Any]:
        # created_at is owned by the insert and never rewritten
        return {
            "menu_item_id": str(label.menu_item_id),
            "label_name": label.label_name,
            "ticket_id": label.ticket_id,
            "prepared_by": label.prepared_by,
            "prepared_at": label.prepared_at,
            "expires_at": label.expires_at,
            "printed_by": label.printed_by,
            "printed_at": label.printed_at,
            "track_code": label.track_code,
            "notes": label.notes,
        }

    def _to_domain(self, model: ItemLabelModel) -> ItemLabel:
        return ItemLabel(
            label_id=LabelId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            menu_item_id=MenuItemId(model.menu_item_id),
            label_name=model.label_name,
            ticket_id=model.ticket_id,
            prepared_at=as_utc(model.prepared_at) or model.prepared_at,
            expires_at=as_utc(model.expires_at) or model.expires_at,
            printed_at=as_utc(model.printed_at) or model.printed_at,
            track_code=model.track_code,
            prepared_by=model.prepared_by,
            printed_by=model.printed_by,
            notes=model.notes,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )


class SqlAlchemyRecipeRepository(RecipeRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Recipe]:
        statement = (
            select(RecipeModel)
            .where(RecipeModel.restaurant_id == str(restaurant_id))
            .order_by(RecipeModel.created_at.desc(), RecipeModel.id.desc())
        )
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def get(self, recipe_id: RecipeId, restaurant_id: RestaurantId) -> Recipe | None:
        statement = select(RecipeModel).where(
            RecipeModel.id == str(recipe_id),
            RecipeModel.restaurant_id == str(restaurant_id),
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        return None if model is None else self._to_domain(model)

    def add(self, recipe: Recipe) -> None:
        with Session(self._engine) as session:
            session.add(
                RecipeModel(
                    id=str(recipe.recipe_id),
                    restaurant_id=str(recipe.restaurant_id),
                    name=recipe.name,
                    category=recipe.category,
                    description=recipe.description,
                    prep_time=recipe.prep_time,
                    portion_yield=recipe.portion_yield,
                    ingredients=list(recipe.ingredients),
                    instructions=list(recipe.instructions),
                    created_at=recipe.created_at or datetime.now(timezone.utc),
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateKeyError(f"recipe {recipe.recipe_id} already exists") from exc

    def update(
        self,
        recipe_id: RecipeId,
        restaurant_id: RestaurantId,
        changes: dict[str, Any],
    ) -> Recipe | None:
        scope = (
            RecipeModel.id == str(recipe_id),
            RecipeModel.restaurant_id == str(restaurant_id),
        )
        with Session(self._engine) as session:
            if changes:
                session.execute(update(RecipeModel).where(*scope).values(**changes))
                session.commit()
            model = session.execute(select(RecipeModel).where(*scope)).scalar_one_or_none()
            return None if model is None else self._to_domain(model)

    def delete(self, recipe_id: RecipeId, restaurant_id: RestaurantId) -> bool:
        with Session(self._engine) as session:
            deleted = session.execute(
                delete(RecipeModel).where(
                    RecipeModel.id == str(recipe_id),
                    RecipeModel.restaurant_id == str(restaurant_id),
                )
            ).rowcount > 0
            session.commit()
        return deleted

    def _to_domain(self, model: RecipeModel) -> Recipe:
        return Recipe(
            recipe_id=RecipeId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            name=model.name,
            category=model.category,
            description=model.description or "",
            prep_time=model.prep_time or "",
            portion_yield=model.portion_yield or 1,
            ingredients=list(model.ingredients or []),
            instructions=list(model.instructions or []),
            created_at=as_utc(model.created_at),
        )

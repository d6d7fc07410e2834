from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Any

from sqlalchemy import Engine, delete, select, update
from sqlalchemy.orm import Session

from tabletop.application.ports.repositories import MenuRepository
from tabletop.domain.common.ids import CategoryId, MenuItemId, RestaurantId
from tabletop.domain.common.money import Money
from tabletop.domain.menu.entities import MenuCategory, MenuItem
from tabletop.infrastructure.db.models.menu import MenuCategoryModel, MenuItemModel
from tabletop.infrastructure.db.session import get_engine, store_currency


class SqlAlchemyMenuRepository(MenuRepository):
    def __init__(self, engine: Engine | None = None, currency: str | None = None) -> None:
        self._engine = engine or get_engine()
        self._currency = currency or store_currency()

    def get_item(self, item_id: MenuItemId, restaurant_id: RestaurantId) -> MenuItem | None:
        statement = (
            select(MenuItemModel)
            .where(
                MenuItemModel.id == str(item_id),
                MenuItemModel.restaurant_id == str(restaurant_id),
            )
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()

        if model is None:
            return None

        return self._item_to_domain(model)

    def list_categories(
        self,
        restaurant_id: RestaurantId,
        active_only: bool = False,
        with_items: bool = False,
    ) -> list[MenuCategory]:
        statement = select(MenuCategoryModel).where(
            MenuCategoryModel.restaurant_id == str(restaurant_id)
        )
        if active_only:
            statement = statement.where(MenuCategoryModel.is_active.is_(True))
        statement = statement.order_by(MenuCategoryModel.sort_order, MenuCategoryModel.name)

        with Session(self._engine) as session:
            category_models = list(session.execute(statement).scalars().all())

        items_by_category: dict[str, list[MenuItem]] = defaultdict(list)
        if with_items and category_models:
            for item in self.list_items(restaurant_id):
                items_by_category[str(item.category_id)].append(item)

        return [
            self._category_to_domain(model, items_by_category.get(model.id, []))
            for model in category_models
        ]

    def list_items(
        self,
        restaurant_id: RestaurantId,
        category_id: CategoryId | None = None,
    ) -> list[MenuItem]:
        statement = select(MenuItemModel).where(MenuItemModel.restaurant_id == str(restaurant_id))
        if category_id is not None:
            statement = statement.where(MenuItemModel.category_id == str(category_id))
        statement = statement.order_by(MenuItemModel.sort_order, MenuItemModel.name)

        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._item_to_domain(model) for model in models]

    def add_category(self, category: MenuCategory) -> None:
        with Session(self._engine) as session:
            session.add(
                MenuCategoryModel(
                    id=str(category.category_id),
                    restaurant_id=str(category.restaurant_id),
                    name=category.name,
                    description=category.description,
                    sort_order=category.sort_order,
                    is_active=category.is_active,
                )
            )
            session.commit()

    def update_category(
        self,
        category_id: CategoryId,
        restaurant_id: RestaurantId,
        changes: dict[str, Any],
    ) -> MenuCategory | None:
        scope = (
            MenuCategoryModel.id == str(category_id),
            MenuCategoryModel.restaurant_id == str(restaurant_id),
        )
        with Session(self._engine) as session:
            if changes:
                session.execute(update(MenuCategoryModel).where(*scope).values(**changes))
                session.commit()
            model = session.execute(select(MenuCategoryModel).where(*scope)).scalar_one_or_none()
            if model is None:
                return None
            return self._category_to_domain(model, [])

    def delete_category(self, category_id: CategoryId, restaurant_id: RestaurantId) -> bool:
        with Session(self._engine) as session:
            deleted = session.execute(
                delete(MenuCategoryModel).where(
                    MenuCategoryModel.id == str(category_id),
                    MenuCategoryModel.restaurant_id == str(restaurant_id),
                )
            ).rowcount > 0
            if deleted:
                session.execute(
                    delete(MenuItemModel).where(
                        MenuItemModel.category_id == str(category_id),
                        MenuItemModel.restaurant_id == str(restaurant_id),
                    )
                )
            session.commit()
        return deleted

    def add_item(self, item: MenuItem) -> None:
        with Session(self._engine) as session:
            session.add(
                MenuItemModel(
                    id=str(item.item_id),
                    restaurant_id=str(item.restaurant_id),
                    category_id=str(item.category_id),
                    name=item.name,
                    description=item.description,
                    price=item.price_money.to_decimal(),
                    image_url=item.image_url,
                    is_available=item.is_available,
                    is_vegetarian=item.is_vegetarian,
                    is_vegan=item.is_vegan,
                    allergens=list(item.allergens),
                    sort_order=item.sort_order,
                )
            )
            session.commit()

    def update_item(
        self,
        item_id: MenuItemId,
        restaurant_id: RestaurantId,
        changes: dict[str, Any],
    ) -> MenuItem | None:
        values = dict(changes)
        if "price" in values:
            price = Money.from_decimal(Decimal(values["price"]), self._currency)
            values["price"] = price.to_decimal()
        scope = (
            MenuItemModel.id == str(item_id),
            MenuItemModel.restaurant_id == str(restaurant_id),
        )
        with Session(self._engine) as session:
            if values:
                session.execute(update(MenuItemModel).where(*scope).values(**values))
                session.commit()
            model = session.execute(select(MenuItemModel).where(*scope)).scalar_one_or_none()
            if model is None:
                return None
            return self._item_to_domain(model)

    def delete_item(self, item_id: MenuItemId, restaurant_id: RestaurantId) -> bool:
        with Session(self._engine) as session:
            deleted = session.execute(
                delete(MenuItemModel).where(
                    MenuItemModel.id == str(item_id),
                    MenuItemModel.restaurant_id == str(restaurant_id),
                )
            ).rowcount > 0
            session.commit()
        return deleted

    def _item_to_domain(self, model: MenuItemModel) -> MenuItem:
        return MenuItem(
            item_id=MenuItemId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            category_id=CategoryId(model.category_id),
            name=model.name,
            description=model.description,
            price_money=Money.from_decimal(model.price, self._currency),
            is_available=model.is_available,
            image_url=model.image_url,
            is_vegetarian=model.is_vegetarian,
            is_vegan=model.is_vegan,
            allergens=list(model.allergens or []),
            sort_order=model.sort_order,
        )

    def _category_to_domain(
        self,
        model: MenuCategoryModel,
        items: list[MenuItem],
    ) -> MenuCategory:
        return MenuCategory(
            category_id=CategoryId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            name=model.name,
            description=model.description,
            sort_order=model.sort_order,
            is_active=model.is_active,
            items=items,
        )

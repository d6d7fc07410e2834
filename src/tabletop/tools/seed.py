from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from tabletop.infrastructure.db.models.kitchen import PrinterModel
from tabletop.infrastructure.db.models.menu import MenuCategoryModel, MenuItemModel
from tabletop.infrastructure.db.models.restaurant import RestaurantModel, SessionModel
from tabletop.infrastructure.db.models.table import TableModel
from tabletop.infrastructure.db.session import get_engine

DEMO_RESTAURANT_ID = "rst_demo"
DEMO_TOKEN_ENV = "TABLETOP_DEMO_TOKEN"
DEMO_TOKEN_DEFAULT = "demo-staff-token"


def _upsert(session: Session, model: type, values: dict[str, Any]) -> None:
    session.execute(
        insert(model)
        .values(**values)
        .on_conflict_do_update(
            index_elements=[model.id],
            set_={key: value for key, value in values.items() if key != "id"},
        )
    )


def main() -> None:
    engine = get_engine(timeout_seconds=2.0)
    inspector = inspect(engine)
    required_tables = {"restaurants", "sessions", "tables", "menu_categories", "menu_items"}
    if not required_tables.issubset(set(inspector.get_table_names(schema="public"))):
        print("no schema yet")
        return

    token = os.getenv(DEMO_TOKEN_ENV, DEMO_TOKEN_DEFAULT)
    expires_at = datetime.now(timezone.utc) + timedelta(days=30)

    with Session(engine) as session:
        _upsert(
            session,
            RestaurantModel,
            {
                "id": DEMO_RESTAURANT_ID,
                "name": "Demo Bistro",
                "email": "demo@tabletop.local",
                "is_active": True,
                "is_accepting_orders": True,
            },
        )
        _upsert(
            session,
            SessionModel,
            {
                "id": "ses_demo",
                "restaurant_id": DEMO_RESTAURANT_ID,
                "token": token,
                "expires_at": expires_at,
            },
        )
        _upsert(
            session,
            TableModel,
            {
                "id": "tbl_demo_001",
                "restaurant_id": DEMO_RESTAURANT_ID,
                "table_number": "T001",
                "is_active": True,
            },
        )
        _upsert(
            session,
            MenuCategoryModel,
            {
                "id": "cat_demo_mains",
                "restaurant_id": DEMO_RESTAURANT_ID,
                "name": "Mains",
                "sort_order": 1,
                "is_active": True,
            },
        )

        items = [
            {
                "id": "itm_demo_burger",
                "restaurant_id": DEMO_RESTAURANT_ID,
                "category_id": "cat_demo_mains",
                "name": "Burger",
                "description": "Beef patty, cheddar, pickles",
                "price": Decimal("9.50"),
                "is_available": True,
                "is_vegetarian": False,
                "is_vegan": False,
                "sort_order": 1,
            },
            {
                "id": "itm_demo_salad",
                "restaurant_id": DEMO_RESTAURANT_ID,
                "category_id": "cat_demo_mains",
                "name": "Garden Salad",
                "description": "Leaves, cucumber, lemon dressing",
                "price": Decimal("7.25"),
                "is_available": True,
                "is_vegetarian": True,
                "is_vegan": True,
                "sort_order": 2,
            },
        ]
        for item in items:
            _upsert(session, MenuItemModel, item)

        _upsert(
            session,
            PrinterModel,
            {
                "id": "prn_demo_kitchen",
                "restaurant_id": DEMO_RESTAURANT_ID,
                "name": "Kitchen",
                "printer_type": "escpos",
                "connection_string": "tcp://192.168.1.50:9100",
                "is_active": True,
            },
        )

        session.commit()
        print(f"seed complete, staff token: {token}")


if __name__ == "__main__":
    main()

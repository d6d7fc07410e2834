from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tabletop.domain.common.ids import RestaurantId, TableId
from tabletop.domain.table.entities import Table, TableInactiveError, TableOwnershipError


def _table(is_active: bool = True) -> Table:
    return Table(
        table_id=TableId("tbl_001"),
        restaurant_id=RestaurantId("rst_001"),
        table_number="T001",
        is_active=is_active,
    )


def test_table_number_must_not_be_blank() -> None:
    with pytest.raises(ValueError):
        Table(
            table_id=TableId("tbl_001"),
            restaurant_id=RestaurantId("rst_001"),
            table_number="  ",
            is_active=True,
        )


def test_inactive_table_refuses_orders() -> None:
    _table().ensure_active()
    with pytest.raises(TableInactiveError):
        _table(is_active=False).ensure_active()


def test_ownership_check_ignores_missing_hint() -> None:
    table = _table()
    table.ensure_belongs_to(None)
    table.ensure_belongs_to(RestaurantId("rst_001"))
    with pytest.raises(TableOwnershipError):
        table.ensure_belongs_to(RestaurantId("rst_002"))


def test_with_changes_keeps_unspecified_fields() -> None:
    table = _table()

    renamed = table.with_changes(table_number="T002", is_active=None)
    deactivated = table.with_changes(table_number=None, is_active=False)

    assert renamed.table_number == "T002"
    assert renamed.is_active is True
    assert deactivated.table_number == "T001"
    assert deactivated.is_active is False

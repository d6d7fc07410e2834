from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from tabletop.infrastructure.db.models.restaurant import Base


class PrinterModel(Base):
    __tablename__ = "printers"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    printer_type: Mapped[str] = mapped_column(String(20), nullable=False)
    connection_string: Mapped[str | None] = mapped_column(String(500), nullable=True)
    printnode_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class ItemLabelModel(Base):
    __tablename__ = "item_labels"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    menu_item_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("menu_items.id", ondelete="CASCADE"),
        nullable=False,
    )
    label_name: Mapped[str] = mapped_column(String(255), nullable=False)
    ticket_id: Mapped[str] = mapped_column(String(50), nullable=False)
    prepared_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    prepared_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    printed_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    printed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    track_code: Mapped[str] = mapped_column(String(3), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class RecipeModel(Base):
    __tablename__ = "recipes"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    prep_time: Mapped[str] = mapped_column(String(100), nullable=False, server_default="")
    portion_yield: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")
    ingredients: Mapped[list[Any]] = mapped_column(JSON, nullable=False)
    instructions: Mapped[list[Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

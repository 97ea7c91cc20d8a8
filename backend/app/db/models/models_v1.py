from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    String,
    Integer,
    BigInteger,
    DateTime,
    ForeignKey,
    Text,
    Enum,
    UniqueConstraint,
    Index,
    CheckConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.db.base import Base
from backend.app.db.models.core_types import TriggerStatus

# SQLite n'auto-incrémente que les INTEGER PRIMARY KEY
PK = BigInteger().with_variant(Integer, "sqlite")


# ---------- MASTER DATA ----------
class Component(Base):
    __tablename__ = "components"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    part_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    current_stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    monthly_required_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="ck_component_stock_nonneg"),
        CheckConstraint("monthly_required_quantity >= 0", name="ck_component_monthly_req_nonneg"),
    )


class Board(Base):
    __tablename__ = "pcbs"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    pcb_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    bom: Mapped[list["BOMEntry"]] = relationship(back_populates="board", cascade="all, delete-orphan")


class BOMEntry(Base):
    __tablename__ = "pcb_components"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    pcb_id: Mapped[int] = mapped_column(ForeignKey("pcbs.id", ondelete="CASCADE"), nullable=False, index=True)
    component_id: Mapped[int] = mapped_column(ForeignKey("components.id", ondelete="CASCADE"), nullable=False)
    quantity_required: Mapped[int] = mapped_column(Integer, nullable=False)

    board: Mapped[Board] = relationship(back_populates="bom")
    component: Mapped[Component] = relationship()

    __table_args__ = (
        UniqueConstraint("pcb_id", "component_id", name="uq_pcb_component"),
        CheckConstraint("quantity_required > 0", name="ck_pcb_component_qty_pos"),
    )


# ---------- PRODUCTION ----------
class ProductionEntry(Base):
    __tablename__ = "production_entries"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    pcb_id: Mapped[int] = mapped_column(ForeignKey("pcbs.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity_produced: Mapped[int] = mapped_column(Integer, nullable=False)
    production_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    board: Mapped[Board] = relationship()
    consumption: Mapped[list["ConsumptionRecord"]] = relationship(back_populates="production_entry")

    __table_args__ = (CheckConstraint("quantity_produced > 0", name="ck_production_qty_pos"),)


class ConsumptionRecord(Base):
    __tablename__ = "consumption_history"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    component_id: Mapped[int] = mapped_column(ForeignKey("components.id", ondelete="RESTRICT"), nullable=False)
    pcb_id: Mapped[int] = mapped_column(ForeignKey("pcbs.id", ondelete="RESTRICT"), nullable=False)
    production_entry_id: Mapped[int] = mapped_column(
        ForeignKey("production_entries.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    quantity_used: Mapped[int] = mapped_column(Integer, nullable=False)
    consumed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    production_entry: Mapped[ProductionEntry] = relationship(back_populates="consumption")

    __table_args__ = (
        CheckConstraint("quantity_used > 0", name="ck_consumption_qty_pos"),
        Index("ix_consumption_component_time", "component_id", "consumed_at"),
    )


# ---------- PROCUREMENT ----------
class ProcurementTrigger(Base):
    __tablename__ = "procurement_triggers"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    component_id: Mapped[int] = mapped_column(ForeignKey("components.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[TriggerStatus] = mapped_column(
        Enum(TriggerStatus, name="trigger_status", values_callable=lambda e: [m.value for m in e]),
        default=TriggerStatus.open,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    component: Mapped[Component] = relationship()

    __table_args__ = (
        # Un seul trigger OPEN par composant
        Index(
            "uq_procurement_trigger_open",
            "component_id",
            unique=True,
            postgresql_where=text("status = 'OPEN'"),
            sqlite_where=text("status = 'OPEN'"),
        ),
    )

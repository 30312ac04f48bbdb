from __future__ import annotations

from datetime import datetime, date, timezone
from decimal import Decimal

from sqlalchemy import (
    String,
    Integer,
    BigInteger,
    DateTime,
    Date,
    Boolean,
    ForeignKey,
    Numeric,
    Text,
    Enum,
    UniqueConstraint,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inbound.app.db.base import Base, BigIntPK
from inbound.app.db.models.core_types import (
    ItemStatus,
    ReturnStatus,
    RejectionCaseStatus,
    ContactMethod,
    DeliveryStatus,
)
from inbound.services.acceptance_engine import derive_item_status, derive_overall_status
from inbound.services.dispositions import derive_case_status, total_cost_impact


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------- MASTER DATA (externe, lecture seule) ----------
class Supplier(Base):
    __tablename__ = "suppliers"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    contact_person: Mapped[str | None] = mapped_column(String(200))
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(64))


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    po_number: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    supplier: Mapped[Supplier] = relationship()


# ---------- LIVRAISONS (externe, immuable) ----------
class Shipment(Base):
    __tablename__ = "shipments"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    purchase_order_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    challan_number: Mapped[str | None] = mapped_column(String(64), index=True)
    delivery_date: Mapped[date | None] = mapped_column(Date)
    delivery_address: Mapped[str | None] = mapped_column(Text)
    contact_person: Mapped[str | None] = mapped_column(String(200))
    contact_phone: Mapped[str | None] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    purchase_order: Mapped[PurchaseOrder] = relationship()
    lines: Mapped[list["ShipmentLine"]] = relationship(
        back_populates="shipment",
        order_by="ShipmentLine.line_no",
        cascade="all, delete-orphan",
    )


class ShipmentLine(Base):
    __tablename__ = "shipment_lines"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    shipment_id: Mapped[int] = mapped_column(ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False)
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0, nullable=False)
    delivered_quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    shipment: Mapped[Shipment] = relationship(back_populates="lines")

    __table_args__ = (
        UniqueConstraint("shipment_id", "line_no", name="uq_shipment_line_no"),
        CheckConstraint("delivered_quantity >= 0", name="ck_shipment_line_delivered_nonneg"),
    )


# ---------- ACCEPTANCE ----------
class AcceptanceRecord(Base):
    __tablename__ = "acceptance_records"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    shipment_id: Mapped[int] = mapped_column(
        ForeignKey("shipments.id", ondelete="RESTRICT"),
        unique=True,
        nullable=False,
    )

    acceptance_notes: Mapped[str | None] = mapped_column(Text)
    rejection_notes: Mapped[str | None] = mapped_column(Text)

    accepted_by_name: Mapped[str | None] = mapped_column(String(200))
    accepted_by_designation: Mapped[str | None] = mapped_column(String(200))
    accepted_by_contact: Mapped[str | None] = mapped_column(String(200))

    # Référence opaque rendue par le signature store
    signature_ref: Mapped[str | None] = mapped_column(String(128))
    generate_certificate: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    acceptance_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    finalized_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    shipment: Mapped[Shipment] = relationship()
    items: Mapped[list["AcceptanceItem"]] = relationship(
        back_populates="record",
        order_by="AcceptanceItem.line_no",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def overall_status(self) -> ItemStatus:
        return derive_overall_status(self.items)

    @property
    def is_finalized(self) -> bool:
        return self.finalized_at is not None


class AcceptanceItem(Base):
    __tablename__ = "acceptance_items"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    record_id: Mapped[int] = mapped_column(
        ForeignKey("acceptance_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    shipment_line_id: Mapped[int | None] = mapped_column(ForeignKey("shipment_lines.id", ondelete="SET NULL"))
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)

    delivered_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    accepted_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rejected_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    record: Mapped[AcceptanceRecord] = relationship(back_populates="items")

    __table_args__ = (
        CheckConstraint("delivered_quantity >= 0", name="ck_acc_item_delivered_nonneg"),
        CheckConstraint("accepted_quantity >= 0", name="ck_acc_item_accepted_nonneg"),
        CheckConstraint("rejected_quantity >= 0", name="ck_acc_item_rejected_nonneg"),
        CheckConstraint(
            "accepted_quantity + rejected_quantity <= delivered_quantity",
            name="ck_acc_item_reconciled_le_delivered",
        ),
    )

    @property
    def item_status(self) -> ItemStatus:
        return derive_item_status(self)


# ---------- REJECTIONS ----------
class RejectionCase(Base):
    __tablename__ = "rejection_cases"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    acceptance_id: Mapped[int] = mapped_column(
        ForeignKey("acceptance_records.id", ondelete="RESTRICT"),
        unique=True,
        nullable=False,
    )
    rejection_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    vendor_contacted_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    vendor_response_date: Mapped[date | None] = mapped_column(Date)
    resolution_notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    acceptance: Mapped[AcceptanceRecord] = relationship()
    dispositions: Mapped[list["RejectedItemDisposition"]] = relationship(
        back_populates="case",
        order_by="RejectedItemDisposition.id",
        cascade="all, delete-orphan",
    )
    # Journal en append-only : jamais modifié via la relation
    communications: Mapped[list["CommunicationEntry"]] = relationship(
        order_by="CommunicationEntry.id",
        viewonly=True,
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def status(self) -> RejectionCaseStatus:
        return derive_case_status(self.dispositions, vendor_contacted=self.vendor_contacted_date is not None)

    @property
    def total_cost_impact(self) -> Decimal:
        return total_cost_impact(self.dispositions)


class RejectedItemDisposition(Base):
    __tablename__ = "rejected_item_dispositions"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    case_id: Mapped[int] = mapped_column(
        ForeignKey("rejection_cases.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Référence faible (pas de FK) : l'item source peut évoluer indépendamment
    acceptance_item_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)

    return_status: Mapped[ReturnStatus] = mapped_column(
        Enum(ReturnStatus, name="return_status"),
        default=ReturnStatus.pending,
        nullable=False,
    )
    vendor_response: Mapped[str | None] = mapped_column(Text)
    return_date: Mapped[date | None] = mapped_column(Date)
    replacement_date: Mapped[date | None] = mapped_column(Date)
    inventory_location: Mapped[str | None] = mapped_column(String(128))
    cost_impact: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0, nullable=False)

    case: Mapped[RejectionCase] = relationship(back_populates="dispositions")

    __table_args__ = (
        UniqueConstraint("case_id", "acceptance_item_id", name="uq_disposition_case_item"),
        CheckConstraint("cost_impact >= 0", name="ck_disposition_cost_nonneg"),
    )


# ---------- VENDOR COMMUNICATION (append-only) ----------
class CommunicationEntry(Base):
    __tablename__ = "vendor_communications"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    case_id: Mapped[int] = mapped_column(ForeignKey("rejection_cases.id", ondelete="RESTRICT"), nullable=False)
    supplier_id: Mapped[int | None] = mapped_column(ForeignKey("suppliers.id", ondelete="RESTRICT"))

    method: Mapped[ContactMethod] = mapped_column(Enum(ContactMethod, name="contact_method"), nullable=False)
    delivery_status: Mapped[DeliveryStatus] = mapped_column(
        Enum(DeliveryStatus, name="delivery_status"),
        default=DeliveryStatus.sent,
        nullable=False,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    expected_response_date: Mapped[date | None] = mapped_column(Date)
    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_vendor_comm_case_time", "case_id", "sent_at"),)

"""acceptance core tables

Revision ID: 0001_acceptance_core
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_acceptance_core"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RETURN_STATUS = sa.Enum("pending", "approved", "returned", "non_returnable", "replaced", name="return_status")
CONTACT_METHOD = sa.Enum("email", "phone", "whatsapp", name="contact_method")
DELIVERY_STATUS = sa.Enum("sent", "delivered", "read", "failed", name="delivery_status")


def _ts(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "suppliers",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("contact_person", sa.String(200)),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(64)),
    )
    op.create_table(
        "purchase_orders",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("po_number", sa.String(64), nullable=False, unique=True),
        sa.Column("supplier_id", sa.BigInteger(), sa.ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False),
        _ts("created_at"),
    )
    op.create_table(
        "shipments",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "purchase_order_id",
            sa.BigInteger(),
            sa.ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        ),
        sa.Column("challan_number", sa.String(64), index=True),
        sa.Column("delivery_date", sa.Date()),
        sa.Column("delivery_address", sa.Text()),
        sa.Column("contact_person", sa.String(200)),
        sa.Column("contact_phone", sa.String(64)),
        _ts("created_at"),
    )
    op.create_table(
        "shipment_lines",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("shipment_id", sa.BigInteger(), sa.ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("line_no", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("unit_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("delivered_quantity", sa.Integer(), nullable=False),
        sa.UniqueConstraint("shipment_id", "line_no", name="uq_shipment_line_no"),
        sa.CheckConstraint("delivered_quantity >= 0", name="ck_shipment_line_delivered_nonneg"),
    )
    op.create_table(
        "acceptance_records",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "shipment_id",
            sa.BigInteger(),
            sa.ForeignKey("shipments.id", ondelete="RESTRICT"),
            nullable=False,
            unique=True,
        ),
        sa.Column("acceptance_notes", sa.Text()),
        sa.Column("rejection_notes", sa.Text()),
        sa.Column("accepted_by_name", sa.String(200)),
        sa.Column("accepted_by_designation", sa.String(200)),
        sa.Column("accepted_by_contact", sa.String(200)),
        sa.Column("signature_ref", sa.String(128)),
        sa.Column("generate_certificate", sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts("acceptance_date", nullable=True),
        _ts("finalized_at", nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.Column("version", sa.Integer(), nullable=False),
    )
    op.create_table(
        "acceptance_items",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "record_id",
            sa.BigInteger(),
            sa.ForeignKey("acceptance_records.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("shipment_line_id", sa.BigInteger(), sa.ForeignKey("shipment_lines.id", ondelete="SET NULL")),
        sa.Column("line_no", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("delivered_quantity", sa.Integer(), nullable=False),
        sa.Column("accepted_quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rejected_quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rejection_reason", sa.Text()),
        sa.CheckConstraint("delivered_quantity >= 0", name="ck_acc_item_delivered_nonneg"),
        sa.CheckConstraint("accepted_quantity >= 0", name="ck_acc_item_accepted_nonneg"),
        sa.CheckConstraint("rejected_quantity >= 0", name="ck_acc_item_rejected_nonneg"),
        sa.CheckConstraint(
            "accepted_quantity + rejected_quantity <= delivered_quantity",
            name="ck_acc_item_reconciled_le_delivered",
        ),
    )
    op.create_table(
        "rejection_cases",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "acceptance_id",
            sa.BigInteger(),
            sa.ForeignKey("acceptance_records.id", ondelete="RESTRICT"),
            nullable=False,
            unique=True,
        ),
        _ts("rejection_date"),
        _ts("vendor_contacted_date", nullable=True),
        sa.Column("vendor_response_date", sa.Date()),
        sa.Column("resolution_notes", sa.Text()),
        _ts("created_at"),
        _ts("updated_at"),
        sa.Column("version", sa.Integer(), nullable=False),
    )
    op.create_table(
        "rejected_item_dispositions",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("case_id", sa.BigInteger(), sa.ForeignKey("rejection_cases.id", ondelete="CASCADE"), nullable=False),
        sa.Column("acceptance_item_id", sa.BigInteger(), nullable=False, index=True),
        sa.Column("return_status", RETURN_STATUS, nullable=False, server_default="pending"),
        sa.Column("vendor_response", sa.Text()),
        sa.Column("return_date", sa.Date()),
        sa.Column("replacement_date", sa.Date()),
        sa.Column("inventory_location", sa.String(128)),
        sa.Column("cost_impact", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.UniqueConstraint("case_id", "acceptance_item_id", name="uq_disposition_case_item"),
        sa.CheckConstraint("cost_impact >= 0", name="ck_disposition_cost_nonneg"),
    )
    op.create_table(
        "vendor_communications",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("case_id", sa.BigInteger(), sa.ForeignKey("rejection_cases.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("supplier_id", sa.BigInteger(), sa.ForeignKey("suppliers.id", ondelete="RESTRICT")),
        sa.Column("method", CONTACT_METHOD, nullable=False),
        sa.Column("delivery_status", DELIVERY_STATUS, nullable=False, server_default="sent"),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("expected_response_date", sa.Date()),
        _ts("sent_at"),
    )
    op.create_index("ix_vendor_comm_case_time", "vendor_communications", ["case_id", "sent_at"])


def downgrade() -> None:
    op.drop_index("ix_vendor_comm_case_time", table_name="vendor_communications")
    op.drop_table("vendor_communications")
    op.drop_table("rejected_item_dispositions")
    op.drop_table("rejection_cases")
    op.drop_table("acceptance_items")
    op.drop_table("acceptance_records")
    op.drop_table("shipment_lines")
    op.drop_table("shipments")
    op.drop_table("purchase_orders")
    op.drop_table("suppliers")

    bind = op.get_bind()
    for enum in (DELIVERY_STATUS, CONTACT_METHOD, RETURN_STATUS):
        enum.drop(bind, checkfirst=True)

"""initial warehouse hierarchy schema

Revision ID: 0001_initial
Revises:
Create Date: 2025-11-03 12:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _tenant_pk():
    return [
        sa.Column("business_id", sa.String(128), primary_key=True),
        sa.Column("id", sa.String(128), primary_key=True),
    ]


def _audit():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("created_by", sa.String(128), nullable=False, server_default=""),
        sa.Column("updated_by", sa.String(128), nullable=False, server_default=""),
    ]


def _node():
    return _tenant_pk() + _audit() + [
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(64), nullable=False, server_default=""),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("name_version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("location_version", sa.Integer(), nullable=False, server_default="1"),
    ]


def _counter(name):
    return sa.Column(name, sa.Integer(), nullable=False, server_default="0")


def _name(name):
    return sa.Column(name, sa.String(255), nullable=False, server_default="")


def upgrade() -> None:
    op.create_table(
        "warehouses",
        *_node(),
        sa.Column("address", sa.String(512), nullable=False, server_default=""),
        _counter("storage_capacity"),
        _counter("operational_hours"),
        sa.Column("default_gst_state", sa.String(64), nullable=False, server_default=""),
        _counter("total_zones"),
        _counter("total_racks"),
        _counter("total_shelves"),
        _counter("total_products"),
    )
    op.create_index("ix_warehouses_biz_code", "warehouses", ["business_id", "code", "is_deleted"])
    op.create_index(
        "uq_warehouses_biz_code_active",
        "warehouses",
        ["business_id", "code"],
        unique=True,
        postgresql_where=sa.text("NOT is_deleted"),
        sqlite_where=sa.text("is_deleted = 0"),
    )

    op.create_table(
        "zones",
        *_node(),
        sa.Column("description", sa.String(1024), nullable=False, server_default=""),
        sa.Column("warehouse_id", sa.String(128), nullable=False),
        _name("warehouse_name"),
        _counter("total_racks"),
        _counter("total_shelves"),
        _counter("total_products"),
    )
    op.create_index("ix_zones_biz_wh_deleted", "zones", ["business_id", "warehouse_id", "is_deleted"])

    op.create_table(
        "racks",
        *_node(),
        sa.Column("zone_id", sa.String(128), nullable=False),
        _name("zone_name"),
        sa.Column("warehouse_id", sa.String(128), nullable=False),
        _name("warehouse_name"),
        _counter("position"),
        _counter("total_shelves"),
        _counter("total_products"),
    )
    op.create_index("ix_racks_biz_zone_pos", "racks", ["business_id", "zone_id", "is_deleted", "position"])

    op.create_table(
        "shelves",
        *_node(),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("coordinates", sa.JSON(), nullable=True),
        sa.Column("rack_id", sa.String(128), nullable=False),
        _name("rack_name"),
        sa.Column("zone_id", sa.String(128), nullable=False),
        _name("zone_name"),
        sa.Column("warehouse_id", sa.String(128), nullable=False),
        _name("warehouse_name"),
        sa.Column("path", sa.String(1024), nullable=False, server_default=""),
        _counter("position"),
        _counter("total_products"),
        _counter("current_occupancy"),
    )
    op.create_index("ix_shelves_biz_rack_pos", "shelves", ["business_id", "rack_id", "is_deleted", "position"])

    op.create_table(
        "placements",
        *_tenant_pk(),
        *_audit(),
        sa.Column("product_id", sa.String(128), nullable=False),
        sa.Column("product_sku", sa.String(128), nullable=False, server_default=""),
        _counter("quantity"),
        sa.Column("coordinates", sa.JSON(), nullable=True),
        sa.Column("location_code", sa.String(255), nullable=True),
        sa.Column("warehouse_id", sa.String(128), nullable=False),
        _name("warehouse_name"),
        sa.Column("zone_id", sa.String(128), nullable=False),
        _name("zone_name"),
        sa.Column("rack_id", sa.String(128), nullable=False),
        _name("rack_name"),
        sa.Column("shelf_id", sa.String(128), nullable=False),
        _name("shelf_name"),
        sa.Column("last_movement_reason", sa.String(255), nullable=True),
        sa.Column("last_movement_reference", sa.String(255), nullable=True),
    )
    op.create_index("ix_placements_biz_shelf_product", "placements", ["business_id", "shelf_id", "product_id"])

    op.create_table(
        "upcs",
        *_tenant_pk(),
        *_audit(),
        sa.Column("product_id", sa.String(128), nullable=False),
        sa.Column("put_away", sa.String(16), nullable=False, server_default="inbound"),
        sa.Column("warehouse_id", sa.String(128), nullable=True),
        sa.Column("zone_id", sa.String(128), nullable=True),
        sa.Column("rack_id", sa.String(128), nullable=True),
        sa.Column("shelf_id", sa.String(128), nullable=True),
        sa.Column("placement_id", sa.String(300), nullable=True),
        sa.Column("store_id", sa.String(128), nullable=True),
        sa.Column("order_id", sa.String(128), nullable=True),
        sa.Column("grn_ref", sa.String(128), nullable=True),
    )
    op.create_index("ix_upcs_biz_placement_state", "upcs", ["business_id", "placement_id", "put_away"])

    op.create_table(
        "movements",
        *_tenant_pk(),
        sa.Column("product_id", sa.String(128), nullable=False),
        sa.Column("product_sku", sa.String(128), nullable=False, server_default=""),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("from_location", sa.JSON(), nullable=False),
        sa.Column("to_location", sa.JSON(), nullable=False),
        sa.Column("to_warehouse_id", sa.String(128), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(255), nullable=True),
        sa.Column("reference", sa.String(255), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False, server_default=""),
    )
    op.create_index("ix_movements_biz_ts", "movements", ["business_id", "timestamp"])
    op.create_index("ix_movements_biz_type_ts", "movements", ["business_id", "type", "timestamp"])

    op.create_table(
        "grns",
        *_tenant_pk(),
        *_audit(),
        sa.Column("grn_number", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("notes", sa.String(1024), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_by", sa.String(128), nullable=True),
        _counter("total_upcs_created"),
        sa.UniqueConstraint("business_id", "grn_number", name="uq_grns_biz_number"),
    )

    op.create_table(
        "entity_logs",
        sa.Column("business_id", sa.String(128), primary_key=True),
        sa.Column("entity_type", sa.String(16), primary_key=True),
        sa.Column("entity_id", sa.String(300), primary_key=True),
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=True),
        sa.Column("note", sa.String(1024), nullable=True),
        sa.Column("from_location", sa.JSON(), nullable=True),
        sa.Column("to_location", sa.JSON(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.Column("quantity_before", sa.Integer(), nullable=True),
        sa.Column("quantity_after", sa.Integer(), nullable=True),
        sa.Column("related_movement_id", sa.String(128), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("user_id", sa.String(128), nullable=False),
    )
    op.create_index("ix_entity_logs_entity_ts", "entity_logs", ["business_id", "entity_type", "entity_id", "timestamp"])
    op.create_index("ix_entity_logs_biz_ts", "entity_logs", ["business_id", "timestamp"])

    op.create_table(
        "business_members",
        sa.Column("business_id", sa.String(128), primary_key=True),
        sa.Column("user_id", sa.String(128), primary_key=True),
        *_audit(),
        sa.Column("role", sa.String(16), nullable=False, server_default="staff"),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
    )


def downgrade() -> None:
    op.drop_table("business_members")
    op.drop_index("ix_entity_logs_biz_ts", table_name="entity_logs")
    op.drop_index("ix_entity_logs_entity_ts", table_name="entity_logs")
    op.drop_table("entity_logs")
    op.drop_table("grns")
    op.drop_index("ix_movements_biz_type_ts", table_name="movements")
    op.drop_index("ix_movements_biz_ts", table_name="movements")
    op.drop_table("movements")
    op.drop_index("ix_upcs_biz_placement_state", table_name="upcs")
    op.drop_table("upcs")
    op.drop_index("ix_placements_biz_shelf_product", table_name="placements")
    op.drop_table("placements")
    op.drop_index("ix_shelves_biz_rack_pos", table_name="shelves")
    op.drop_table("shelves")
    op.drop_index("ix_racks_biz_zone_pos", table_name="racks")
    op.drop_table("racks")
    op.drop_index("ix_zones_biz_wh_deleted", table_name="zones")
    op.drop_table("zones")
    op.drop_index("uq_warehouses_biz_code_active", table_name="warehouses")
    op.drop_index("ix_warehouses_biz_code", table_name="warehouses")
    op.drop_table("warehouses")

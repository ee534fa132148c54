"""create alert tables

Revision ID: 0001_alert_tables
Revises:
Create Date: 2025-09-06
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_alert_tables"
down_revision = None
branch_labels = None
depends_on = None

MODULE_COLUMNS: dict[str, list[sa.Column]] = {
    "general_alerts": [],
    "redis_alerts": [
        sa.Column("big_keys_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("failed_nodes", sa.Text(), nullable=False),
    ],
    "mysql_alerts": [
        sa.Column("deadlocks_increment", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("slow_queries_increment", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("connections", sa.BigInteger(), nullable=False, server_default="0"),
    ],
    "host_alerts": [
        sa.Column("cpu_usage", sa.Float(), nullable=False, server_default="0"),
        sa.Column("mem_remaining", sa.Float(), nullable=False, server_default="0"),
        sa.Column("disk_usage", sa.Float(), nullable=False, server_default="0"),
    ],
    "system_alerts": [
        sa.Column("added_users", sa.Text(), nullable=False),
        sa.Column("removed_users", sa.Text(), nullable=False),
        sa.Column("added_processes", sa.Text(), nullable=False),
        sa.Column("removed_processes", sa.Text(), nullable=False),
    ],
}


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("module", sa.String(50), nullable=False),
        sa.Column("service_name", sa.String(100), nullable=False),
        sa.Column("event_name", sa.String(100), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("host_ip", sa.String(50), nullable=False),
        sa.Column("alert_type", sa.String(50), nullable=False),
        sa.Column("cluster_name", sa.String(100), nullable=False),
        sa.Column("hostname", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    for table_name, extra_columns in MODULE_COLUMNS.items():
        if _table_exists(table_name):
            continue
        op.create_table(
            table_name,
            *_base_columns(),
            *extra_columns,
            sa.PrimaryKeyConstraint("id", name=f"pk_{table_name}"),
        )
        op.create_index(f"ix_{table_name}_timestamp", table_name, ["timestamp"], unique=False)
        op.create_index(f"ix_{table_name}_module", table_name, ["module"], unique=False)


def downgrade() -> None:
    for table_name in reversed(list(MODULE_COLUMNS)):
        if _table_exists(table_name):
            op.drop_index(f"ix_{table_name}_module", table_name=table_name)
            op.drop_index(f"ix_{table_name}_timestamp", table_name=table_name)
            op.drop_table(table_name)


def _table_exists(table_name: str) -> bool:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    return table_name in inspector.get_table_names()

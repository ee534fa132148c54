"""Alert storage models.

One table per module with a dedicated schema plus ``general_alerts`` as the
fallback. Every table carries the same base columns via ``AlertColumnsMixin``;
module tables add their own metrics with non-null defaults. Rows are written
once at ingestion and never updated or deleted.
"""
from __future__ import annotations

import datetime as dt

from sqlalchemy import BigInteger, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from monitor_web.db.base_class import Base
from monitor_web.models.alert_modules import AlertModule

# BIGINT autoincrement on MySQL; SQLite only autoincrements INTEGER PRIMARY KEY
AlertId = BigInteger().with_variant(Integer, "sqlite")


class AlertColumnsMixin:
    """Columns shared by the general table and every module table."""

    id: Mapped[int] = mapped_column(AlertId, primary_key=True, autoincrement=True)
    timestamp: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False, index=True)
    module: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    service_name: Mapped[str] = mapped_column(String(100), nullable=False)
    event_name: Mapped[str] = mapped_column(String(100), nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    host_ip: Mapped[str] = mapped_column(String(50), nullable=False)
    alert_type: Mapped[str] = mapped_column(String(50), nullable=False)
    cluster_name: Mapped[str] = mapped_column(String(100), nullable=False)
    hostname: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )


class Alert(AlertColumnsMixin, Base):
    """General/fallback alerts for modules without a dedicated schema."""
    __tablename__ = "general_alerts"


class RedisAlert(AlertColumnsMixin, Base):
    __tablename__ = "redis_alerts"

    big_keys_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    failed_nodes: Mapped[str] = mapped_column(Text, nullable=False, default="")


class MySQLAlert(AlertColumnsMixin, Base):
    __tablename__ = "mysql_alerts"

    deadlocks_increment: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    slow_queries_increment: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    connections: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")


class HostAlert(AlertColumnsMixin, Base):
    __tablename__ = "host_alerts"

    cpu_usage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    mem_remaining: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    disk_usage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")


class SystemAlert(AlertColumnsMixin, Base):
    __tablename__ = "system_alerts"

    added_users: Mapped[str] = mapped_column(Text, nullable=False, default="")
    removed_users: Mapped[str] = mapped_column(Text, nullable=False, default="")
    added_processes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    removed_processes: Mapped[str] = mapped_column(Text, nullable=False, default="")


AnyAlert = Alert | RedisAlert | MySQLAlert | HostAlert | SystemAlert

MODEL_BY_MODULE: dict[AlertModule, type[AlertColumnsMixin]] = {
    AlertModule.REDIS: RedisAlert,
    AlertModule.MYSQL: MySQLAlert,
    AlertModule.HOST: HostAlert,
    AlertModule.SYSTEM: SystemAlert,
    AlertModule.GENERAL: Alert,
}

"""
Pydantic schemas for the alert ingestion and dashboard API.

``AlertEventIn`` is the wire format probes POST. It is a flat superset: the
common fields every probe sends plus optional per-module metrics. Which of the
optional fields matter is decided by ``module`` at dispatch time.
"""
from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class AlertEventIn(BaseModel):
    """Alert event as emitted by a monitoring probe."""
    model_config = ConfigDict(extra="ignore")

    timestamp: dt.datetime | None = None
    module: str = ""
    service_name: str = ""
    event_name: str = ""
    details: str = ""
    host_ip: str = ""
    alert_type: str = ""
    cluster_name: str = ""
    hostname: str = ""

    # Redis
    big_keys_count: int | None = Field(None, ge=INT64_MIN, le=INT64_MAX)
    failed_nodes: str | None = None
    # MySQL
    deadlocks_increment: int | None = Field(None, ge=INT64_MIN, le=INT64_MAX)
    slow_queries_increment: int | None = Field(None, ge=INT64_MIN, le=INT64_MAX)
    connections: int | None = Field(None, ge=INT64_MIN, le=INT64_MAX)
    # Host
    cpu_usage: float | None = None
    mem_remaining: float | None = None
    disk_usage: float | None = None
    # System
    added_users: str | None = None
    removed_users: str | None = None
    added_processes: str | None = None
    removed_processes: str | None = None

    @field_validator(
        "module",
        "service_name",
        "event_name",
        "details",
        "host_ip",
        "alert_type",
        "cluster_name",
        "hostname",
        mode="before",
    )
    @classmethod
    def null_to_empty(cls, v):
        """Probes send JSON null for unset common fields; store them as empty text."""
        if v is None:
            return ""
        return v


class AlertStoredOut(BaseModel):
    """Acknowledgement returned once an alert is committed."""
    status: str = "stored"
    id: int
    module: str
    collection: str


class ChartDataset(BaseModel):
    label: str = "Alert Count"
    data: list[int] = Field(default_factory=list)
    borderColor: str = "#3b82f6"  # noqa: N815 - Chart.js key
    backgroundColor: str = "#3b82f6"  # noqa: N815 - Chart.js key
    fill: bool = False


class ChartData(BaseModel):
    """Chart.js line-chart payload for the day-bucketed alert count."""
    labels: list[str] = Field(default_factory=list)
    datasets: list[ChartDataset] = Field(default_factory=lambda: [ChartDataset()])


class ModuleAlertsOut(BaseModel):
    """JSON form of a module dashboard."""
    module: str
    count: int
    alerts: list[dict[str, Any]]
    chart: ChartData

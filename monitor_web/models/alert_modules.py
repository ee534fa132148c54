"""Module tags for alert routing.

Routing is driven by an explicit enum instead of open-ended string matching.
Each module-specific variant has a default table listing its optional fields
and the value stored when the probe leaves one out.
"""
from __future__ import annotations

import enum
from types import MappingProxyType
from typing import Any, Mapping


class AlertModule(str, enum.Enum):
    """Storage variants an ingested alert can be routed to."""
    REDIS = "redis"
    MYSQL = "mysql"
    HOST = "host"
    SYSTEM = "system"
    GENERAL = "general"

    @classmethod
    def resolve(cls, module: str) -> AlertModule:
        """Exact, case-sensitive match; anything unrecognised routes to GENERAL."""
        try:
            tag = cls(module)
        except ValueError:
            return cls.GENERAL
        return tag


MODULE_FIELD_DEFAULTS: Mapping[AlertModule, Mapping[str, Any]] = MappingProxyType({
    AlertModule.REDIS: MappingProxyType({
        "big_keys_count": 0,
        "failed_nodes": "",
    }),
    AlertModule.MYSQL: MappingProxyType({
        "deadlocks_increment": 0,
        "slow_queries_increment": 0,
        "connections": 0,
    }),
    AlertModule.HOST: MappingProxyType({
        "cpu_usage": 0.0,
        "mem_remaining": 0.0,
        "disk_usage": 0.0,
    }),
    AlertModule.SYSTEM: MappingProxyType({
        "added_users": "",
        "removed_users": "",
        "added_processes": "",
        "removed_processes": "",
    }),
    AlertModule.GENERAL: MappingProxyType({}),
})

# Modules without a dedicated schema that the dashboard still serves; they
# read the general collection filtered on the module column.
GENERAL_BACKED_MODULES: frozenset[str] = frozenset({"rabbitmq", "nacos"})

DASHBOARD_MODULES: tuple[str, ...] = (
    AlertModule.REDIS.value,
    AlertModule.MYSQL.value,
    AlertModule.HOST.value,
    AlertModule.SYSTEM.value,
    AlertModule.GENERAL.value,
    "rabbitmq",
    "nacos",
)

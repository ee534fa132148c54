"""Module dashboard queries: recent alerts plus a per-day count series."""
from __future__ import annotations

import datetime as dt
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from monitor_web import metrics
from monitor_web.core.exceptions import AlertPersistenceError, InvalidModuleError
from monitor_web.core.logger import log_context
from monitor_web.models.alert_models import MODEL_BY_MODULE, AnyAlert
from monitor_web.models.alert_modules import DASHBOARD_MODULES, GENERAL_BACKED_MODULES, AlertModule
from monitor_web.models.alert_schemas import ChartData, ChartDataset

logger = logging.getLogger(__name__)

MAX_DASHBOARD_ALERTS = 100
DAY_FORMAT = "%Y-%m-%d"
# zero-padded only; strptime alone also takes 2025-9-1
_DAY_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


@dataclass(frozen=True)
class DailySeries:
    """Alert counts per calendar day, ascending by day."""
    labels: list[str] = field(default_factory=list)
    counts: list[int] = field(default_factory=list)


def parse_day(value: str | None) -> dt.datetime | None:
    """Parse ``YYYY-MM-DD`` to midnight; blank or malformed input yields None."""
    if not value:
        return None
    try:
        if not _DAY_PATTERN.fullmatch(value):
            raise ValueError(f"expected YYYY-MM-DD, got {value!r}")
        return dt.datetime.strptime(value, DAY_FORMAT)
    except ValueError:
        logger.warning("Ignoring malformed date filter %r", value, extra=log_context(value=value))
        return None


def build_daily_series(records: Sequence[AnyAlert]) -> DailySeries:
    day_counts = Counter(r.timestamp.strftime(DAY_FORMAT) for r in records if r.timestamp is not None)
    days = sorted(day_counts)
    return DailySeries(labels=days, counts=[day_counts[d] for d in days])


def chart_payload(series: DailySeries) -> ChartData:
    return ChartData(labels=list(series.labels), datasets=[ChartDataset(data=list(series.counts))])


class AlertQueryService:
    """Read-only access to the alert tables for dashboards."""

    def __init__(self, db: Session):
        self._db = db

    def fetch(
        self,
        module: str,
        from_date: str | None = None,
        to_date: str | None = None,
        alert_type: str | None = None,
    ) -> list[AnyAlert]:
        """Most recent alerts for ``module`` (newest first, at most 100).

        Date bounds are inclusive and compare against midnight of the given
        day, so ``to=2025-09-06`` stops at 2025-09-06T00:00:00.
        """
        if module not in DASHBOARD_MODULES:
            logger.warning("Invalid module requested", extra=log_context(alert_module=module))
            raise InvalidModuleError(module)

        if module in GENERAL_BACKED_MODULES:
            model = MODEL_BY_MODULE[AlertModule.GENERAL]
        else:
            model = MODEL_BY_MODULE[AlertModule(module)]

        query = self._db.query(model)
        if module in GENERAL_BACKED_MODULES:
            query = query.filter(model.module == module)
        start = parse_day(from_date)
        if start is not None:
            query = query.filter(model.timestamp >= start)
        end = parse_day(to_date)
        if end is not None:
            query = query.filter(model.timestamp <= end)
        if alert_type:
            query = query.filter(model.alert_type == alert_type)

        try:
            alerts = (
                query.order_by(model.timestamp.desc(), model.id.desc())
                .limit(MAX_DASHBOARD_ALERTS)
                .all()
            )
        except SQLAlchemyError as exc:
            logger.error(
                "Failed to query alerts",
                exc_info=True,
                extra=log_context(alert_module=module, table=model.__tablename__),
            )
            raise AlertPersistenceError("Failed to query alerts", cause=exc, module=module) from exc

        metrics.dashboard_query(module)
        return alerts

    def dashboard(
        self,
        module: str,
        from_date: str | None = None,
        to_date: str | None = None,
        alert_type: str | None = None,
    ) -> tuple[list[AnyAlert], DailySeries]:
        alerts = self.fetch(module, from_date, to_date, alert_type)
        return alerts, build_daily_series(alerts)

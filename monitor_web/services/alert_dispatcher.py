"""
Alert dispatcher - validation, routing and atomic persistence of probe events.

Each event becomes exactly one row: the module table matching its routing tag,
or ``general_alerts`` when the module has no dedicated schema. The write runs
in its own transaction on the session handed to the dispatcher; on failure the
session is rolled back and nothing is visible in any table.
"""
from __future__ import annotations

import datetime as dt
import logging
import time
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from monitor_web import metrics
from monitor_web.core.exceptions import AlertPersistenceError, AlertValidationError
from monitor_web.core.logger import log_context
from monitor_web.models.alert_models import MODEL_BY_MODULE, AnyAlert
from monitor_web.models.alert_modules import MODULE_FIELD_DEFAULTS, AlertModule
from monitor_web.models.alert_schemas import AlertEventIn

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = ("module", "service_name", "event_name")


@dataclass(frozen=True)
class DispatchResult:
    """Identity of a committed alert row."""
    id: int
    module: str
    collection: str


def validate_event(event: AlertEventIn) -> AlertEventIn:
    """Reject events missing module, service_name or event_name.

    Nothing else is checked; the event is returned unchanged.
    """
    missing = [name for name in REQUIRED_FIELDS if not getattr(event, name)]
    if missing:
        metrics.alert_rejected("missing_fields")
        raise AlertValidationError(
            "Missing required fields",
            details={"missing": missing, "module": event.module},
        )
    return event


def _storage_timestamp(value: dt.datetime | None) -> dt.datetime:
    """Naive UTC; events without a timestamp take the ingestion time."""
    if value is None:
        return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)
    if value.tzinfo is not None:
        return value.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return value


def build_record(event: AlertEventIn, tag: AlertModule | None = None) -> AnyAlert:
    """Map an event to an unsaved row of the table its module routes to."""
    if tag is None:
        tag = AlertModule.resolve(event.module)
    columns = {
        "timestamp": _storage_timestamp(event.timestamp),
        "module": event.module,
        "service_name": event.service_name,
        "event_name": event.event_name,
        "details": event.details,
        "host_ip": event.host_ip,
        "alert_type": event.alert_type,
        "cluster_name": event.cluster_name,
        "hostname": event.hostname,
    }
    for field, default in MODULE_FIELD_DEFAULTS[tag].items():
        value = getattr(event, field)
        columns[field] = default if value is None else value
    return MODEL_BY_MODULE[tag](**columns)


class AlertDispatcher:
    """
    Routes validated alert events to their module table.

    The storage session is injected so callers (request handlers, scripts,
    tests) control its lifetime; the dispatcher only scopes a transaction
    around its single insert.
    """

    def __init__(self, db: Session):
        self._db = db

    def dispatch(self, event: AlertEventIn) -> DispatchResult:
        """Validate, route and commit one alert event.

        Raises:
            AlertValidationError: module, service_name or event_name is empty.
            AlertPersistenceError: the insert or commit failed; rolled back.
        """
        validate_event(event)
        tag = AlertModule.resolve(event.module)
        if tag is AlertModule.GENERAL and event.module != AlertModule.GENERAL.value:
            metrics.alert_unrouted()
            logger.warning(
                "Unrecognised module %r routed to general collection",
                event.module,
                extra=log_context(alert_module=event.module, event_name=event.event_name),
            )
        metrics.alert_received(tag.value)

        record = build_record(event, tag)
        collection = record.__tablename__
        started = time.perf_counter()
        try:
            self._db.add(record)
            self._db.flush()
            record_id = record.id
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            metrics.alert_store_failed(collection)
            logger.error(
                "Failed to store %s alert",
                tag.value,
                exc_info=True,
                extra=log_context(
                    alert_module=event.module,
                    collection=collection,
                    service_name=event.service_name,
                    event_name=event.event_name,
                ),
            )
            raise AlertPersistenceError(
                cause=exc,
                module=event.module,
                collection=collection,
            ) from exc

        metrics.alert_stored(collection, time.perf_counter() - started)
        logger.info(
            "Stored alert",
            extra=log_context(
                alert_module=event.module,
                event_name=event.event_name,
                collection=collection,
                alert_id=record_id,
            ),
        )
        return DispatchResult(id=record_id, module=event.module, collection=collection)

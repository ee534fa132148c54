"""Alert ingestion endpoint and JSON dashboard data."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from monitor_web.api.rate_limit import limiter
from monitor_web.core.config import settings
from monitor_web.db.session import get_db
from monitor_web.models.alert_schemas import AlertEventIn, AlertStoredOut, ModuleAlertsOut
from monitor_web.services.alert_dispatcher import AlertDispatcher
from monitor_web.services.alert_query import AlertQueryService, chart_payload

router = APIRouter()
logger = logging.getLogger(__name__)

DbDep = Annotated[Session, Depends(get_db)]


def get_dispatcher(db: DbDep) -> AlertDispatcher:
    return AlertDispatcher(db)


def get_query_service(db: DbDep) -> AlertQueryService:
    return AlertQueryService(db)


DispatcherDep = Annotated[AlertDispatcher, Depends(get_dispatcher)]
QueryServiceDep = Annotated[AlertQueryService, Depends(get_query_service)]


@router.post("/api/alerts", response_model=AlertStoredOut)
@limiter.limit(settings.INGEST_RATE_LIMIT)
def receive_alert(
    request: Request,
    event: AlertEventIn,
    dispatcher: DispatcherDep,
) -> AlertStoredOut:
    """Store one probe alert in the table for its module.

    400 ``Missing required fields`` / ``Invalid JSON``; 500 ``Failed to store alert``.
    """
    result = dispatcher.dispatch(event)
    return AlertStoredOut(id=result.id, module=result.module, collection=result.collection)


@router.get("/api/alerts/{module}", response_model=ModuleAlertsOut)
def list_module_alerts(
    module: str,
    queries: QueryServiceDep,
    from_: Annotated[str | None, Query(alias="from")] = None,
    to: str | None = None,
    alert_type: str | None = None,
) -> ModuleAlertsOut:
    alerts, series = queries.dashboard(module, from_, to, alert_type)
    return ModuleAlertsOut(
        module=module,
        count=len(alerts),
        alerts=[jsonable_encoder(alert.as_dict()) for alert in alerts],
        chart=chart_payload(series),
    )

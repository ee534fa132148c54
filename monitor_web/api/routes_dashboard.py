from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

from monitor_web.api.routes_alerts import QueryServiceDep
from monitor_web.services.alert_query import chart_payload

router = APIRouter(tags=["dashboard"])

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

_jinja = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)

# Columns shown for every module, ahead of the module-specific ones
BASE_COLUMNS = ("timestamp", "service_name", "event_name", "alert_type", "hostname", "host_ip", "cluster_name", "details")
_HIDDEN_COLUMNS = {"id", "module", "created_at"}


@router.get("/dashboard/{module}", response_class=HTMLResponse)
def show_dashboard(
    module: str,
    queries: QueryServiceDep,
    from_: Annotated[str | None, Query(alias="from")] = None,
    to: str | None = None,
    alert_type: str | None = None,
) -> HTMLResponse:
    """Render the alert table and daily-count chart for one module."""
    alerts, series = queries.dashboard(module, from_, to, alert_type)
    rows = [alert.as_dict() for alert in alerts]
    extra_columns: list[str] = []
    if rows:
        extra_columns = [c for c in rows[0] if c not in BASE_COLUMNS and c not in _HIDDEN_COLUMNS]
    template = _jinja.get_template("dashboard.html")
    html = template.render(
        module=module,
        alerts=rows,
        columns=list(BASE_COLUMNS) + extra_columns,
        chart_data=jsonable_encoder(chart_payload(series)),
        filters={"from": from_ or "", "to": to or "", "alert_type": alert_type or ""},
    )
    return HTMLResponse(html)

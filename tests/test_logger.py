import json
import logging

from monitor_web.core.logger import JsonFormatter, log_context


def _record(**extra) -> logging.LogRecord:
    logger = logging.getLogger("monitor_web.test")
    return logger.makeRecord("monitor_web.test", logging.INFO, __file__, 1, "Stored alert", (), None, extra=extra)


def test_json_formatter_carries_context_fields():
    record = _record(**log_context(alert_module="redis", collection="redis_alerts"))
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "Stored alert"
    assert payload["level"] == "INFO"
    assert payload["extra"] == {
        "component": "monitor-web",
        "alert_module": "redis",
        "collection": "redis_alerts",
    }


def test_json_formatter_without_extra_has_no_extra_block():
    payload = json.loads(JsonFormatter().format(_record()))
    assert "extra" not in payload

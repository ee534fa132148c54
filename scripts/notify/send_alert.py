#!/usr/bin/env python3
"""
Send a sample alert event to a running monitor-web instance.
Usage:
  python scripts/notify/send_alert.py redis "redis-prod" "big_keys_detected" --field big_keys_count=12
Environment:
  MONITOR_WEB_URL (default http://localhost:8080)
Exit codes:
  0 stored, 1 rejected or transport failure.
"""
from __future__ import annotations

import argparse
import json
import os
import socket
import sys
from datetime import datetime, timezone

import httpx


def _parse_field(raw: str) -> tuple[str, object]:
    key, _, value = raw.partition("=")
    try:
        return key, json.loads(value)
    except json.JSONDecodeError:
        return key, value


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("module")
    parser.add_argument("service_name")
    parser.add_argument("event_name")
    parser.add_argument("--details", default="manual test alert")
    parser.add_argument("--alert-type", default="warning")
    parser.add_argument("--cluster", default="default")
    parser.add_argument("--field", action="append", default=[], help="module field as key=value")
    args = parser.parse_args()

    hostname = socket.gethostname()
    payload = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "module": args.module,
        "service_name": args.service_name,
        "event_name": args.event_name,
        "details": args.details,
        "host_ip": socket.gethostbyname(hostname),
        "alert_type": args.alert_type,
        "cluster_name": args.cluster,
        "hostname": hostname,
    }
    payload.update(dict(_parse_field(f) for f in args.field))

    base_url = os.getenv("MONITOR_WEB_URL", "http://localhost:8080")
    try:
        resp = httpx.post(f"{base_url}/api/alerts", json=payload, timeout=10)
    except httpx.HTTPError as e:
        print(f"[send_alert] Error: {e}", file=sys.stderr)
        return 1
    print(f"[send_alert] status={resp.status_code} body={resp.text[:200]}")
    return 0 if resp.status_code == 200 else 1


if __name__ == "__main__":
    raise SystemExit(main())

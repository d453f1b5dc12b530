from __future__ import annotations

import random
import string
import time
from datetime import datetime, timezone
from typing import Any

STORE_VERSION = "3.0.0"

STATUS_IDLE = "idle"
STATUS_BUSY = "busy"
STATUS_TERMINATED = "terminated"
AGENT_STATUSES = (STATUS_IDLE, STATUS_BUSY, STATUS_TERMINATED)

PUBLIC_FIELDS = ("agentId", "agentType", "status", "health", "taskCount", "createdAt", "domain")
_ID_ALPHABET = string.digits + string.ascii_lowercase


def new_store_document() -> dict[str, Any]:
    return {"agents": {}, "version": STORE_VERSION}


def generate_agent_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=6))
    return f"agent-{int(time.time() * 1000)}-{suffix}"


def new_agent_record(
    agent_id: str,
    agent_type: str,
    config: dict[str, Any] | None = None,
    domain: str | None = None,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "agentId": agent_id,
        "agentType": agent_type,
        "status": STATUS_IDLE,
        "health": 1.0,
        "taskCount": 0,
        "config": dict(config or {}),
        "createdAt": utc_timestamp(),
    }
    if domain is not None:
        record["domain"] = domain
    return record


def public_view(record: dict[str, Any]) -> dict[str, Any]:
    """Record fields safe to hand back to callers; ``config`` is never exposed."""
    return {field: record.get(field) for field in PUBLIC_FIELDS}


def summary_view(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "agentId": record.get("agentId"),
        "status": record.get("status"),
        "health": record.get("health"),
        "taskCount": record.get("taskCount"),
    }


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


__all__ = [
    "AGENT_STATUSES",
    "STATUS_BUSY",
    "STATUS_IDLE",
    "STATUS_TERMINATED",
    "STORE_VERSION",
    "generate_agent_id",
    "is_number",
    "new_agent_record",
    "new_store_document",
    "public_view",
    "summary_view",
    "utc_timestamp",
]

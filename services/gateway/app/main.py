from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from services.agent_store import (
    STORE_VERSION,
    AgentOperations,
    AgentStore,
    AgentTool,
    StoreLockTimeout,
    build_agent_tools,
    tool_schemas,
)
from services.config.runtime_config import collect_values, configure_logging, load_settings, validate_settings
from services.protocol import ProtocolValidationError, ProtocolValidator
from services.versioning import project_version

logger = logging.getLogger("agentstore.gateway")

SETTINGS = load_settings()
STORE_PATH = SETTINGS.store_path
LOCK_TIMEOUT_S = SETTINGS.lock_timeout_s

app = FastAPI(title="agentstore gateway", version=project_version())

_store: AgentStore | None = None
_tools: dict[str, AgentTool] | None = None
_validator: ProtocolValidator | None = None


class ToolCallRequest(BaseModel):
    input: dict[str, Any] = Field(default_factory=dict)


def _get_store() -> AgentStore:
    global _store, _tools, _validator
    if _store is None or _store.closed:
        _store = AgentStore(STORE_PATH, lock_timeout_s=LOCK_TIMEOUT_S)
        _tools = build_agent_tools(AgentOperations(_store))
        _validator = ProtocolValidator(tool_schemas(_tools))
    return _store


def _get_tools() -> dict[str, AgentTool]:
    _get_store()
    return _tools or {}


def _validate_or_422(payload: object, tool_name: str) -> None:
    _get_store()
    assert _validator is not None
    try:
        _validator.validate(schema_path=tool_name, payload=payload)
    except ProtocolValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail={
                "error": "schema_validation_failed",
                "tool": tool_name,
                "issues": exc.issues,
            },
        ) from exc


@app.on_event("startup")
async def startup_event() -> None:
    configure_logging(SETTINGS)
    report = validate_settings(collect_values())
    for error in report["errors"]:
        logger.error("Configuration error: %s", error)
    for warning in report["warnings"]:
        logger.warning("Configuration warning: %s", warning)
    load = _get_store().load()
    logger.info("Agent store %s opened (%s)", STORE_PATH, load.state)


@app.on_event("shutdown")
async def shutdown_event() -> None:
    global _store
    if _store is not None:
        _store.close()
        _store = None


@app.get("/health")
def health() -> dict:
    return {
        "ok": True,
        "service": "agentstore-gateway",
        "version": project_version(),
        "store_path": str(STORE_PATH),
        "store_version": STORE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/v1/tools")
def list_tools() -> dict:
    return {"tools": [tool.descriptor() for tool in _get_tools().values()]}


@app.post("/v1/tools/{tool_name:path}")
async def call_tool(tool_name: str, req: ToolCallRequest) -> dict:
    tool = _get_tools().get(tool_name)
    if tool is None:
        raise HTTPException(status_code=404, detail={"error": "tool_not_found", "tool": tool_name})
    _validate_or_422(req.input, tool_name)
    try:
        result = await tool.handler(req.input)
    except StoreLockTimeout as exc:
        raise HTTPException(status_code=503, detail={"error": "store_busy", "message": str(exc)}) from exc
    return {"tool": tool_name, "result": result}

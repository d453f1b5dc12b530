from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from services.agent_store.operations import AgentOperations

ToolHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]

AGENT_CATEGORY = "agent"

SPAWN_SCHEMA = {
    "type": "object",
    "properties": {
        "agentType": {"type": "string", "description": "Type of agent to spawn"},
        "agentId": {"type": "string", "description": "Optional custom agent ID"},
        "config": {"type": "object", "description": "Agent configuration"},
        "domain": {"type": "string", "description": "Agent domain"},
    },
    "required": ["agentType"],
}

TERMINATE_SCHEMA = {
    "type": "object",
    "properties": {
        "agentId": {"type": "string", "description": "ID of agent to terminate"},
        "force": {"type": "boolean", "description": "Force immediate termination"},
    },
    "required": ["agentId"],
}

STATUS_SCHEMA = {
    "type": "object",
    "properties": {
        "agentId": {"type": "string", "description": "ID of agent"},
    },
    "required": ["agentId"],
}

LIST_SCHEMA = {
    "type": "object",
    "properties": {
        "status": {"type": "string", "description": "Filter by status"},
        "domain": {"type": "string", "description": "Filter by domain"},
        "includeTerminated": {"type": "boolean", "description": "Include terminated agents"},
    },
}

UPDATE_SCHEMA = {
    "type": "object",
    "properties": {
        "agentId": {"type": "string", "description": "ID of agent"},
        "status": {"type": "string", "description": "New status"},
        "health": {"type": "number", "description": "Health value (0-1)"},
        "taskCount": {"type": "number", "description": "Task count"},
        "config": {"type": "object", "description": "Config updates"},
    },
    "required": ["agentId"],
}


@dataclass(frozen=True)
class AgentTool:
    name: str
    description: str
    category: str
    input_schema: dict[str, Any]
    handler: ToolHandler

    def descriptor(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "inputSchema": self.input_schema,
        }


def build_agent_tools(operations: AgentOperations) -> dict[str, AgentTool]:
    async def spawn(payload: dict[str, Any]) -> dict[str, Any]:
        return await operations.spawn(
            payload.get("agentType"),
            agent_id=payload.get("agentId"),
            config=payload.get("config"),
            domain=payload.get("domain"),
        )

    async def terminate(payload: dict[str, Any]) -> dict[str, Any]:
        return await operations.terminate(payload.get("agentId"), force=bool(payload.get("force")))

    async def status(payload: dict[str, Any]) -> dict[str, Any]:
        return await operations.status(payload.get("agentId"))

    async def list_agents(payload: dict[str, Any]) -> dict[str, Any]:
        return await operations.list_agents(
            status=payload.get("status"),
            domain=payload.get("domain"),
            include_terminated=payload.get("includeTerminated"),
        )

    async def update(payload: dict[str, Any]) -> dict[str, Any]:
        return await operations.update(
            payload.get("agentId"),
            status=payload.get("status"),
            health=payload.get("health"),
            task_count=payload.get("taskCount"),
            config=payload.get("config"),
        )

    tools = [
        AgentTool("agent/spawn", "Spawn a new agent", AGENT_CATEGORY, SPAWN_SCHEMA, spawn),
        AgentTool("agent/terminate", "Terminate an agent", AGENT_CATEGORY, TERMINATE_SCHEMA, terminate),
        AgentTool("agent/status", "Get agent status", AGENT_CATEGORY, STATUS_SCHEMA, status),
        AgentTool("agent/list", "List all agents", AGENT_CATEGORY, LIST_SCHEMA, list_agents),
        AgentTool("agent/update", "Update agent status or config", AGENT_CATEGORY, UPDATE_SCHEMA, update),
    ]
    return {tool.name: tool for tool in tools}


def tool_schemas(tools: dict[str, AgentTool]) -> dict[str, dict[str, Any]]:
    return {name: tool.input_schema for name, tool in tools.items()}


__all__ = ["AGENT_CATEGORY", "AgentTool", "ToolHandler", "build_agent_tools", "tool_schemas"]

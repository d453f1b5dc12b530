from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from services.agent_store.records import (
    STATUS_TERMINATED,
    generate_agent_id,
    is_number,
    new_agent_record,
    public_view,
    summary_view,
    utc_timestamp,
)
from services.agent_store.store import AgentStore

logger = logging.getLogger("agentstore.operations")

AGENT_NOT_FOUND = "Agent not found"


class AgentOperations:
    """Lifecycle operations over the records held by one ``AgentStore``.

    Unknown agent ids are reported in the result mapping (``success: False``)
    rather than raised.
    """

    def __init__(self, store: AgentStore) -> None:
        self.store = store

    async def spawn(
        self,
        agent_type: str,
        agent_id: str | None = None,
        config: dict[str, Any] | None = None,
        domain: str | None = None,
    ) -> dict[str, Any]:
        resolved_id = agent_id or generate_agent_id()
        record = new_agent_record(resolved_id, agent_type, config=config, domain=domain)
        async with self.store.mutate() as session:
            if resolved_id in session.agents:
                logger.info("Replacing existing agent record %s", resolved_id)
            session.agents[resolved_id] = record
            session.mark_dirty()
        logger.info("Spawned agent %s (type=%s)", resolved_id, agent_type)
        return {
            "success": True,
            "agentId": resolved_id,
            "agentType": record["agentType"],
            "status": "spawned",
            "createdAt": record["createdAt"],
        }

    async def terminate(self, agent_id: str, force: bool = False) -> dict[str, Any]:
        # force has no effect: termination is always immediate
        async with self.store.mutate() as session:
            record = session.agents.get(agent_id)
            if record is None:
                return _not_found(agent_id)
            record["status"] = STATUS_TERMINATED
            session.mark_dirty()
        logger.info("Terminated agent %s", agent_id)
        return {
            "success": True,
            "agentId": agent_id,
            "terminated": True,
            "terminatedAt": utc_timestamp(),
        }

    async def status(self, agent_id: str) -> dict[str, Any]:
        record = self.store.load().document["agents"].get(agent_id)
        if record is None:
            logger.debug("Status lookup for unknown agent %s", agent_id)
            return {"agentId": agent_id, "status": "not_found", "error": AGENT_NOT_FOUND}
        return public_view(record)

    async def list_agents(
        self,
        status: str | None = None,
        domain: str | None = None,
        include_terminated: bool | None = None,
    ) -> dict[str, Any]:
        agents = list(self.store.load().document["agents"].values())
        if status:
            agents = [a for a in agents if a.get("status") == status]
        elif not include_terminated:
            agents = [a for a in agents if a.get("status") != STATUS_TERMINATED]
        if domain:
            agents = [a for a in agents if a.get("domain") == domain]
        return {
            "agents": [public_view(a) for a in agents],
            "total": len(agents),
            "filters": {
                "status": status,
                "domain": domain,
                "includeTerminated": include_terminated,
            },
        }

    async def update(
        self,
        agent_id: str,
        status: str | None = None,
        health: Any = None,
        task_count: Any = None,
        config: Any = None,
    ) -> dict[str, Any]:
        async with self.store.mutate() as session:
            record = session.agents.get(agent_id)
            if record is None:
                return _not_found(agent_id)
            if status:
                record["status"] = status
            if is_number(health):
                record["health"] = health
            if is_number(task_count):
                record["taskCount"] = task_count
            if config and isinstance(config, Mapping):
                existing = record.get("config")
                if not isinstance(existing, Mapping):
                    existing = {}
                record["config"] = {**existing, **config}
            session.mark_dirty()
        logger.info("Updated agent %s", agent_id)
        return {
            "success": True,
            "agentId": agent_id,
            "updated": True,
            "agent": summary_view(record),
        }


def _not_found(agent_id: str) -> dict[str, Any]:
    logger.info("Agent %s not found", agent_id)
    return {"success": False, "agentId": agent_id, "error": AGENT_NOT_FOUND}


__all__ = ["AGENT_NOT_FOUND", "AgentOperations"]

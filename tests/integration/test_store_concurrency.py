from __future__ import annotations

import asyncio
from time import perf_counter

from services.agent_store import AgentOperations, AgentStore


def test_concurrent_spawns_through_one_handle_are_all_persisted(tmp_path) -> None:
    ops = AgentOperations(AgentStore(tmp_path / "agents" / "store.json"))

    async def scenario() -> list[dict]:
        return await asyncio.gather(*(ops.spawn("worker", agent_id=f"w-{idx}") for idx in range(20)))

    results = asyncio.run(scenario())
    assert all(result["success"] for result in results)
    agents = ops.store.load().document["agents"]
    assert sorted(agents) == sorted(f"w-{idx}" for idx in range(20))


def test_two_handles_on_one_file_do_not_lose_updates(tmp_path) -> None:
    path = tmp_path / "agents" / "store.json"
    first = AgentOperations(AgentStore(path))
    second = AgentOperations(AgentStore(path))

    async def scenario() -> None:
        calls = []
        for idx in range(10):
            ops = first if idx % 2 == 0 else second
            calls.append(ops.spawn("worker", agent_id=f"h-{idx}"))
        await asyncio.gather(*calls)
        await asyncio.gather(
            first.update("h-0", config={"a": 1}),
            second.update("h-0", config={"b": 2}),
        )

    asyncio.run(scenario())
    document = AgentStore(path).load().document
    assert len(document["agents"]) == 10
    assert document["agents"]["h-0"]["config"] == {"a": 1, "b": 2}


def test_fifty_lifecycle_cycles_within_threshold(tmp_path) -> None:
    ops = AgentOperations(AgentStore(tmp_path / "agents" / "store.json"))

    async def scenario() -> dict:
        for idx in range(50):
            await ops.spawn("worker", agent_id=f"p-{idx}", domain="perf")
            await ops.update(f"p-{idx}", task_count=idx)
            if idx % 2:
                await ops.terminate(f"p-{idx}")
        return await ops.list_agents(domain="perf")

    start = perf_counter()
    listing = asyncio.run(scenario())
    elapsed = perf_counter() - start
    assert listing["total"] == 25
    assert elapsed < 15.0

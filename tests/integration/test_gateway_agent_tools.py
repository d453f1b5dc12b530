from __future__ import annotations

from datetime import datetime

from fastapi.testclient import TestClient

from services.gateway.app import main as gateway_main


def _client(tmp_path, monkeypatch) -> TestClient:
    monkeypatch.setattr(gateway_main, "STORE_PATH", tmp_path / ".agentstore" / "agents" / "store.json")
    monkeypatch.setattr(gateway_main, "_store", None)
    return TestClient(gateway_main.app)


def test_health_reports_store_location(tmp_path, monkeypatch) -> None:
    with _client(tmp_path, monkeypatch) as client:
        res = client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    assert body["store_version"] == "3.0.0"
    assert body["store_path"].endswith("store.json")
    assert datetime.fromisoformat(body["timestamp"]).tzinfo is not None


def test_lists_agent_tools(tmp_path, monkeypatch) -> None:
    with _client(tmp_path, monkeypatch) as client:
        res = client.get("/v1/tools")
    assert res.status_code == 200
    names = [tool["name"] for tool in res.json()["tools"]]
    assert names == ["agent/spawn", "agent/terminate", "agent/status", "agent/list", "agent/update"]
    assert res.json()["tools"][0]["inputSchema"]["required"] == ["agentType"]


def test_agent_lifecycle_over_http(tmp_path, monkeypatch) -> None:
    with _client(tmp_path, monkeypatch) as client:
        spawned = client.post("/v1/tools/agent/spawn", json={"input": {"agentType": "worker", "agentId": "a1"}})
        assert spawned.status_code == 200
        assert spawned.json() == {
            "tool": "agent/spawn",
            "result": {
                "success": True,
                "agentId": "a1",
                "agentType": "worker",
                "status": "spawned",
                "createdAt": spawned.json()["result"]["createdAt"],
            },
        }

        updated = client.post(
            "/v1/tools/agent/update",
            json={"input": {"agentId": "a1", "status": "busy", "taskCount": 2, "config": {"x": 1}}},
        )
        assert updated.status_code == 200
        assert updated.json()["result"]["agent"] == {"agentId": "a1", "status": "busy", "health": 1.0, "taskCount": 2}

        terminated = client.post("/v1/tools/agent/terminate", json={"input": {"agentId": "a1"}})
        assert terminated.json()["result"]["terminated"] is True

        listing = client.post("/v1/tools/agent/list", json={"input": {}})
        assert listing.json()["result"]["total"] == 0

        listing_all = client.post("/v1/tools/agent/list", json={"input": {"includeTerminated": True}})
        assert [a["agentId"] for a in listing_all.json()["result"]["agents"]] == ["a1"]

    assert (tmp_path / ".agentstore" / "agents" / "store.json").exists()


def test_not_found_is_a_reported_result_not_an_http_error(tmp_path, monkeypatch) -> None:
    with _client(tmp_path, monkeypatch) as client:
        res = client.post("/v1/tools/agent/terminate", json={"input": {"agentId": "ghost"}})
        status = client.post("/v1/tools/agent/status", json={"input": {"agentId": "ghost"}})
    assert res.status_code == 200
    assert res.json()["result"] == {"success": False, "agentId": "ghost", "error": "Agent not found"}
    assert status.json()["result"]["status"] == "not_found"


def test_schema_invalid_input_is_rejected(tmp_path, monkeypatch) -> None:
    with _client(tmp_path, monkeypatch) as client:
        missing = client.post("/v1/tools/agent/spawn", json={"input": {}})
        wrong_type = client.post("/v1/tools/agent/update", json={"input": {"agentId": "a1", "health": "high"}})
    assert missing.status_code == 422
    assert missing.json()["detail"]["error"] == "schema_validation_failed"
    assert missing.json()["detail"]["issues"][0]["path"] == "$"
    assert wrong_type.status_code == 422
    assert wrong_type.json()["detail"]["issues"][0]["path"] == "health"
    assert not (tmp_path / ".agentstore").exists()


def test_unknown_tool_returns_404(tmp_path, monkeypatch) -> None:
    with _client(tmp_path, monkeypatch) as client:
        res = client.post("/v1/tools/agent/explode", json={"input": {}})
    assert res.status_code == 404
    assert res.json()["detail"] == {"error": "tool_not_found", "tool": "agent/explode"}

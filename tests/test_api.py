from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
from fastapi.testclient import TestClient

from toolgate.app import create_app
from toolgate.envelope import text_result
from toolgate.ledger import Ledger
from toolgate.registry import ToolRegistry, build_registry
from toolgate.tools import AnalyzeVolumeTool, HelloTool


def test_health_ok(client: TestClient) -> None:
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_lists_all_tools(client: TestClient) -> None:
    res = client.get("/tools")
    assert res.status_code == 200
    tools = res.json()["tools"]
    assert [t["name"] for t in tools] == [
        "hello",
        "get_current_time",
        "clean_trash",
        "list_directory",
        "analyze_volume",
    ]
    hello = tools[0]
    assert hello["inputSchema"]["required"] == ["name"]
    assert "access-control-allow-origin" not in res.headers


def test_every_tool_succeeds_with_required_args(config, sample_dir: Path) -> None:  # noqa: ANN001
    def volume_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"total": 3})

    registry = build_registry(config)
    tools = [registry.get(name) for name in registry.names if name != "analyze_volume"]
    tools.append(
        AnalyzeVolumeTool(
            url=config.volume_url,
            token=config.volume_token,
            transport=httpx.MockTransport(volume_handler),
        )
    )
    args = {"hello": {"name": "Ada"}, "list_directory": {"path": str(sample_dir)}}

    with TestClient(create_app(config, registry=ToolRegistry(tools))) as client:
        for tool in tools:
            name = tool.definition.name
            res = client.post("/tools", json={"toolName": name, "args": args.get(name, {})})
            assert res.status_code == 200, (name, res.json())
            body = res.json()
            assert len(body["content"]) >= 1
            assert "isError" not in body


def test_missing_tool_name_is_400(client: TestClient) -> None:
    res = client.post("/tools", json={"args": {}})
    assert res.status_code == 400
    body = res.json()
    assert "toolName" in body["error"]
    assert body["isError"] is True
    assert body["content"][0]["text"] == f"❌ {body['error']}"


def test_malformed_body_is_400(client: TestClient) -> None:
    res = client.post("/tools", content=b"not json", headers={"Content-Type": "application/json"})
    assert res.status_code == 400


def test_unknown_tool_is_404(client: TestClient) -> None:
    res = client.post("/tools", json={"toolName": "launch_rockets"})
    assert res.status_code == 404
    assert "launch_rockets" in res.json()["error"]
    assert client.get("/results").json()["results"] == []


def test_missing_required_arg_is_400(client: TestClient) -> None:
    res = client.post("/tools", json={"toolName": "hello", "args": {}})
    assert res.status_code == 400
    assert res.json()["error"] == "Missing required parameter: name"

    res = client.post("/tools", json={"toolName": "list_directory"})
    assert res.status_code == 400
    assert "path" in res.json()["error"]


def test_execution_error_is_500(client: TestClient, tmp_path: Path) -> None:
    res = client.post(
        "/tools",
        json={"toolName": "list_directory", "args": {"path": str(tmp_path / "missing")}},
    )
    assert res.status_code == 500
    body = res.json()
    assert body["isError"] is True
    assert body["content"][0]["text"].startswith("❌")


def test_list_directory_over_http_encodes_functions(client: TestClient, sample_dir: Path) -> None:
    res = client.post("/tools", json={"toolName": "list_directory", "args": {"path": str(sample_dir)}})
    assert res.status_code == 200
    body = res.json()

    assert [i["type"] for i in body["items"]] == ["folder", "folder", "file", "file", "file"]
    histogram = body["chartConfigs"][1]
    assert histogram["dataSource"]["transform"]["__function__"] is True
    assert all(b["filter"]["__function__"] is True for b in histogram["options"]["bins"])


def test_invocation_is_recorded_and_listed_first(client: TestClient, config) -> None:  # noqa: ANN001
    first = client.post("/tools", json={"toolName": "hello", "args": {"name": "Ada"}})
    second = client.post("/tools", json={"toolName": "hello", "args": {"name": "Grace"}})
    assert first.status_code == second.status_code == 200

    results = client.get("/results").json()["results"]
    assert len(results) == 2

    record = json.loads((config.results_dir / results[0]["filename"]).read_text(encoding="utf-8"))
    assert record["toolName"] == "hello"
    assert record["args"] == {"name": "Grace"}
    assert record["result"] == second.json()
    assert results[0]["filename"].startswith("hello_")


def test_failed_invocations_are_recorded(client: TestClient, config) -> None:  # noqa: ANN001
    client.post("/tools", json={"toolName": "hello", "args": {}})
    results = client.get("/results").json()["results"]
    assert len(results) == 1
    record = json.loads((config.results_dir / results[0]["filename"]).read_text(encoding="utf-8"))
    assert record["result"]["isError"] is True


def test_persistence_failure_keeps_response(config, tmp_path: Path) -> None:  # noqa: ANN001
    blocker = tmp_path / "blocked"
    blocker.write_text("a file where the results dir should be", encoding="utf-8")

    with TestClient(create_app(config)) as ok_client:
        ok = ok_client.post("/tools", json={"toolName": "hello", "args": {"name": "Ada"}})
    with TestClient(create_app(config, ledger=Ledger(blocker))) as broken_client:
        broken = broken_client.post("/tools", json={"toolName": "hello", "args": {"name": "Ada"}})

    assert broken.status_code == ok.status_code == 200
    assert broken.json() == ok.json()


def test_results_failure_is_500(config, tmp_path: Path) -> None:  # noqa: ANN001
    class BrokenLedger(Ledger):
        def list(self):  # noqa: ANN202
            raise PermissionError("denied")

    with TestClient(create_app(config, ledger=BrokenLedger(tmp_path))) as client:
        res = client.get("/results")
    assert res.status_code == 500
    assert "denied" in res.json()["error"]


def test_unencodable_result_is_500_envelope(config) -> None:  # noqa: ANN001
    class BuiltinItemsTool(HelloTool):
        def execute(self, args):  # noqa: ANN001, ANN202
            return text_result("with builtin", items=[{"key": len}])

    with TestClient(create_app(config, registry=ToolRegistry([BuiltinItemsTool()]))) as client:
        res = client.post("/tools", json={"toolName": "hello", "args": {"name": "Ada"}})
        results = client.get("/results").json()["results"]

    assert res.status_code == 500
    body = res.json()
    assert body["isError"] is True
    assert body["content"][0]["text"].startswith("❌")
    assert len(results) == 1


def test_volume_timeout_is_408(config) -> None:  # noqa: ANN001
    async def slow(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json={})

    tool = AnalyzeVolumeTool(
        url=config.volume_url,
        token=config.volume_token,
        timeout_seconds=0.05,
        transport=httpx.MockTransport(slow),
    )
    with TestClient(create_app(config, registry=ToolRegistry([tool]))) as client:
        res = client.post("/tools", json={"toolName": "analyze_volume"})

    assert res.status_code == 408
    body = res.json()
    assert body["isError"] is True
    assert "timed out" in body["error"]


def test_volume_upstream_failure_is_500(config) -> None:  # noqa: ANN001
    tool = AnalyzeVolumeTool(
        url=config.volume_url,
        token=config.volume_token,
        transport=httpx.MockTransport(lambda request: httpx.Response(502)),
    )
    with TestClient(create_app(config, registry=ToolRegistry([tool]))) as client:
        res = client.post("/tools", json={"toolName": "analyze_volume"})

    assert res.status_code == 500
    assert res.json()["isError"] is True


def test_volume_variant_advertises_one_tool_with_cors(config) -> None:  # noqa: ANN001
    from dataclasses import replace

    volume_config = replace(config, variant="volume")
    with TestClient(create_app(volume_config)) as client:
        res = client.get("/tools")
        assert [t["name"] for t in res.json()["tools"]] == ["analyze_volume"]
        assert res.headers["access-control-allow-origin"] == "*"

        pre = client.options("/tools")
        assert pre.status_code == 200
        assert pre.content == b""
        assert pre.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
        assert pre.headers["access-control-allow-headers"] == "Content-Type"

        res = client.post("/tools", json={"toolName": "hello", "args": {"name": "Ada"}})
        assert res.status_code == 404
        assert res.headers["access-control-allow-origin"] == "*"


def test_registry_rejects_duplicates() -> None:
    import pytest

    with pytest.raises(ValueError):
        ToolRegistry([HelloTool(), HelloTool()])

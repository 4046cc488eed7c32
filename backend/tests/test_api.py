import json

import pytest

from backend.app.loaders.flow_loader import load_flow_from_file, seed_flow_if_empty

from flowscaffold.graph.flow_schema import Flow


def _add(client, label, parent=None):
    body = {"label": label}
    if parent:
        body["parentNodeId"] = parent
    return client.post("/flow/node", json=body)


# -------------------- Flow --------------------


def test_read_empty_flow(client):
    response = client.get("/flow/")

    assert response.status_code == 200
    assert response.json() == {"nodes": [], "edges": []}


def test_save_flow_and_skip_snapshot(client, orchestrator, small_flow):
    response = client.post("/flow/?skipSnapshot=true", json=small_flow.to_dict())
    assert response.json() == {"success": True}
    assert orchestrator.status().snapshot_count == 0

    client.post("/flow/", json=small_flow.with_edges(()).to_dict())
    assert orchestrator.status().snapshot_count == 1
    assert client.get("/flow/").json()["edges"] == []


def test_posting_rendered_flow_back_keeps_synthetic_edges_out(client, orchestrator):
    _add(client, "Home")
    _add(client, "Login", parent="home")
    _add(client, "Signup", parent="home")
    client.post("/flow/group", json={"memberIds": ["login", "signup"]})

    rendered = client.get("/flow/").json()
    assert any(e.get("isSyntheticGroupEdge") for e in rendered["edges"])

    assert client.post("/flow/", json=rendered).json() == {"success": True}

    assert not any(e.is_synthetic_group_edge for e in orchestrator.read_flow().edges)


# -------------------- Nodes --------------------


def test_create_node_returns_id_and_visible_flow(client):
    _add(client, "Home")
    response = _add(client, "Login / Auth!", parent="Home")
    body = response.json()

    assert response.status_code == 200
    assert body["success"] is True
    assert body["nodeId"] == "login_auth"
    assert [n["id"] for n in body["flow"]["nodes"]] == ["home", "login_auth"]
    assert len(body["flow"]["edges"]) == 1


def test_create_node_validation_error_is_400(client):
    response = client.post("/flow/node", json={})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "label is required"}


def test_drag_is_recorded_with_its_own_origin(client, orchestrator):
    _add(client, "Home")

    client.put("/flow/node/home", json={"position": {"x": 10, "y": 20}})
    assert orchestrator.history().current().origin == "ui.drag"

    client.put("/flow/node/home", json={"label": "Start"})
    assert orchestrator.history().current().origin == "ui.action"


def test_delete_node(client):
    _add(client, "Home")
    _add(client, "About", parent="home")

    body = client.delete("/flow/node/home").json()

    assert [n["id"] for n in body["flow"]["nodes"]] == ["about"]
    assert body["flow"]["edges"] == []
    assert client.delete("/flow/node/home").status_code == 400


def test_collapse_subtree(client, orchestrator):
    _add(client, "Home")
    _add(client, "About", parent="home")

    body = client.put("/flow/node/home/collapse", json={"collapsed": True}).json()
    about = [n for n in body["flow"]["nodes"] if n["id"] == "about"][0]

    assert about["hidden"] is True
    assert about["subtreeHidden"] is True
    assert orchestrator.history().current().origin == "ui.subtree"

    bad = client.put("/flow/node/home/collapse", json={"collapsed": "yes"})
    assert bad.status_code == 400
    assert "boolean" in bad.json()["error"]


# -------------------- Edges --------------------


def test_edge_lifecycle(client):
    _add(client, "Home")
    _add(client, "About")

    created = client.post(
        "/flow/edge", json={"sourceNodeId": "home", "targetNodeId": "about"}
    ).json()
    edge_id = created["edgeId"]

    updated = client.put(f"/flow/edge/{edge_id}", json={"label": "go"}).json()
    assert updated["flow"]["edges"][0]["label"] == "go"

    deleted = client.delete(f"/flow/edge/{edge_id}").json()
    assert deleted["flow"]["edges"] == []

    missing = client.delete(f"/flow/edge/{edge_id}")
    assert missing.status_code == 400
    assert missing.json()["error"] == f"Edge {edge_id} not found"


# -------------------- Groups --------------------


def test_group_lifecycle(client):
    _add(client, "Home")
    _add(client, "Login", parent="home")
    _add(client, "Signup", parent="home")

    created = client.post("/flow/group", json={"memberIds": ["login", "signup"]}).json()
    group_id = created["groupId"]
    synthetic = [e for e in created["flow"]["edges"] if e.get("isSyntheticGroupEdge")]
    assert [(e["source"], e["target"]) for e in synthetic] == [("home", group_id)]

    expanded = client.put(f"/flow/group/{group_id}/expand", json={"expand": True}).json()
    nodes = {n["id"]: n for n in expanded["flow"]["nodes"]}
    assert nodes["login"]["hidden"] is False
    assert nodes[group_id]["hidden"] is True

    ungrouped = client.delete(f"/flow/group/{group_id}").json()
    assert group_id not in [n["id"] for n in ungrouped["flow"]["nodes"]]

    assert client.delete(f"/flow/group/{group_id}").status_code == 400


def test_create_group_rejects_single_member(client):
    _add(client, "Home")

    response = client.post("/flow/group", json={"memberIds": ["home"]})

    assert response.status_code == 400
    assert response.json()["error"] == "At least 2 memberIds are required"


# -------------------- Layout --------------------


def test_auto_layout_reports_did_change(client):
    _add(client, "Home")
    _add(client, "About", parent="home")

    first = client.post("/flow/auto-layout").json()
    second = client.post("/flow/auto-layout").json()

    assert first["tool"] == "autoLayout"
    assert first["didChange"] is True
    assert second["didChange"] is False


# -------------------- History --------------------


def test_undo_redo_and_status(client):
    _add(client, "Home")
    _add(client, "About", parent="home")

    status = client.get("/flow/history-status").json()
    assert status["canUndo"] is True
    assert status["canRedo"] is False
    assert status["snapshotCount"] == 2
    assert status["currentIndex"] == 2

    undone = client.post("/flow/undo").json()
    assert undone["success"] is True
    assert [n["id"] for n in undone["flow"]["nodes"]] == ["home"]

    redone = client.post("/flow/redo").json()
    assert [n["id"] for n in redone["flow"]["nodes"]] == ["home", "about"]

    assert client.post("/flow/redo").json() == {"success": False, "message": "Nothing to redo"}


# -------------------- Agent batches --------------------


def test_tool_batch(client, orchestrator):
    response = client.post(
        "/flow/tools",
        json={
            "toolCalls": [
                {"name": "addNode", "params": {"label": "Home"}},
                {"name": "bogus"},
                {"name": "addNode", "params": {"label": "About", "parentNodeId": "Home"}},
            ]
        },
    )
    body = response.json()

    assert response.status_code == 200
    assert body["success"] is False
    assert body["committed"] is True
    assert body["snapshotPushed"] is True
    assert body["execution"][1]["error"] == "Unknown tool: bogus"
    assert [n["id"] for n in body["updatedFlow"]["nodes"]] == ["home", "about"]
    assert orchestrator.history().current().origin == "llm.tool"


def test_unexpected_error_is_500(client, orchestrator, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("nope")

    monkeypatch.setattr(orchestrator, "read_visible_flow", boom)

    response = client.get("/flow/")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to load flow data"}


# -------------------- Seed loader --------------------


def test_seed_flow_if_empty(tmp_path, orchestrator, small_flow):
    seed = tmp_path / "seed.json"
    seed.write_text(json.dumps(small_flow.to_dict()), encoding="utf-8")

    assert seed_flow_if_empty(orchestrator=orchestrator, seed_path=seed) is True
    assert orchestrator.read_flow() == small_flow
    assert orchestrator.status().snapshot_count == 0

    assert seed_flow_if_empty(orchestrator=orchestrator, seed_path=seed) is False
    assert seed_flow_if_empty(orchestrator=orchestrator, seed_path=tmp_path / "none.json") is False


def test_load_flow_rejects_other_documents(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"nodes": []}), encoding="utf-8")

    with pytest.raises(ValueError, match="not a flow document"):
        load_flow_from_file(path)


def test_load_flow_accepts_legacy_nesting(tmp_path):
    path = tmp_path / "legacy.json"
    path.write_text(
        json.dumps(
            {
                "nodes": [{"id": "a", "type": "default", "data": {"label": "Alpha"}}],
                "edges": [],
            }
        ),
        encoding="utf-8",
    )

    assert load_flow_from_file(path) == Flow.from_dict(
        {"nodes": [{"id": "a", "label": "Alpha"}], "edges": []}
    )

import pytest

from flowscaffold.graph.flow_schema import Flow
from flowscaffold.orchestrator.batch import BatchOrchestrator, ToolCall
from flowscaffold.storage.flow_repository import InMemoryFlowRepository


class BrokenReadRepository(InMemoryFlowRepository):
    def read(self, flow_id):
        raise IOError("disk on fire")


class BrokenWriteRepository(InMemoryFlowRepository):
    def write(self, flow_id, flow):
        raise IOError("read-only filesystem")


class SwitchableWriteRepository(InMemoryFlowRepository):
    def __init__(self):
        super().__init__()
        self.fail_writes = False

    def write(self, flow_id, flow):
        if self.fail_writes:
            raise IOError("read-only filesystem")
        super().write(flow_id, flow)


BUILD_CALLS = [
    {"name": "addNode", "params": {"label": "Home"}},
    {"name": "addNode", "params": {"label": "Login", "parentNodeId": "home"}},
    {"name": "addNode", "params": {"label": "Dashboard", "parentNodeId": "login"}},
]


def test_batch_commits_once_with_one_snapshot(orchestrator, repository):
    batch = orchestrator.run_batch(BUILD_CALLS)

    assert batch.all_succeeded
    assert batch.committed and batch.snapshot_pushed
    assert repository.write_count == 1
    assert repository.read("default:main") == batch.flow

    snapshots = orchestrator.history().snapshots()
    assert [s.origin for s in snapshots] == ["llm.tool"]
    assert snapshots[0].flow == batch.flow


def test_seeded_history_gains_one_snapshot_per_batch(orchestrator):
    orchestrator.initialize_history()

    orchestrator.run_batch(BUILD_CALLS)
    orchestrator.run_batch([{"name": "addNode", "params": {"label": "About"}}])

    snapshots = orchestrator.history().snapshots()
    assert [s.origin for s in snapshots] == ["init", "llm.tool", "llm.tool"]
    assert snapshots[0].flow == Flow.empty()


def test_failed_operation_does_not_abort_batch(orchestrator):
    batch = orchestrator.run_batch(
        [
            ToolCall("addNode", {"label": "Home"}),
            ToolCall("addEdge", {"sourceNodeId": "home", "targetNodeId": "ghost"}),
            ToolCall("addNode", {"label": "About", "parentNodeId": "home"}),
        ]
    )

    assert [r.success for r in batch.results] == [True, False, True]
    assert batch.failures[0].error == "Target node ghost not found"
    assert batch.committed
    assert not batch.all_succeeded
    assert batch.flow.node_ids() == ("home", "about")

    body = batch.to_dict()
    assert body["success"] is False
    assert body["execution"][1] == {
        "success": False,
        "tool": "addEdge",
        "error": "Target node ghost not found",
    }


def test_all_failing_batch_writes_nothing(orchestrator, repository):
    batch = orchestrator.run_batch([{"name": "deleteNode", "params": {"nodeId": "x"}}])

    assert not batch.committed
    assert repository.write_count == 0
    assert orchestrator.status().snapshot_count == 0


def test_noop_batch_writes_nothing(orchestrator, repository):
    batch = orchestrator.run_batch([{"name": "autoLayout"}])

    assert batch.results[0].did_change is False
    assert repository.write_count == 0


def test_undo_restores_without_new_snapshot(orchestrator, repository):
    orchestrator.initialize_history()
    orchestrator.run_batch(BUILD_CALLS)

    result = orchestrator.undo()

    assert result.success and result.restored
    assert repository.read("default:main") == Flow.empty()
    assert repository.write_count == 2
    status = orchestrator.status()
    assert status.snapshot_count == 2
    assert status.can_undo is False and status.can_redo is True

    redone = orchestrator.redo()
    assert redone.success
    assert repository.read("default:main").node_ids() == ("home", "login", "dashboard")


def test_nothing_to_undo(orchestrator, repository):
    result = orchestrator.undo()

    assert not result.success
    assert result.error == "Nothing to undo"
    assert repository.write_count == 0


def test_mutation_after_undo_truncates_redo(orchestrator):
    orchestrator.initialize_history()
    orchestrator.run_batch(BUILD_CALLS)
    orchestrator.undo()

    orchestrator.run_tool("addNode", {"label": "Fresh"})

    status = orchestrator.status()
    assert status.can_redo is False
    assert status.snapshot_count == 2
    assert orchestrator.history().current().origin == "ui.action"


def test_mutation_after_undo_in_same_batch_is_snapshotted(orchestrator):
    orchestrator.initialize_history()
    orchestrator.run_batch(BUILD_CALLS)

    batch = orchestrator.run_batch(
        [{"name": "undo"}, {"name": "addNode", "params": {"label": "Fresh"}}]
    )

    assert batch.snapshot_pushed
    assert batch.flow.node_ids() == ("fresh",)


def test_retry_sees_previous_progress(orchestrator):
    first = orchestrator.run_batch(
        [
            {"name": "addNode", "params": {"label": "Home"}},
            {"name": "addNode", "params": {"label": "Login", "parentNodeId": "Portal"}},
        ]
    )
    assert first.results[1].error == "Parent node Portal not found"

    retry = orchestrator.run_batch(
        [{"name": "addNode", "params": {"label": "Login", "parentNodeId": "Home"}}]
    )

    assert retry.all_succeeded
    assert retry.flow.node_ids() == ("home", "login")
    assert orchestrator.status().snapshot_count == 2


def test_flow_ids_are_independent(orchestrator):
    orchestrator.run_batch(BUILD_CALLS, flow_id="project:a")

    assert orchestrator.read_flow("project:b") == Flow.empty()
    assert orchestrator.status("project:b").snapshot_count == 0
    assert orchestrator.status("project:a").snapshot_count == 1


def test_read_failure_is_reported_per_operation():
    orchestrator = BatchOrchestrator(repository=BrokenReadRepository())

    batch = orchestrator.run_batch(BUILD_CALLS[:2])

    assert batch.error == "disk on fire"
    assert [r.error for r in batch.results] == ["disk on fire", "disk on fire"]
    assert not batch.committed


def test_write_failure_is_reported():
    orchestrator = BatchOrchestrator(repository=BrokenWriteRepository())

    result = orchestrator.run_tool("addNode", {"label": "Home"})

    assert not result.success
    assert result.error == "read-only filesystem"
    assert orchestrator.status().snapshot_count == 0


@pytest.mark.parametrize("skip, expected_count", [(True, 0), (False, 1)])
def test_save_flow(orchestrator, repository, small_flow, skip, expected_count):
    pushed = orchestrator.save_flow(small_flow, skip_snapshot=skip)

    assert pushed is (not skip)
    assert repository.read("default:main") == small_flow
    assert orchestrator.status().snapshot_count == expected_count


def test_initialize_history_seeds_stored_flow(orchestrator, small_flow):
    orchestrator.save_flow(small_flow, skip_snapshot=True)

    status = orchestrator.initialize_history()

    assert status.snapshot_count == 1
    assert orchestrator.history().current().flow == small_flow


def test_read_visible_flow_applies_group_visibility(orchestrator):
    orchestrator.run_batch(
        BUILD_CALLS + [{"name": "createGroup", "params": {"memberIds": ["login", "dashboard"]}}]
    )

    flow = orchestrator.read_visible_flow()

    assert flow.get_node("login").hidden is True
    assert any(e.is_synthetic_group_edge for e in flow.edges)


def test_failed_undo_write_leaves_history_cursor_in_place():
    repository = SwitchableWriteRepository()
    orchestrator = BatchOrchestrator(repository=repository)
    orchestrator.initialize_history()
    built = orchestrator.run_batch(BUILD_CALLS).flow

    repository.fail_writes = True
    result = orchestrator.undo()

    assert not result.success
    assert result.error == "read-only filesystem"
    assert repository.read("default:main") == built
    status = orchestrator.status()
    assert status.can_undo is True
    assert status.can_redo is False
    assert orchestrator.history().current().flow == built

    repository.fail_writes = False
    orchestrator.run_tool("addNode", {"label": "Fresh"})

    flows = [s.flow for s in orchestrator.history().snapshots()]
    assert flows[:2] == [Flow.empty(), built]
    assert flows[2].node_ids() == ("home", "login", "dashboard", "fresh")


def test_saving_a_rendered_flow_stores_no_synthetic_edges(orchestrator, repository):
    orchestrator.run_batch(
        BUILD_CALLS + [{"name": "createGroup", "params": {"memberIds": ["login", "dashboard"]}}]
    )
    rendered = orchestrator.read_visible_flow()
    synthetic = [e.id for e in rendered.edges if e.is_synthetic_group_edge]
    assert synthetic

    orchestrator.save_flow(rendered)

    stored = repository.read("default:main")
    assert not any(e.is_synthetic_group_edge for e in stored.edges)
    assert not any(e.is_synthetic_group_edge for e in orchestrator.history().current().flow.edges)
    rerendered = orchestrator.read_visible_flow()
    assert [e.id for e in rerendered.edges if e.is_synthetic_group_edge] == synthetic

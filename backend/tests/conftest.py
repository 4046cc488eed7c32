from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from contextlib import asynccontextmanager

from backend.app.main import create_app
from backend.app.config import AppConfig
from backend.app.dependencies import get_orchestrator

from flowscaffold.graph.flow_schema import Flow, Position
from flowscaffold.mutation.executor import MutationExecutor
from flowscaffold.orchestrator.batch import BatchOrchestrator
from flowscaffold.storage.flow_repository import InMemoryFlowRepository

from backend.tests.factories import make_edge, make_node


@pytest.fixture()
def executor() -> MutationExecutor:
    return MutationExecutor()


@pytest.fixture()
def repository() -> InMemoryFlowRepository:
    return InMemoryFlowRepository()


@pytest.fixture()
def orchestrator(repository: InMemoryFlowRepository) -> BatchOrchestrator:
    return BatchOrchestrator(repository=repository)


@pytest.fixture()
def small_flow() -> Flow:
    """
    a -> b -> c, plus d -> b, all plain nodes laid out on a line.
    """
    return Flow.of(
        [
            make_node("a", position=Position(0, 0)),
            make_node("b", position=Position(200, 0)),
            make_node("c", position=Position(400, 0)),
            make_node("d", position=Position(0, 100)),
        ],
        [
            make_edge("a", "b"),
            make_edge("b", "c"),
            make_edge("d", "b"),
        ],
    )


@pytest.fixture()
def client(orchestrator: BatchOrchestrator):
    @asynccontextmanager
    async def _no_lifespan(_: FastAPI):
        yield

    app = create_app(AppConfig())
    app.router.lifespan_context = _no_lifespan

    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

from functools import lru_cache
import logging

from flowscaffold.storage.flow_repository import (
    FlowRepository,
    InMemoryFlowRepository,
    JsonFileFlowRepository,
)
from flowscaffold.mutation.executor import MutationExecutor
from flowscaffold.history.history_store import HistoryRegistry
from flowscaffold.orchestrator.batch import BatchOrchestrator

from backend.app.config import AppConfig


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


@lru_cache
def get_repository() -> FlowRepository:
    storage = get_config().scaffold.storage

    if storage.backend == "json":
        repository: FlowRepository = JsonFileFlowRepository(storage.data_dir)
    else:
        repository = InMemoryFlowRepository()

    logging.getLogger("flowscaffold.startup").info(
        "[startup] storage backend=%s", storage.backend
    )
    return repository


@lru_cache
def get_orchestrator() -> BatchOrchestrator:
    config = get_config().scaffold

    return BatchOrchestrator(
        repository=get_repository(),
        executor=MutationExecutor(layout_config=config.layout),
        histories=HistoryRegistry(config.history),
        config=config,
    )

# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from taskservice.app.config import Settings
from taskservice.main import create_app
from fakes import InMemoryTaskRepository


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        task_repo_backend="file",
        workspace_root=str(tmp_path / "data"),
        database_url=f"sqlite:///{tmp_path / 'tasks.db'}",
        log_level="WARNING",
    )


@pytest.fixture()
def repo() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture()
def client(settings: Settings, repo: InMemoryTaskRepository) -> TestClient:
    return TestClient(create_app(settings, repository=repo))


@pytest.fixture()
def new_task():
    def _payload(**overrides):
        payload = {
            "title": "Buy milk",
            "description": "2% milk, 1 gallon",
            "status": "pending",
        }
        payload.update(overrides)
        return payload

    return _payload

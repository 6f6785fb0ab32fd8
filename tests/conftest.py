"""
Pytest configuration and fixtures.

Every test gets its own DatasetStore; the process-wide store is never touched.
"""
import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from main import app, get_store  # noqa: E402
from schemas import LogEntry, Project, Team, User  # noqa: E402
from store import DatasetStore  # noqa: E402

SAMPLE_DATASET = Path(__file__).resolve().parents[1] / "usuarios.json"


def make_user(
    id="u",
    name="user",
    score=0,
    active=True,
    country="BR",
    team="Alpha",
    leader=False,
    projects=(),
    logs=(),
    age=30,
):
    """Build a User; ``projects`` are (name, completed) pairs, ``logs`` are (date, action) pairs."""
    return User(
        id=id,
        name=name,
        age=age,
        score=score,
        active=active,
        country=country,
        team=Team(
            name=team,
            leader=leader,
            projects=[Project(name=n, completed=c) for n, c in projects],
        ),
        logs=[LogEntry(date=d, action=a) for d, a in logs],
    )


@pytest.fixture
def store():
    return DatasetStore()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sample_bytes():
    return SAMPLE_DATASET.read_bytes()

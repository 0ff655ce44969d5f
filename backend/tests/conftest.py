import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def client() -> TestClient:
    from quiz_flow.main import app

    return TestClient(app)


@pytest.fixture(autouse=True)
def _clear_in_memory_stores(tmp_path, monkeypatch):
    # Ensure deterministic tests across runs.
    from quiz_flow import config
    from quiz_flow.services import documents
    from quiz_flow.services import flow_sessions

    # Use a temp data dir for persisted documents in tests
    monkeypatch.setattr(config, "QUIZ_FLOW_DATA_DIR", str(tmp_path))

    documents._document_store.clear()
    flow_sessions.clear()
    yield


@pytest.fixture()
def three_steps():
    from quiz_flow.logic import Flow

    return Flow(id="f1", step_ids=("q1", "q2", "q3"))

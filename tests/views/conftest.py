# Purpose: Pytest fixtures shared across view tests.

import os
import sys

import pytest

# Add project root to sys.path if necessary, depending on test runner setup
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '../..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from app import create_app

SAMPLE_DATA_FOLDER = os.path.join(project_root, 'Data')

# --- Fixtures ---

@pytest.fixture(scope="function")
def app(tmp_path):
    """Creates and configures a new app instance for each test function."""
    instance_path = tmp_path / "instance"
    app = create_app(
        test_config={
            "TESTING": True,
            "SECRET_KEY": "test_secret_key",
            "DATA_FOLDER": SAMPLE_DATA_FOLDER,
            "CACHE_FILE": str(tmp_path / "local_storage.json"),
        },
        instance_path=str(instance_path),
    )
    yield app


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def loaded_client(client):
    """A test client whose bond cache holds the bundled two-bond sample."""
    resp = client.post("/api/bonds/sample")
    assert resp.status_code == 200
    return client


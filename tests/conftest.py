# tests/conftest.py
import sys
from pathlib import Path

# Project root = parent of tests/
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from fastapi.testclient import TestClient

from filerepo.config import RepositoryConfig
from filerepo.main import create_app
from filerepo.services.repository import RepositoryStore

ADMIN_PASSWORD = "s3cret"
CURL = {"User-Agent": "curl/8.5.0"}


@pytest.fixture()
def config(tmp_path):
    return RepositoryConfig(root_dir=tmp_path / "uploads", max_upload_bytes=1024,
                            admin_password=ADMIN_PASSWORD, base_url="http://files.test")


@pytest.fixture()
def store(config):
    return RepositoryStore(config)


@pytest.fixture()
def app(config):
    return create_app(config)


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def admin_auth():
    return ("admin", ADMIN_PASSWORD)


def tree(root: Path):
    """Snapshot of every path under root, relative to it."""
    return sorted(str(p.relative_to(root)) for p in root.rglob("*"))

import os

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["ANTHROPIC_API_KEY"] = ""

import pytest

from core.config import get_settings

get_settings.cache_clear()

import data.storage.db as db


@pytest.fixture
def session():
    db.Base.metadata.create_all(bind=db.engine)
    with db.SessionLocal() as session:
        yield session
    db.Base.metadata.drop_all(bind=db.engine)


@pytest.fixture
def client(session):
    from fastapi.testclient import TestClient

    from app.main import app

    with TestClient(app) as test_client:
        yield test_client

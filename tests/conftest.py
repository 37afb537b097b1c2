# tests/conftest.py
import os

# backend.app opens its store at import time; keep it off disk
os.environ.setdefault("DATABASE_PATH", ":memory:")

import pytest

from backend.lib.sqlite_service import ConsumptionStore


@pytest.fixture
def store():
    s = ConsumptionStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def client(store, monkeypatch):
    import backend.app as app_module
    monkeypatch.setattr(app_module, "store", store)
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c

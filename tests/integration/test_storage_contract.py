"""
Contract tests run against every available storage backend.

- Always "memory"
- "postgres" only if SHORTLINK_DB_DSN is set; the table is created if
  missing and rows are written with unique codes so reruns don't collide.
"""

import os
import uuid

import pytest

from shortlink.config import Settings
from shortlink.errors import DuplicateCodeError
from shortlink.storage.storage_factory import get_storage


def available_backends():
    backends = ["memory"]
    if os.getenv("SHORTLINK_DB_DSN"):
        backends.append("postgres")
    return backends


@pytest.fixture(params=available_backends())
def storage(request):
    settings = Settings(storage_backend=request.param, db_dsn=os.getenv("SHORTLINK_DB_DSN", ""))
    backend = get_storage(settings)
    backend.init_schema()
    return backend


def _code() -> str:
    return uuid.uuid4().hex[:12]


def test_insert_and_find(storage):
    code = _code()
    created = storage.insert(code, "https://example.com")
    found = storage.find_by_code(code)
    assert found is not None
    assert found.id == created.id
    assert found.original_url == "https://example.com"
    assert found.clicks == 0


def test_duplicate_insert_rejected(storage):
    code = _code()
    storage.insert(code, "https://one.example")
    with pytest.raises(DuplicateCodeError):
        storage.insert(code, "https://two.example")
    assert storage.find_by_code(code).original_url == "https://one.example"


def test_increment_and_stats(storage):
    code = _code()
    storage.insert(code, "https://example.com")
    assert storage.increment_clicks(code) is True
    assert storage.increment_clicks(code) is True
    stats = storage.find_stats_by_code(code)
    assert stats.clicks == 2
    assert storage.increment_clicks(_code()) is False


def test_list_contains_inserted_newest_first(storage):
    codes = [_code() for _ in range(3)]
    for code in codes:
        storage.insert(code, f"https://{code}.example")
    listed = storage.list_all()
    assert set(codes) <= {m.short_code for m in listed}
    assert all(a.created_at >= b.created_at for a, b in zip(listed, listed[1:]))

from types import SimpleNamespace

import pytest

from dealdrop.database import PropertyRepository, get_supabase_client


class FakeQuery:
    """Imita la cadena select().eq().in_()... de postgrest."""

    def __init__(self, rows):
        self.rows = rows
        self.calls = []

    def __getattr__(self, name):
        def _step(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return _step

    def execute(self):
        return SimpleNamespace(data=self.rows)


class FakeClient:
    def __init__(self, rows):
        self.query = FakeQuery(rows)
        self.tables = []

    def select(self, table, columns="*"):
        self.tables.append(table)
        self.query.calls.append(("select", (columns,), {}))
        return self.query


def _row(pid, **overrides):
    row = {
        "id": pid,
        "street_address": f"{pid} Ocean Dr",
        "city": "Miami",
        "state": "FL",
        "asking_price": 100000,
        "bedrooms": None,
        "county": None,
    }
    row.update(overrides)
    return row


def test_get_many_keeps_requested_order():
    client = FakeClient([_row("a"), _row("b"), _row("c")])
    repo = PropertyRepository(client=client)

    records = repo.get_many(["c", "zzz", "a"])

    assert [r.id for r in records] == ["c", "a"]
    assert client.tables == ["properties"]
    assert ("in_", ("id", ["c", "zzz", "a"]), {}) in client.query.calls


def test_get_many_without_ids_skips_query():
    client = FakeClient([_row("a")])
    assert PropertyRepository(client=client).get_many([]) == []
    assert client.tables == []


def test_invalid_rows_are_skipped():
    client = FakeClient([_row("a"), _row("b", asking_price=-5), {"id": "c"}])
    records = PropertyRepository(client=client).list_active()

    assert [r.id for r in records] == ["a"]
    assert records[0].bedrooms == 0
    assert records[0].county == ""


def test_list_active_filters_and_orders():
    client = FakeClient([])
    PropertyRepository(client=client).list_active(limit=20)

    calls = client.query.calls
    assert ("eq", ("is_active", True), {}) in calls
    assert ("order", ("created_at",), {"desc": True}) in calls
    assert ("limit", (20,), {}) in calls


def test_get_by_id():
    repo = PropertyRepository(client=FakeClient([_row("a")]))
    assert repo.get_by_id("a").street_address == "a Ocean Dr"
    assert PropertyRepository(client=FakeClient([])).get_by_id("a") is None


def test_client_requires_credentials(monkeypatch):
    for var in ("SUPABASE_URL", "SUPABASE_KEY", "SUPABASE_SERVICE_KEY"):
        monkeypatch.delenv(var, raising=False)
    get_supabase_client.cache_clear()

    with pytest.raises(ValueError):
        get_supabase_client()

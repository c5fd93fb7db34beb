import logging

import pytest

from roster_core.adapters import InMemoryAdapter, SupabaseAdapter, make_adapter
from roster_core.adapter_test_helpers import FakeSupabaseClient
from roster_core.config import AppConfig

def _fixtures():
    return {
        "athletes": [
            {"id": "1", "name": "Ana", "payment_status": "pending", "cut_day": "05"},
            {"id": "2", "name": "Bo", "payment_status": "active"},
            {"id": "3", "name": "Cy", "payment_status": "pending", "cut_day": "01"},
        ]
    }

@pytest.mark.asyncio
async def test_select_full_table_and_equality_filter():
    adapter = InMemoryAdapter(_fixtures(), warn=False)
    res = await adapter.select("athletes")
    assert res.ok and [r["id"] for r in res.data] == ["1", "2", "3"]
    res = await adapter.select("athletes", eq={"payment_status": "pending"})
    assert [r["id"] for r in res.data] == ["1", "3"]

@pytest.mark.asyncio
async def test_filter_on_column_missing_from_some_rows():
    adapter = InMemoryAdapter(_fixtures(), warn=False)
    res = await adapter.select("athletes", eq={"cut_day": "05"})
    assert [r["id"] for r in res.data] == ["1"]
    res = await adapter.select("athletes", eq={"referral_source": "instagram"})
    assert res.ok and res.data == []

@pytest.mark.asyncio
async def test_order_then_limit():
    adapter = InMemoryAdapter(_fixtures(), warn=False)
    res = await adapter.select("athletes", order="name", ascending=False, limit=2)
    assert [r["name"] for r in res.data] == ["Cy", "Bo"]

@pytest.mark.asyncio
async def test_absent_column_sorts_lowest():
    adapter = InMemoryAdapter(_fixtures(), warn=False)
    res = await adapter.select("athletes", order="cut_day")
    assert [r["id"] for r in res.data] == ["2", "3", "1"]

@pytest.mark.asyncio
async def test_unknown_table_is_empty_not_error():
    adapter = InMemoryAdapter(_fixtures(), warn=False)
    res = await adapter.select("nope")
    assert res.ok and res.data == []

@pytest.mark.asyncio
async def test_column_projection():
    adapter = InMemoryAdapter(_fixtures(), warn=False)
    res = await adapter.select("athletes", columns="id, name", limit=1)
    assert res.data == [{"id": "1", "name": "Ana"}]

@pytest.mark.asyncio
async def test_insert_assigns_identity_and_timestamp():
    adapter = InMemoryAdapter({}, warn=False)
    res = await adapter.insert("athletes", [{"name": "Dee"}])
    assert res.ok
    row = res.data[0]
    assert row["id"] and row["created_at"]
    assert (await adapter.select("athletes")).data == [row]

@pytest.mark.asyncio
async def test_update_merges_on_any_column_and_tolerates_no_match():
    adapter = InMemoryAdapter(_fixtures(), warn=False)
    res = await adapter.update("athletes", {"cut_day": "20"}, "payment_status", "pending")
    assert res.ok and len(res.data) == 2
    rows = (await adapter.select("athletes", eq={"cut_day": "20"})).data
    assert [r["id"] for r in rows] == ["1", "3"]
    assert rows[0]["name"] == "Ana"
    miss = await adapter.update("athletes", {"cut_day": "10"}, "id", "999")
    assert miss.ok and miss.data == []

@pytest.mark.asyncio
async def test_delete_removes_first_match_only():
    adapter = InMemoryAdapter(_fixtures(), warn=False)
    res = await adapter.delete("athletes", "payment_status", "pending")
    assert res.ok and res.data[0]["id"] == "1"
    assert [r["id"] for r in (await adapter.select("athletes")).data] == ["2", "3"]
    miss = await adapter.delete("athletes", "id", "999")
    assert miss.ok and miss.data == []

@pytest.mark.asyncio
async def test_upsert_merges_existing_and_appends_new():
    adapter = InMemoryAdapter(_fixtures(), warn=False)
    res = await adapter.upsert("athletes", [{"id": "2", "name": "Bo", "cut_day": "09"}, {"name": "Eve"}])
    assert res.ok
    rows = (await adapter.select("athletes")).data
    assert len(rows) == 4
    assert rows[1]["cut_day"] == "09" and rows[1]["payment_status"] == "active"
    assert rows[3]["name"] == "Eve" and rows[3]["id"]

@pytest.mark.asyncio
async def test_unknown_columns_rejected_at_boundary():
    adapter = InMemoryAdapter(_fixtures(), warn=False)
    res = await adapter.insert("athletes", [{"name": "Zed", "shoe_size": "44"}])
    assert not res.ok and "shoe_size" in res.error.message
    res = await adapter.update("athletes", {"favourite_colour": "red"}, "id", "1")
    assert not res.ok
    assert len((await adapter.select("athletes")).data) == 3

@pytest.mark.asyncio
async def test_local_mode_warns_on_every_call(caplog):
    adapter = InMemoryAdapter(_fixtures())
    with caplog.at_level(logging.WARNING, logger="roster_core.adapters"):
        await adapter.select("athletes")
        await adapter.update("athletes", {"cut_day": "02"}, "id", "1")
    assert len([r for r in caplog.records if "local memory" in r.getMessage()]) == 2

@pytest.mark.asyncio
async def test_returned_rows_are_copies():
    adapter = InMemoryAdapter(_fixtures(), warn=False)
    res = await adapter.select("athletes")
    res.data[0]["name"] = "Mutated"
    assert (await adapter.select("athletes", eq={"id": "1"})).data[0]["name"] == "Ana"

# -----------------------
# Supabase adapter against a recording client
# -----------------------
@pytest.mark.asyncio
async def test_supabase_select_builds_query_chain():
    client = FakeSupabaseClient(data=[{"id": "1", "name": "Ana"}])
    adapter = SupabaseAdapter(client)
    res = await adapter.select("athletes", eq={"id": "1"}, order="name", ascending=False, limit=5)
    assert res.ok and res.data == [{"id": "1", "name": "Ana"}]
    assert client.executed[0] == [
        ("table", "athletes"),
        ("select", ("*",), {}),
        ("eq", ("id", "1"), {}),
        ("order", ("name",), {"desc": True}),
        ("limit", (5,), {}),
    ]

@pytest.mark.asyncio
async def test_supabase_insert_builds_query_chain():
    client = FakeSupabaseClient(data=[{"id": "9", "name": "Ana"}])
    res = await SupabaseAdapter(client).insert("athletes", [{"name": "Ana"}])
    assert res.ok and res.data == [{"id": "9", "name": "Ana"}]
    assert client.executed == [[("table", "athletes"), ("insert", ([{"name": "Ana"}],), {})]]

@pytest.mark.asyncio
async def test_supabase_writes_build_query_chains():
    client = FakeSupabaseClient()
    adapter = SupabaseAdapter(client)
    await adapter.update("athletes", {"payment_status": "active"}, "id", "1")
    await adapter.delete("athletes", "id", "1")
    await adapter.upsert("athletes", [{"id": "1", "name": "Ana"}])
    assert client.executed[0][1:] == [("update", ({"payment_status": "active"},), {}), ("eq", ("id", "1"), {})]
    assert client.executed[1][1:] == [("delete", (), {}), ("eq", ("id", "1"), {})]
    assert client.executed[2][1:] == [("upsert", ([{"id": "1", "name": "Ana"}],), {"on_conflict": "id"})]

@pytest.mark.asyncio
async def test_supabase_exceptions_become_error_results():
    client = FakeSupabaseClient(raise_with=RuntimeError("connection refused"))
    res = await SupabaseAdapter(client).insert("athletes", [{"name": "Ana"}])
    assert not res.ok
    assert res.error.message == "connection refused"

@pytest.mark.asyncio
async def test_supabase_rejects_unknown_columns_without_calling_out():
    client = FakeSupabaseClient()
    res = await SupabaseAdapter(client).insert("athletes", [{"name": "Ana", "bogus": 1}])
    assert not res.ok
    assert client.executed == []

def test_make_adapter_picks_variant_from_config(monkeypatch):
    local = make_adapter(AppConfig(fixtures_path="does/not/exist.yaml"))
    assert isinstance(local, InMemoryAdapter)
    assert len(local.tables["athletes"]) == 3

    monkeypatch.setattr(SupabaseAdapter, "from_config", classmethod(lambda cls, cfg: cls(FakeSupabaseClient())))
    remote = make_adapter(AppConfig(supabase_url="https://demo.supabase.co", supabase_key="key"))
    assert isinstance(remote, SupabaseAdapter)

import pytest

from roster_core.access import login, login_choices, verify_access_code
from roster_core.adapters import InMemoryAdapter
from roster_core.adapter_test_helpers import quick_athlete

def _adapter():
    return InMemoryAdapter({"athletes": [
        {"id": "1", "name": "Cy", "access_code": "ab12"},
        {"id": "2", "name": "Ana", "access_code": "ZZ99"},
        {"id": "3", "name": "Bo"},
    ]}, warn=False)

def test_verify_is_case_insensitive_and_has_no_master_code():
    athlete = quick_athlete("1", "Cy", access_code="AB12")
    assert verify_access_code(athlete, "ab12")
    assert verify_access_code(athlete, " AB12 ")
    assert not verify_access_code(athlete, "0000")
    assert not verify_access_code(quick_athlete("3", "Bo"), "")

@pytest.mark.asyncio
async def test_login_choices_sorted_by_name():
    choices = await login_choices(_adapter())
    assert choices == [{"id": "2", "name": "Ana"}, {"id": "3", "name": "Bo"}, {"id": "1", "name": "Cy"}]

@pytest.mark.asyncio
async def test_login_flow():
    adapter = _adapter()
    athlete = await login(adapter, "1", "AB12")
    assert athlete is not None and athlete.name == "Cy"
    assert await login(adapter, "1", "ZZ99") is None
    assert await login(adapter, "404", "AB12") is None

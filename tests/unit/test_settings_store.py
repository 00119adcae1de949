# tests/unit/test_settings_store.py
"""
Unit tests for user settings persistence.

Tests legacy value normalization, both store backends, and JSON import.
"""

import json
from pathlib import Path

import pytest
import pytest_asyncio

from cico_bot.models.settings import InMemorySettingsStore, UserSettings
from cico_bot.models.sqlite_store import SQLiteSettingsStore, import_json_database


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def test_from_stored_none_gives_defaults():
    settings = UserSettings.from_stored(None)
    assert settings.auth_token is None
    assert settings.stretch_images is True
    assert settings.dump_destination is None


def test_from_stored_legacy_string():
    settings = UserSettings.from_stored("tok123")
    assert settings.auth_token == "tok123"
    assert settings.stretch_images is True
    assert settings.dump_destination is None


def test_from_stored_object():
    settings = UserSettings.from_stored(
        {"token": "abc", "stretch": False, "dumpChannel": "-1001234567890"}
    )
    assert settings.auth_token == "abc"
    assert settings.stretch_images is False
    assert settings.dump_destination == "-1001234567890"


@pytest.mark.parametrize("stretch", [None, True, 0, "no"])
def test_only_explicit_false_disables_stretch(stretch):
    settings = UserSettings.from_stored({"token": "abc", "stretch": stretch})
    assert settings.stretch_images is True


def test_from_stored_missing_stretch_key():
    assert UserSettings.from_stored({"token": "abc"}).stretch_images is True


def test_from_stored_numeric_channel_coerced():
    settings = UserSettings.from_stored({"dumpChannel": -1001234567890})
    assert settings.dump_destination == "-1001234567890"


def test_from_stored_rejects_other_types():
    with pytest.raises(TypeError):
        UserSettings.from_stored(["tok"])


def test_to_stored_uses_portal_keys():
    settings = UserSettings(auth_token="t", stretch_images=False, dump_destination="-1")
    assert settings.to_stored() == {"token": "t", "stretch": False, "dumpChannel": "-1"}


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def sqlite_store(tmp_path: Path) -> SQLiteSettingsStore:
    """Create and initialize a test SQLite store."""
    store = SQLiteSettingsStore(str(tmp_path / "settings.db"))
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture(params=["memory", "sqlite"])
def store(request, sqlite_store):
    if request.param == "memory":
        return InMemorySettingsStore()
    return sqlite_store


@pytest.mark.asyncio
async def test_unknown_user_gets_defaults(store):
    settings = await store.get(999)
    assert settings == UserSettings()


@pytest.mark.asyncio
async def test_mutators_preserve_other_fields(store):
    await store.save_token(7, "tok")
    await store.set_stretch(7, False)
    await store.set_dump_destination(7, "-100")

    settings = await store.get(7)
    assert settings.auth_token == "tok"
    assert settings.stretch_images is False
    assert settings.dump_destination == "-100"

    await store.save_token(7, None)
    settings = await store.get("7")
    assert settings.auth_token is None
    assert settings.stretch_images is False
    assert settings.dump_destination == "-100"


@pytest.mark.asyncio
async def test_list_all(store):
    await store.save_token(2, "b")
    await store.save_token(1, "a")

    users = await store.list_all()
    assert list(users) == ["1", "2"]
    assert users["1"].auth_token == "a"


@pytest.mark.asyncio
async def test_in_memory_reads_legacy_value():
    store = InMemorySettingsStore({"5": "legacy-token"})
    settings = await store.get(5)
    assert settings.auth_token == "legacy-token"
    assert settings.stretch_images is True


@pytest.mark.asyncio
async def test_sqlite_reads_legacy_row(sqlite_store):
    await sqlite_store.put_raw(5, "legacy-token")
    settings = await sqlite_store.get(5)
    assert settings.auth_token == "legacy-token"
    assert settings.stretch_images is True


@pytest.mark.asyncio
async def test_sqlite_persists_across_instances(tmp_path: Path):
    db_path = str(tmp_path / "persist.db")
    first = SQLiteSettingsStore(db_path)
    await first.initialize()
    await first.set_dump_destination(3, "-42")
    await first.close()

    second = SQLiteSettingsStore(db_path)
    await second.initialize()
    assert (await second.get(3)).dump_destination == "-42"
    await second.close()


# ---------------------------------------------------------------------------
# JSON import
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_import_json_database(tmp_path: Path, sqlite_store):
    path = tmp_path / "database.json"
    path.write_text(
        json.dumps(
            {
                "111": "old-token",
                "222": {"token": "new", "stretch": False, "dumpChannel": "-100"},
                "333": 12345,
            }
        ),
        encoding="utf-8",
    )

    count = await import_json_database(sqlite_store, path)

    assert count == 2
    users = await sqlite_store.list_all()
    assert set(users) == {"111", "222"}
    assert users["111"].auth_token == "old-token"
    assert users["111"].stretch_images is True
    assert users["222"].stretch_images is False
    assert users["222"].dump_destination == "-100"


@pytest.mark.asyncio
async def test_import_rejects_non_object(tmp_path: Path):
    path = tmp_path / "database.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError):
        await import_json_database(InMemorySettingsStore(), path)

import json

import pytest

from swagclan.datatypes.discord_datatypes import GuildID
from swagclan.storage.storage_service import StorageService


@pytest.mark.asyncio
async def test_first_access_creates_default_file(bot, tmp_path):
    service = StorageService(bot, tmp_path)

    storage = await service.get_storage("42")

    data = json.loads((tmp_path / "42.json").read_text(encoding="utf-8"))
    assert data == {
        "collections": {
            "users": {"items": {}, "size": storage.get("users").size},
            "guild": {"items": {}, "size": storage.get("guild").size},
        },
        "size": storage.size,
    }
    assert service.guilds[GuildID("42")] is storage


@pytest.mark.asyncio
async def test_saved_items_survive_reload(bot, tmp_path, recorder):
    service = StorageService(bot, tmp_path)
    storage = await service.get_storage("42")
    item = storage.get("guild").set("motd", "welcome")
    await storage.save()

    reloaded = StorageService(bot, tmp_path, observers=[recorder])
    fresh = await reloaded.get_storage("42")

    stored = fresh.get("guild").get("motd")
    assert stored.value == "welcome"
    assert stored.created == item.created
    assert recorder.named("on_load") == [(fresh,)]


@pytest.mark.asyncio
async def test_size_fields_are_ignored_on_load(bot, tmp_path):
    raw = {"collections": {"users": {"items": {"a": {"value": "b", "created": 1, "modified": 2, "size": 999}}, "size": 999}}, "size": 999}
    (tmp_path / "42.json").write_text(json.dumps(raw), encoding="utf-8")
    service = StorageService(bot, tmp_path)

    storage = await service.get_storage("42")

    assert storage.get("users").get("a").size != 999
    assert storage.size != 999


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    [
        "",
        '{"collections": []}',
        '{"collections": {"users": {"items": {"a": {"value": 5, "created": 1}}}}}',
    ],
)
async def test_corrupt_file_yields_unsaved_defaults(bot, tmp_path, recorder, content):
    path = tmp_path / "42.json"
    path.write_text(content, encoding="utf-8")
    service = StorageService(bot, tmp_path, observers=[recorder])

    storage = await service.get_storage("42")

    assert list(storage.collections) == ["users", "guild"]
    assert storage.suppress_persistence is True
    assert GuildID("42") not in service.guilds
    assert [args[0] for args in recorder.named("on_error")] == [GuildID("42")]
    assert await storage.save() is False
    assert path.read_text(encoding="utf-8") == content


@pytest.mark.asyncio
async def test_limits_come_from_service(bot, tmp_path):
    service = StorageService(bot, tmp_path, max_bytes=1024, max_name_length=5)

    storage = await service.get_storage("42")

    assert storage.max_bytes == 1024
    assert storage.max_name_length == 5


@pytest.mark.asyncio
async def test_load_from_directory_and_save_all(bot, tmp_path):
    service = StorageService(bot, tmp_path)
    first = await service.get_storage("42")
    await service.get_storage("43")
    first.get("users").set("alice", "hi")
    await service.save_all()

    reloaded = StorageService(bot, tmp_path)
    loaded = await reloaded.load_from_directory()

    assert set(loaded) == {GuildID("42"), GuildID("43")}
    assert loaded[GuildID("42")].get("users").get("alice").value == "hi"

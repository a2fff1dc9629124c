import json
import stat

import pytest

from swagclan.util import json_files
from swagclan.util.json_files import obj_size, read_json, read_json_async, write_json_atomic, write_json_atomic_async


def test_obj_size_counts_utf8_bytes_without_outer_brackets():
    assert obj_size({}) == 0
    assert obj_size("ab") == 2
    assert obj_size({"a": 1}) == len('"a":1')
    assert obj_size("é") == 2


def test_write_then_read(tmp_path):
    path = tmp_path / "nested" / "42.json"

    write_json_atomic(path, {"settings": {"Prefix": "!"}})

    assert read_json(path) == {"settings": {"Prefix": "!"}}
    assert path.read_text(encoding="utf-8") == '{"settings":{"Prefix":"!"}}'


def test_failed_write_keeps_original_and_cleans_up(tmp_path):
    path = tmp_path / "42.json"
    write_json_atomic(path, {"ok": True})

    with pytest.raises(TypeError):
        write_json_atomic(path, {"bad": object()})

    assert json.loads(path.read_text(encoding="utf-8")) == {"ok": True}
    assert [p.name for p in tmp_path.iterdir()] == ["42.json"]


def test_read_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_json(tmp_path / "missing.json")


@pytest.mark.asyncio
async def test_async_helpers(tmp_path):
    path = tmp_path / "42.json"

    await write_json_atomic_async(path, [1, 2])

    assert await read_json_async(path) == [1, 2]


def test_write_keeps_mode_of_replaced_file(tmp_path):
    path = tmp_path / "42.json"
    path.write_text("{}", encoding="utf-8")
    path.chmod(0o640)

    write_json_atomic(path, {"ok": True})

    assert stat.S_IMODE(path.stat().st_mode) == 0o640


def test_new_file_gets_umask_mode(tmp_path):
    path = tmp_path / "42.json"

    write_json_atomic(path, {"ok": True})

    assert stat.S_IMODE(path.stat().st_mode) == 0o666 & ~json_files._UMASK

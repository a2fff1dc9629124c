"""
JSON file helpers shared by the guild settings and guild storage services.

Writes are atomic: the payload goes to a temporary file in the target
directory which is then ``os.replace``-d over the real file, so a crash
mid-write leaves either the old file or the new one, never a truncated mix.
"""

from __future__ import annotations

import asyncio
import json
import os
import stat
import tempfile
from pathlib import Path
from typing import Any


# Read once at import; os.umask can only be queried by setting it
_UMASK = os.umask(0)
os.umask(_UMASK)


def obj_size(obj: Any) -> int:
    """
    Return the size in bytes of ``obj`` serialized as compact JSON.

    The two bytes of the outermost brackets/quotes are not counted, so an
    empty object has size 0.
    """
    return len(json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")) - 2


def read_json(path: Path) -> Any:
    """Read and decode a UTF-8 JSON file. Raises FileNotFoundError if absent."""
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def write_json_atomic(path: Path, data: Any) -> None:
    """Serialize ``data`` to ``path`` through a temp file and an atomic rename.

    The file keeps the mode of the file it replaces, or gets the umask-derived
    mode a plain ``open`` would give when it is new.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            os.fchmod(f.fileno(), _target_mode(path))
            json.dump(data, f, ensure_ascii=False, separators=(",", ":"))
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return 0o666 & ~_UMASK


async def read_json_async(path: Path) -> Any:
    return await asyncio.to_thread(read_json, path)


async def write_json_atomic_async(path: Path, data: Any) -> None:
    await asyncio.to_thread(write_json_atomic, path, data)

"""
Pytest configuration and fixtures for SwagClan tests.
"""

import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add src directory to path so imports work without an install
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

IDS = SimpleNamespace(
    guild=123456789012345678,
    channel=223456789012345678,
    other_channel=323456789012345678,
)


def _make_guild(guild_id=IDS.guild, channel_ids=(IDS.channel,)):
    channels = {cid: SimpleNamespace(id=cid, name=f"channel-{cid}") for cid in channel_ids}
    return SimpleNamespace(id=guild_id, name="Test Guild", get_channel=channels.get)


def _make_bot(*guilds):
    by_id = {guild.id: guild for guild in guilds}
    return SimpleNamespace(get_guild=by_id.get)


class RecordingObserver:
    """Collects every hook call as (hook name, args)."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, hook):
        if not hook.startswith("on_"):
            raise AttributeError(hook)

        def record(*args):
            self.calls.append((hook, args))

        return record

    def named(self, hook):
        return [args for name, args in self.calls if name == hook]


@pytest.fixture()
def ids():
    return IDS


@pytest.fixture()
def make_guild():
    return _make_guild


@pytest.fixture()
def make_bot():
    return _make_bot


@pytest.fixture()
def guild():
    return _make_guild()


@pytest.fixture()
def bot(guild):
    return _make_bot(guild)


@pytest.fixture()
def recorder():
    return RecordingObserver()

"""
Pytest config.

The bot lives in flat top-level modules (`app`, `bot_config`, `cogs/`...), so
tests rely on the repo root being on sys.path. Pin that here so a global
`pytest` entrypoint can always import them.
"""

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()


def make_role(name: str, role_id: int = 1) -> SimpleNamespace:
    return SimpleNamespace(name=name, id=role_id)


def make_member(user_id: int, roles=(), display_name: str = "someone") -> MagicMock:
    member = MagicMock()
    member.id = user_id
    member.roles = list(roles)
    member.display_name = display_name
    member.add_roles = AsyncMock()
    member.remove_roles = AsyncMock()
    return member


def make_guild(*members, guild_id: int = 42) -> MagicMock:
    by_id = {m.id: m for m in members}
    guild = MagicMock()
    guild.id = guild_id
    guild.get_member = MagicMock(side_effect=by_id.get)
    guild.fetch_member = AsyncMock()
    return guild


@pytest.fixture
def role():
    return make_role


@pytest.fixture
def member():
    return make_member


@pytest.fixture
def guild():
    return make_guild

"""
Pytest configuration and fixtures for Brainshelf tests.
"""

from __future__ import annotations

import asyncio
import os
from datetime import UTC, datetime, timedelta

# Set test environment variables before importing config
os.environ.setdefault("IDENTITY_TOKEN_SECRET", "test-secret-key-for-testing-only")

import pytest  # noqa: E402

from brainshelf.models.entry import Entry  # noqa: E402
from brainshelf.services.entry_store import MemoryEntryStore  # noqa: E402
from brainshelf.services.identity_provider import MemoryIdentityProvider  # noqa: E402
from brainshelf.services.mirror import LiveCollectionMirror  # noqa: E402
from brainshelf.services.session_manager import SessionManager  # noqa: E402

T0 = datetime(2026, 1, 1, tzinfo=UTC)


def make_entry(entry_id: str, name: str = "", minutes: int | None = 0, **fields) -> Entry:
    """Build an Entry created `minutes` after T0 (None for a pending timestamp)."""
    created_at = None if minutes is None else T0 + timedelta(minutes=minutes)
    return Entry(id=entry_id, name=name, created_at=created_at, **fields)


async def settle() -> None:
    """Let callbacks scheduled with call_soon run."""
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.fixture
def store():
    return MemoryEntryStore()


@pytest.fixture
def provider():
    return MemoryIdentityProvider()


@pytest.fixture
def mirror(store):
    mirror = LiveCollectionMirror(store)
    yield mirror
    mirror.stop()


@pytest.fixture
def sessions(provider):
    manager = SessionManager(provider, resolve_timeout=1.0)
    manager.init()
    yield manager
    manager.teardown()

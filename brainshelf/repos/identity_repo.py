"""Repository for identity operations."""

from __future__ import annotations

import asyncpg

from brainshelf.db import system_conn
from brainshelf.models.identity import Identity


def _row_to_identity(row: asyncpg.Record) -> Identity:
    """Convert a database row to an Identity model."""
    return Identity(
        id=row["id"],
        is_anonymous=row["is_anonymous"],
        display_name=row["display_name"],
        photo_url=row["photo_url"],
        created_at=row["created_at"],
    )


class IdentityRepo:
    """All identity-related database operations."""

    async def create_anonymous(self) -> Identity:
        """
        Create a new anonymous identity.

        Returns:
            Newly created Identity
        """
        async with system_conn() as conn:
            row = await conn.fetchrow(
                """
                INSERT INTO identities (is_anonymous)
                VALUES (true)
                RETURNING *
                """
            )
            return _row_to_identity(row)

    async def create_named(self, display_name: str, photo_url: str | None = None) -> Identity:
        """
        Create a named (non-anonymous) identity.

        Args:
            display_name: Name shown on submitted entries
            photo_url: Optional avatar URL

        Returns:
            Newly created Identity
        """
        async with system_conn() as conn:
            row = await conn.fetchrow(
                """
                INSERT INTO identities (is_anonymous, display_name, photo_url)
                VALUES (false, $1, $2)
                RETURNING *
                """,
                display_name,
                photo_url,
            )
            return _row_to_identity(row)

    async def get(self, identity_id: str) -> Identity | None:
        """
        Get an identity by ID.

        Args:
            identity_id: Identity id

        Returns:
            Identity if found, None otherwise
        """
        async with system_conn() as conn:
            row = await conn.fetchrow("SELECT * FROM identities WHERE id = $1", identity_id)
            return _row_to_identity(row) if row else None

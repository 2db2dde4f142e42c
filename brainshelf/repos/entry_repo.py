"""Repository for directory entry operations."""

from __future__ import annotations

from typing import Any

import asyncpg

from brainshelf.db import system_conn
from brainshelf.models.entry import Entry


def _row_to_entry(row: asyncpg.Record) -> Entry:
    """Convert a database row to an Entry model."""
    return Entry(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        website_url=row["website_url"],
        category=row["category"],
        pricing=row["pricing"],
        tags=list(row["tags"] or []),
        rating_sum=row["rating_sum"],
        rating_count=row["rating_count"],
        comment_count=row["comment_count"],
        submitted_by=row["submitted_by"],
        submitted_by_name=row["submitted_by_name"],
        submitted_by_photo=row["submitted_by_photo"],
        created_at=row["created_at"],
    )


class EntryRepo:
    """All entry-related database operations."""

    async def create(self, document: dict[str, Any]) -> str:
        """
        Insert a new entry. created_at is assigned by the database.

        Args:
            document: Entry fields without id or created_at

        Returns:
            The new entry's id
        """
        async with system_conn() as conn:
            return await conn.fetchval(
                """
                INSERT INTO entries (
                    name, description, website_url, category, pricing, tags,
                    rating_sum, rating_count, comment_count,
                    submitted_by, submitted_by_name, submitted_by_photo
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
                RETURNING id
                """,
                document["name"],
                document["description"],
                document.get("websiteUrl", ""),
                document["category"],
                document["pricing"],
                list(document.get("tags", [])),
                document.get("ratingSum", 0),
                document.get("ratingCount", 0),
                document.get("commentCount", 0),
                document.get("submittedBy"),
                document.get("submittedByName"),
                document.get("submittedByPhoto"),
            )

    async def get(self, entry_id: str) -> Entry | None:
        """
        Get an entry by ID.

        Args:
            entry_id: Entry id

        Returns:
            Entry if found, None otherwise
        """
        async with system_conn() as conn:
            row = await conn.fetchrow("SELECT * FROM entries WHERE id = $1", entry_id)
            return _row_to_entry(row) if row else None

    async def list_by_creation(self) -> list[Entry]:
        """
        List every entry, newest first.

        Returns:
            List of Entry objects ordered by created_at DESC
        """
        async with system_conn() as conn:
            rows = await conn.fetch("SELECT * FROM entries ORDER BY created_at DESC, id")
            return [_row_to_entry(row) for row in rows]

    async def count(self) -> int:
        async with system_conn() as conn:
            count = await conn.fetchval("SELECT count(*) FROM entries")
            return count or 0

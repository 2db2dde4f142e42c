#!/usr/bin/env python3
"""
Seed the directory with a handful of well-known tools.

Usage:
    python scripts/seed_directory.py

Entries are submitted through the normal submission workflow under a fresh
anonymous identity, so they show up on every listening mirror.
"""

import asyncio
import logging

from brainshelf.db import close_pool, init_pool
from brainshelf.models.entry import SubmissionForm
from brainshelf.services.entry_store import PostgresEntryStore
from brainshelf.services.identity_provider import TokenIdentityProvider
from brainshelf.services.session_manager import SessionManager
from brainshelf.services.submission import SubmissionWorkflow

DEMO_ENTRIES = [
    {
        "name": "Obsidian",
        "description": "Local-first Markdown knowledge base with backlinks and a graph view.",
        "website_url": "https://obsidian.md",
        "category": "PKM",
        "pricing": "Freemium",
        "tags": ["Markdown", "Offline", "Graph View", "Plugin Support"],
    },
    {
        "name": "Logseq",
        "description": "Open source outliner for networked thought.",
        "website_url": "https://logseq.com",
        "category": "PKM",
        "pricing": "Free",
        "tags": ["Open Source", "Markdown", "Graph View"],
    },
    {
        "name": "Notion",
        "description": "Docs, wikis, and databases in one workspace.",
        "website_url": "https://notion.so",
        "category": "All-in-one",
        "pricing": "Freemium",
        "tags": ["Collaboration", "Database", "Templates", "AI"],
    },
    {
        "name": "Anki",
        "description": "Flashcards with spaced repetition.",
        "website_url": "https://apps.ankiweb.net",
        "category": "Other",
        "pricing": "Free",
        "tags": ["Spaced Repetition", "Open Source", "Desktop", "Mobile"],
    },
    {
        "name": "Excalidraw",
        "description": "Hand-drawn style whiteboard for sketching ideas.",
        "website_url": "https://excalidraw.com",
        "category": "Whiteboard",
        "pricing": "Free",
        "tags": ["Visual", "Collaboration", "Web"],
    },
]


async def main():
    logging.basicConfig(level=logging.INFO)
    await init_pool()
    try:
        provider = TokenIdentityProvider()
        sessions = SessionManager(provider)
        sessions.init()
        await provider.restore(None)
        session = await sessions.request_anonymous_login()
        print(f"Submitting as {session.identity_id}")

        workflow = SubmissionWorkflow(PostgresEntryStore(), sessions)
        for fields in DEMO_ENTRIES:
            entry_id = await workflow.submit(SubmissionForm(**fields))
            print(f"Created {fields['name']}: {entry_id}")

        sessions.teardown()
    finally:
        await close_pool()


if __name__ == "__main__":
    asyncio.run(main())

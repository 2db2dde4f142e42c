"""
Stateful services for Brainshelf.

Collaborator adapters (entry store, identity provider) and the components
built on them: mirror, session manager, login gate, submission workflow,
directory view.
"""

from brainshelf.services.directory_view import DirectoryView
from brainshelf.services.entry_store import EntryStore, MemoryEntryStore, PostgresEntryStore
from brainshelf.services.identity_provider import (
    IdentityProvider,
    MemoryIdentityProvider,
    TokenIdentityProvider,
)
from brainshelf.services.login_gate import LoginGate
from brainshelf.services.mirror import LiveCollectionMirror
from brainshelf.services.session_manager import SessionManager
from brainshelf.services.submission import SubmissionWorkflow

__all__ = [
    "EntryStore",
    "MemoryEntryStore",
    "PostgresEntryStore",
    "IdentityProvider",
    "MemoryIdentityProvider",
    "TokenIdentityProvider",
    "LiveCollectionMirror",
    "SessionManager",
    "LoginGate",
    "SubmissionWorkflow",
    "DirectoryView",
]

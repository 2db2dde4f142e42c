"""
Repository layer for Brainshelf.

All SQL lives here and ONLY here. No database access outside this module.
"""

from brainshelf.repos.entry_repo import EntryRepo
from brainshelf.repos.identity_repo import IdentityRepo

__all__ = [
    "EntryRepo",
    "IdentityRepo",
]

"""
Pydantic models for Brainshelf.

All data shapes defined here. No imports from db, repos, or services.
"""

from brainshelf.models.entry import (
    CATEGORIES,
    PRICING_OPTIONS,
    SUGGESTED_TAGS,
    Entry,
    SubmissionForm,
)
from brainshelf.models.identity import Identity, Session, SessionState

__all__ = [
    # Entry models
    "Entry",
    "SubmissionForm",
    "CATEGORIES",
    "PRICING_OPTIONS",
    "SUGGESTED_TAGS",
    # Identity models
    "Identity",
    "Session",
    "SessionState",
]

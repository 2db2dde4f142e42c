"""Entry models for the tool directory."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

CATEGORIES: list[str] = [
    "Note-taking",
    "PKM",
    "Task Management",
    "Whiteboard",
    "Writing",
    "All-in-one",
    "Other",
]

PRICING_OPTIONS: list[str] = ["Free", "Freemium", "Paid"]

SUGGESTED_TAGS: list[str] = [
    "AI",
    "Mobile",
    "Desktop",
    "Web",
    "Open Source",
    "Offline",
    "Collaboration",
    "Markdown",
    "Templates",
    "API",
    "Plugin Support",
    "Cross-platform",
    "Cloud Sync",
    "Privacy-focused",
    "Minimal",
    "Visual",
    "Database",
    "Spaced Repetition",
    "Graph View",
    "Kanban",
]


def _lenient_count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    return max(int(value), 0)


class Entry(BaseModel):
    """
    One directory entry as read from the remote collection.

    Accepts the remote document's camelCase keys as well as field names.
    Remote documents are read leniently: malformed tags and counters
    degrade to empty/zero instead of failing the whole snapshot.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    description: str = ""
    website_url: str = Field(default="", alias="websiteUrl")
    category: str = ""
    pricing: str = ""
    tags: tuple[str, ...] = ()
    rating_sum: int = Field(default=0, alias="ratingSum")
    rating_count: int = Field(default=0, alias="ratingCount")
    comment_count: int = Field(default=0, alias="commentCount")
    submitted_by: str | None = Field(default=None, alias="submittedBy")
    submitted_by_name: str | None = Field(default=None, alias="submittedByName")
    submitted_by_photo: str | None = Field(default=None, alias="submittedByPhoto")
    created_at: datetime | None = Field(default=None, alias="createdAt")  # None while pending server assignment

    @field_validator("name", "description", "website_url", "category", "pricing", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _lenient_tags(cls, value: Any) -> tuple[str, ...]:
        if not isinstance(value, list | tuple):
            return ()
        seen: list[str] = []
        for tag in value:
            if isinstance(tag, str) and tag not in seen:
                seen.append(tag)
        return tuple(seen)

    @field_validator("rating_sum", "rating_count", "comment_count", mode="before")
    @classmethod
    def _lenient_counters(cls, value: Any) -> int:
        return _lenient_count(value)

    @property
    def average_rating(self) -> float | None:
        """ratingSum / ratingCount, or None when nobody has rated yet."""
        if self.rating_count > 0:
            return self.rating_sum / self.rating_count
        return None

    @classmethod
    def from_document(cls, entry_id: str, document: dict[str, Any]) -> Entry:
        """Build an Entry from a remote document and its store-assigned id."""
        return cls.model_validate({**document, "id": entry_id})


class SubmissionForm(BaseModel):
    """
    What the user fills in to submit a new entry.

    Kept mutable so that a failed submission leaves the user's input in
    place for a retry.
    """

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    name: str = ""
    description: str = ""
    website_url: str = Field(default="", alias="websiteUrl")
    category: str = CATEGORIES[0]
    pricing: str = PRICING_OPTIONS[0]
    tags: list[str] = Field(default_factory=list)

    def add_tag(self, tag: str) -> bool:
        """
        Add a tag, trimmed. Empty and already-present tags are ignored.

        Returns:
            True if the tag was added
        """
        trimmed = tag.strip()
        if not trimmed or trimmed in self.tags:
            return False
        self.tags = [*self.tags, trimmed]
        return True

    def add_tags_from_text(self, text: str) -> list[str]:
        """Add every comma-separated tag in text. Returns the tags actually added."""
        return [part.strip() for part in text.split(",") if self.add_tag(part)]

    def remove_tag(self, tag: str) -> None:
        self.tags = [t for t in self.tags if t != tag]

    def suggested_tags(self) -> list[str]:
        """Suggestions not yet picked."""
        return [t for t in SUGGESTED_TAGS if t not in self.tags]

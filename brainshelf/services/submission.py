"""
Submission workflow.

Validates a submission form, builds the new entry document with the
submitter snapshot and zeroed aggregates, and writes it to the store in a
single create call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import pydantic

from brainshelf.errors import SessionRequiredError, SubmissionError, ValidationError
from brainshelf.models.entry import PRICING_OPTIONS, SubmissionForm
from brainshelf.models.identity import Session
from brainshelf.services.entry_store import EntryStore
from brainshelf.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Trim, drop empties, and dedupe (case-sensitive), keeping first-seen order."""
    result: list[str] = []
    for tag in tags:
        trimmed = tag.strip()
        if trimmed and trimmed not in result:
            result.append(trimmed)
    return result


def validate_form(form: SubmissionForm) -> None:
    """
    Check required fields.

    Raises:
        ValidationError: Naming every required field that is blank, or
            naming pricing when it is not one of PRICING_OPTIONS
    """
    missing = [field for field in ("name", "description") if not getattr(form, field).strip()]
    if missing:
        raise ValidationError(missing)
    if form.pricing not in PRICING_OPTIONS:
        raise ValidationError(["pricing"], f"Pricing must be one of {', '.join(PRICING_OPTIONS)}.")


def parse_form(data: Mapping[str, Any]) -> SubmissionForm:
    """
    Read a submission form from a plain mapping.

    Accepts field names or the store's camelCase keys.

    Raises:
        ValidationError: Naming every field pydantic could not read
    """
    try:
        return SubmissionForm.model_validate(dict(data))
    except pydantic.ValidationError as e:
        fields: list[str] = []
        for error in e.errors():
            field = _field_name(error["loc"][0]) if error["loc"] else "form"
            if field not in fields:
                fields.append(field)
        raise ValidationError(fields, f"Invalid value for {', '.join(fields)}.") from e


def _field_name(loc: Any) -> str:
    for name, info in SubmissionForm.model_fields.items():
        if loc == info.alias:
            return name
    return str(loc)


def build_entry_document(form: SubmissionForm, session: Session) -> dict[str, Any]:
    """
    Build the document written to the store for a new entry.

    created_at is left out; the store assigns it at write time.

    Args:
        form: Validated submission form
        session: Session of the submitter, read at call time

    Returns:
        Entry document in the store's field naming
    """
    return {
        "name": form.name.strip(),
        "description": form.description.strip(),
        "websiteUrl": form.website_url.strip(),
        "category": form.category,
        "pricing": form.pricing,
        "tags": normalize_tags(form.tags),
        "ratingSum": 0,
        "ratingCount": 0,
        "commentCount": 0,
        "submittedBy": session.identity_id,
        "submittedByName": session.display_name,
        "submittedByPhoto": session.photo_url,
    }


class SubmissionWorkflow:
    """Writes new entries on behalf of the current session."""

    def __init__(self, store: EntryStore, session_manager: SessionManager | None = None):
        self._store = store
        self._sessions = session_manager

    async def submit(
        self,
        form: SubmissionForm | Mapping[str, Any],
        session: Session | None = None,
    ) -> str:
        """
        Submit a new entry.

        The form is never modified, so a failed submission can be retried
        as is.

        Args:
            form: What the user entered
            session: Submitter session; read from the session manager at
                call time when omitted

        Returns:
            The store-assigned entry id

        Raises:
            ValidationError: If name or description is blank, pricing is
                unknown, or a mapping form cannot be read
            SessionRequiredError: If no identity is established
            SubmissionError: If the store rejects the write
        """
        if not isinstance(form, SubmissionForm):
            form = parse_form(form)

        validate_form(form)

        if session is None and self._sessions is not None:
            session = self._sessions.session
        if session is None or not session.is_resolved:
            raise SessionRequiredError()

        document = build_entry_document(form, session)

        try:
            entry_id = await self._store.create(document)
        except Exception as e:
            logger.warning("submission: create failed for %r: %s", document["name"], e)
            raise SubmissionError("Failed to submit entry. Please try again.") from e

        logger.info("submission: created entry %s by %s", entry_id, session.identity_id)
        return entry_id

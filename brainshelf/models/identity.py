"""Identity and session models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

SessionState = Literal["unresolved", "anonymous", "authenticated"]


class Identity(BaseModel):
    """An identity record as reported by the identity provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    is_anonymous: bool = True
    display_name: str | None = None
    photo_url: str | None = None
    created_at: datetime | None = None


class Session(BaseModel):
    """
    The current session as seen by the app.

    Exactly one state holds at a time. identity_id is set for every state
    except "unresolved".
    """

    model_config = ConfigDict(frozen=True)

    state: SessionState = "unresolved"
    identity_id: str | None = None
    is_anonymous: bool = True
    display_name: str | None = None
    photo_url: str | None = None

    @classmethod
    def unresolved(cls) -> Session:
        return cls()

    @classmethod
    def from_identity(cls, identity: Identity | None) -> Session:
        """Map a provider identity report to a session. None means no identity."""
        if identity is None:
            return cls.unresolved()
        return cls(
            state="anonymous" if identity.is_anonymous else "authenticated",
            identity_id=identity.id,
            is_anonymous=identity.is_anonymous,
            # Display fields only exist for named identities
            display_name=None if identity.is_anonymous else identity.display_name,
            photo_url=None if identity.is_anonymous else identity.photo_url,
        )

    @property
    def is_resolved(self) -> bool:
        return self.state != "unresolved"

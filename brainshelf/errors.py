"""
Error taxonomy for Brainshelf.

Every failure coming out of a collaborator (store, identity provider) is
caught at the component boundary and re-raised as one of these.
"""

from __future__ import annotations


class BrainshelfError(Exception):
    """Base class for all Brainshelf errors."""


class ValidationError(BrainshelfError):
    """Submission input failed local validation. No remote call was made."""

    def __init__(self, missing_fields: list[str], message: str | None = None):
        self.missing_fields = list(missing_fields)
        if message is None:
            names = " and ".join(self.missing_fields).capitalize()
            verb = "is" if len(self.missing_fields) == 1 else "are"
            message = f"{names} {verb} required."
        super().__init__(message)


class SessionRequiredError(BrainshelfError):
    """A gated action was attempted while no identity is established."""

    def __init__(self, message: str = "Sign in required. Continue as a guest to proceed."):
        super().__init__(message)


class IdentityProviderError(BrainshelfError):
    """The identity provider rejected a request. Safe to retry."""


class SubmissionError(BrainshelfError):
    """The remote store rejected a new entry. The form is left intact."""


class SubscriptionError(BrainshelfError):
    """The live subscription to the remote collection failed."""

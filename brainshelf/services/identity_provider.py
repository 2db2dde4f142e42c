"""
Identity provider adapters.

The provider issues anonymous or named identities and reports every
identity change (initial resolution, sign-in, sign-out) to its listeners.
A listener registered after the first resolution is called right away
with the current identity.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from uuid import uuid4

from brainshelf.auth import create_identity_token, decode_identity_token
from brainshelf.models.identity import Identity
from brainshelf.repos.identity_repo import IdentityRepo

logger = logging.getLogger(__name__)

IdentityCallback = Callable[[Identity | None], None]


class IdentityProvider:
    """
    Abstract identity provider.

    Subclasses implement create_anonymous_identity() and destroy_identity()
    and call _emit() whenever the current identity changes.
    """

    def __init__(self) -> None:
        self._listeners: dict[int, IdentityCallback] = {}
        self._next_token = 0
        self._current: Identity | None = None
        self._resolved = False

    @property
    def current(self) -> Identity | None:
        return self._current

    def on_identity_change(self, callback: IdentityCallback) -> Callable[[], None]:
        """
        Register for identity changes.

        Returns:
            Unsubscribe handle
        """
        self._next_token += 1
        token = self._next_token
        self._listeners[token] = callback

        if self._resolved:
            callback(self._current)

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    async def create_anonymous_identity(self) -> None:
        raise NotImplementedError

    async def destroy_identity(self) -> None:
        raise NotImplementedError

    def _emit(self, identity: Identity | None) -> None:
        self._current = identity
        self._resolved = True
        for callback in list(self._listeners.values()):
            try:
                callback(identity)
            except Exception:
                logger.exception("identity_provider: listener failed")


class MemoryIdentityProvider(IdentityProvider):
    """
    In-memory provider for testing and local runs.

    Resolves immediately to `initial` (no identity by default). Set
    create_error or destroy_error to make the next calls fail.
    """

    def __init__(self, initial: Identity | None = None, resolved: bool = True):
        super().__init__()
        self.create_error: Exception | None = None
        self.destroy_error: Exception | None = None
        self.create_calls = 0
        if resolved:
            self._emit(initial)

    async def create_anonymous_identity(self) -> None:
        self.create_calls += 1
        if self.create_error is not None:
            raise self.create_error
        self._emit(Identity(id=str(uuid4()), is_anonymous=True))

    async def destroy_identity(self) -> None:
        if self.destroy_error is not None:
            raise self.destroy_error
        self._emit(None)

    def sign_in(self, identity: Identity) -> None:
        """Report a sign-in, as a provider would after an external login flow."""
        self._emit(identity)


class TokenIdentityProvider(IdentityProvider):
    """
    Provider backed by the identities table and signed tokens.

    Call restore() once at startup with the token saved from the previous
    run (or None); that is the initial resolution. The current token is
    exposed as `token` for the host app to persist.
    """

    def __init__(self, repo: IdentityRepo | None = None):
        super().__init__()
        self._repo = repo or IdentityRepo()
        self.token: str | None = None

    async def restore(self, token: str | None) -> Identity | None:
        """
        Resolve the identity carried by a saved token.

        An invalid, expired, or dangling token resolves to no identity.

        Args:
            token: Token from a previous run, or None

        Returns:
            The restored Identity, or None
        """
        identity: Identity | None = None
        if token:
            try:
                payload = decode_identity_token(token)
                identity = await self._repo.get(payload["sub"])
            except Exception as e:
                logger.warning("identity_provider: could not restore session: %s", e)
            if identity is None:
                token = None

        self.token = token
        self._emit(identity)
        return identity

    async def create_anonymous_identity(self) -> None:
        identity = await self._repo.create_anonymous()
        self.token = create_identity_token(identity.id, is_anonymous=True)
        logger.info("identity_provider: issued anonymous identity %s", identity.id)
        self._emit(identity)

    async def sign_in_named(self, display_name: str, photo_url: str | None = None) -> Identity:
        """Create a named identity and sign in with it."""
        identity = await self._repo.create_named(display_name, photo_url)
        self.token = create_identity_token(identity.id, is_anonymous=False)
        logger.info("identity_provider: signed in named identity %s", identity.id)
        self._emit(identity)
        return identity

    async def destroy_identity(self) -> None:
        self.token = None
        self._emit(None)

"""
Session manager.

Tracks the identity reported by the identity provider and gates
write-capable operations. Not a singleton: create one per app and pass it
to whatever needs the session.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from brainshelf.config import settings
from brainshelf.errors import IdentityProviderError, SessionRequiredError
from brainshelf.models.identity import Identity, Session
from brainshelf.services.identity_provider import IdentityProvider

logger = logging.getLogger(__name__)

SessionCallback = Callable[[Session], None]


class SessionManager:
    """
    Owns the current Session.

    Two login variants:
    - gate-on-demand (default): the session stays unresolved until a gated
      action asks for a login through request_anonymous_login().
    - auto_anonymous=True: whenever the provider reports no identity, an
      anonymous identity is requested right away.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        auto_anonymous: bool = False,
        resolve_timeout: float | None = None,
    ):
        self._provider = provider
        self._auto_anonymous = auto_anonymous
        self._resolve_timeout = resolve_timeout or settings.IDENTITY_RESOLVE_TIMEOUT_SECONDS
        self._session = Session.unresolved()
        self._listeners: dict[int, SessionCallback] = {}
        self._next_token = 0
        self._unsubscribe_provider: Callable[[], None] | None = None
        self._login: asyncio.Future[Session] | None = None
        self._auto_task: asyncio.Task | None = None
        self.last_error: IdentityProviderError | None = None

    @property
    def session(self) -> Session:
        """The current session, read fresh on every access."""
        return self._session

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Start listening to the identity provider."""
        if self._unsubscribe_provider is not None:
            return
        self._unsubscribe_provider = self._provider.on_identity_change(self._handle_identity)

    def teardown(self) -> None:
        """Stop listening to the identity provider."""
        if self._unsubscribe_provider is not None:
            self._unsubscribe_provider()
            self._unsubscribe_provider = None
        if self._auto_task is not None:
            self._auto_task.cancel()
            self._auto_task = None

    def on_identity_change(self, callback: SessionCallback) -> Callable[[], None]:
        """
        Call back with the new Session on every identity change.

        Returns:
            Unsubscribe handle
        """
        self._next_token += 1
        token = self._next_token
        self._listeners[token] = callback

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def require_session(self) -> Session:
        """
        Return the current session.

        Raises:
            SessionRequiredError: If no identity is established
        """
        if not self._session.is_resolved:
            raise SessionRequiredError()
        return self._session

    async def request_anonymous_login(self) -> Session:
        """
        Make sure an identity exists, asking for an anonymous one if needed.

        A no-op when a session already exists. Concurrent calls share one
        provider request.

        Returns:
            The resolved Session

        Raises:
            IdentityProviderError: If the provider rejects the request or
                never reports the new identity
        """
        if self._session.is_resolved:
            return self._session
        if self._login is not None:
            return await asyncio.shield(self._login)

        loop = asyncio.get_running_loop()
        self._login = loop.create_future()
        login = self._login
        try:
            await self._provider.create_anonymous_identity()
            return await asyncio.wait_for(asyncio.shield(login), timeout=self._resolve_timeout)
        except TimeoutError as e:
            error = IdentityProviderError("Sign-in did not complete. Please try again.")
            self._fail_login(login, error)
            raise error from e
        except IdentityProviderError as e:
            self._fail_login(login, e)
            raise
        except Exception as e:
            logger.warning("session: anonymous sign-in failed: %s", e)
            error = IdentityProviderError("Could not sign in as guest. Please try again.")
            self._fail_login(login, error)
            raise error from e
        finally:
            if self._login is login:
                self._login = None

    async def logout(self) -> None:
        """
        Tear down the current identity.

        Raises:
            IdentityProviderError: If the provider rejects the request
        """
        try:
            await self._provider.destroy_identity()
        except Exception as e:
            logger.warning("session: sign-out failed: %s", e)
            raise IdentityProviderError("Could not sign out. Please try again.") from e

    # ------------------------------------------------------------------
    # Provider events
    # ------------------------------------------------------------------

    def _handle_identity(self, identity: Identity | None) -> None:
        previous = self._session
        self._session = Session.from_identity(identity)
        if previous.state != self._session.state:
            logger.info("session: %s -> %s", previous.state, self._session.state)

        if self._session.is_resolved:
            self.last_error = None
            if self._login is not None and not self._login.done():
                self._login.set_result(self._session)

        for callback in list(self._listeners.values()):
            try:
                callback(self._session)
            except Exception:
                logger.exception("session: listener failed")

        if not self._session.is_resolved and self._auto_anonymous:
            self._schedule_auto_login()

    def _schedule_auto_login(self) -> None:
        if self._login is not None or (self._auto_task is not None and not self._auto_task.done()):
            return
        self._auto_task = asyncio.get_running_loop().create_task(self._auto_login())

    async def _auto_login(self) -> None:
        try:
            await self.request_anonymous_login()
        except IdentityProviderError as e:
            # Nobody is waiting on this call; keep the error for the UI
            self.last_error = e

    def _fail_login(self, login: asyncio.Future, error: IdentityProviderError) -> None:
        self.last_error = error
        if not login.done():
            login.set_exception(error)
            # Mark retrieved so an unshared future does not log at GC
            login.exception()

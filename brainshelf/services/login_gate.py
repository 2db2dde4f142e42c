"""
Login gate for write-capable actions.

Runs an action with the current session, asking the user to continue as a
guest first when there is none, then retrying the action automatically.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from brainshelf.errors import SessionRequiredError
from brainshelf.models.identity import Session
from brainshelf.services.session_manager import SessionManager

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "Continue as a guest to proceed."

ConfirmCallback = Callable[[str], bool | Awaitable[bool]]
GatedAction = Callable[[Session], Any]


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class LoginGate:
    """
    Gate-on-demand login.

    `confirm` shows the "sign in required" prompt and returns whether the
    user chose to continue as a guest.
    """

    def __init__(self, session_manager: SessionManager, confirm: ConfirmCallback):
        self._sessions = session_manager
        self._confirm = confirm

    async def ensure_session(self, message: str | None = None) -> Session:
        """
        Return the current session, prompting for a guest login if needed.

        Raises:
            SessionRequiredError: If the user declines
            IdentityProviderError: If the guest login fails
        """
        session = self._sessions.session
        if session.is_resolved:
            return session

        if not await _resolve(self._confirm(message or DEFAULT_PROMPT)):
            raise SessionRequiredError(message or DEFAULT_PROMPT)
        return await self._sessions.request_anonymous_login()

    async def run(self, action: GatedAction, message: str | None = None) -> Any:
        """
        Run action(session) behind the gate.

        If the action itself finds the session gone (for example after a
        sign-out in between), the user is prompted again and the action is
        retried once.

        Returns:
            Whatever the action returns
        """
        session = await self.ensure_session(message)
        try:
            return await _resolve(action(session))
        except SessionRequiredError:
            logger.info("login_gate: session lost during action, retrying after login")
            session = await self.ensure_session(message)
            return await _resolve(action(session))

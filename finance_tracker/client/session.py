"""Explicit sign-in state for API consumers"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Iterator, List, Optional

from finance_tracker.client.api_client import FinanceTrackerClient
from finance_tracker.domain.models import User

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    SIGNED_OUT = "signed_out"
    SIGNED_IN = "signed_in"


SessionListener = Callable[[SessionState, Optional[User]], None]


class AuthSession:
    """
    signed_out -> signed_in -> signed_out, driven by explicit calls.

    Listeners are called synchronously after every transition with the new
    state and user. subscribe() returns the matching unsubscribe callable.
    """

    def __init__(self, api: FinanceTrackerClient):
        self.api = api
        self._state = SessionState.SIGNED_OUT
        self._user: Optional[User] = None
        self._listeners: List[SessionListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def is_signed_in(self) -> bool:
        return self._state is SessionState.SIGNED_IN

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @contextmanager
    def listening(self, listener: SessionListener) -> Iterator[None]:
        """Subscribe for the duration of a with-block"""
        unsubscribe = self.subscribe(listener)
        try:
            yield
        finally:
            unsubscribe()

    def _transition(self, state: SessionState, user: Optional[User]) -> None:
        self._state = state
        self._user = user
        for listener in list(self._listeners):
            try:
                listener(state, user)
            except Exception:
                logger.exception("Session listener failed", extra={"state": state.value})

    async def sign_in(self, token: str) -> User:
        """
        Verify the token with the API and enter signed_in.

        On failure the session stays (or returns to) signed_out and the
        error propagates.
        """
        previous_token = self.api.token
        self.api.token = token
        try:
            user = await self.api.verify()
        except Exception:
            self.api.token = previous_token if self.is_signed_in else None
            raise

        self._transition(SessionState.SIGNED_IN, user)
        return user

    async def sign_out(self) -> None:
        if not self.is_signed_in:
            return
        try:
            await self.api.logout()
        finally:
            self.api.token = None
            self._transition(SessionState.SIGNED_OUT, None)

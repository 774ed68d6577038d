from __future__ import annotations

from dataclasses import replace
from typing import Callable

from domain.models import Role, Session, User
from domain.ports import LoggerPort, SessionRepositoryPort

SessionListener = Callable[[Session], None]


def with_identity(state: Session, user: User) -> Session:
    return replace(state, identity=user)


def without_identity(state: Session) -> Session:
    return replace(state, identity=None)


def with_loading(state: Session, flag: bool) -> Session:
    return replace(state, is_loading=flag)


class SessionStore:
    """
    Holds the current ``Session`` and exposes its three named mutations.

    Every mutation computes a new immutable ``Session`` with a pure transform
    and swaps it in as one assignment, so readers never observe a partial
    identity. Listeners run after each swap.
    """

    def __init__(
        self,
        *,
        repository: SessionRepositoryPort | None = None,
        logger: LoggerPort | None = None,
    ) -> None:
        self._state = Session()
        self._repository = repository
        self._logger = logger
        self._listeners: list[SessionListener] = []

    @property
    def state(self) -> Session:
        return self._state

    @property
    def identity(self) -> User | None:
        return self._state.identity

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_authenticated(self) -> bool:
        return self._state.identity is not None

    @property
    def role(self) -> Role | None:
        identity = self._state.identity
        return identity.role if identity is not None else None

    def set_identity(self, user: User) -> None:
        # Persist before swapping so a failed save leaves the session as it was.
        if self._repository is not None:
            self._repository.save_identity(user)
        self._replace(with_identity(self._state, user))

    def clear_identity(self) -> None:
        if self._repository is not None:
            self._repository.clear_identity()
        self._replace(without_identity(self._state))

    def set_loading(self, flag: bool) -> None:
        self._replace(with_loading(self._state, flag))

    def rehydrate(self) -> bool:
        """Restore a persisted identity. Returns ``True`` if one was loaded."""
        if self._repository is None:
            return False
        user = self._repository.load_identity()
        if user is None:
            return False
        self._replace(with_identity(self._state, user))
        if self._logger is not None:
            self._logger.info("session_rehydrated", user_id=user.id, role=user.role.value)
        return True

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _replace(self, new_state: Session) -> None:
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

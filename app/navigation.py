from __future__ import annotations

from typing import Callable

from domain.services import LANDING_PATH, RouteGuard

NavigationListener = Callable[[str], None]


class HistoryNavigator:
    """
    ``NavigatorPort`` that keeps a back stack of rendered paths.

    Every requested path goes through the ``RouteGuard`` first, so the
    current path is always one the session may render.
    """

    def __init__(self, guard: RouteGuard, *, start_path: str = LANDING_PATH) -> None:
        self._guard = guard
        self._history: list[str] = [guard.resolve(start_path)]
        self._listeners: list[NavigationListener] = []

    @property
    def current_path(self) -> str:
        return self._history[-1]

    @property
    def history(self) -> tuple[str, ...]:
        return tuple(self._history)

    def navigate(self, path: str) -> str:
        target = self._guard.resolve(path)
        if target != self._history[-1]:
            self._history.append(target)
        for listener in list(self._listeners):
            listener(target)
        return target

    def refresh(self) -> str:
        """Re-check the current path, e.g. after the session changed."""
        return self.navigate(self.current_path)

    def back(self) -> str:
        if len(self._history) > 1:
            self._history.pop()
        return self.refresh()

    def on_navigate(self, listener: NavigationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

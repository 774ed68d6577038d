"""Application/UI layer package."""

from .facade import PortalFacade
from .navigation import HistoryNavigator

__all__ = ["PortalFacade", "HistoryNavigator"]

from .console_notifier import ConsoleNotifier

__all__ = ["ConsoleNotifier"]

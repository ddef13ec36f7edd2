from imapnotify.infrastructure.notify.console import ConsoleNotifier

__all__ = ["ConsoleNotifier"]

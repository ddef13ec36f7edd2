"""Application layer - the per-message decision loop and its ports."""

from imapnotify.application.use_cases.notify_new_messages import (
    NotifyNewMessagesUseCase,
    RunSummary,
)

__all__ = [
    "NotifyNewMessagesUseCase",
    "RunSummary",
]

from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class InvalidOperationError(AppError):
    """The caller's role does not allow this action (e.g. an operator selecting a language)."""


class InvalidArgumentError(AppError):
    pass


class ConflictError(AppError):
    pass


class StorageError(AppError):
    """Failure reported by a backing store. Never retried by the core."""

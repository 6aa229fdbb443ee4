"""Exception types raised by the editing engine."""

from __future__ import annotations


class PageBuilderError(Exception):
    """Base class for every error raised by :mod:`pagebuilder`."""


class ValidationError(PageBuilderError):
    """Input rejected before any collaborator is contacted."""


class DraftStateError(PageBuilderError):
    """A draft mutation was attempted that the current state does not allow."""


class RegenerationPendingError(PageBuilderError):
    """A regeneration request is already in flight for this editor."""


class CollaboratorError(PageBuilderError):
    """An external collaborator (AI service, persistence) failed.

    ``message`` is the text shown to the user in the inline error banner.
    """

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class PageFormatError(PageBuilderError):
    """A page file could not be read or parsed."""


def user_message(exc: BaseException, fallback: str) -> str:
    """Extract the text to show for ``exc``, or ``fallback`` when it has none."""
    if isinstance(exc, CollaboratorError):
        return exc.message or fallback
    text = str(exc).strip()
    return text or fallback

"""Collaborator error types.

Each carries a short message that is safe to show to the user as-is.
"""


class TimelineError(Exception):
    """Base class for failures raised outside the pure timeline core."""


class SheetImportError(TimelineError):
    """Spreadsheet fetch or parse failed."""


class GenerationError(TimelineError):
    """AI generation request failed or returned unusable output."""


class AuthError(TimelineError):
    """Sign-in failed or the bearer token is unknown."""


class StaleRequestError(TimelineError):
    """A newer import or generation started before this one finished."""

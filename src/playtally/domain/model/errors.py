"""Error taxonomy shared by the consolidation core and its collaborators."""

from __future__ import annotations


class ValidationError(ValueError):
    """A raw record is malformed or carries a negative magnitude.

    Fatal for the current consolidation call; raised before any clustering so nothing
    is partially applied.
    """

    def __init__(self, message: str, *, entity_id: str | None = None) -> None:
        super().__init__(message)
        self.entity_id = entity_id


class SourceUnavailableError(RuntimeError):
    """The fetch source or the oracle transport could not be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedOracleResponseError(ValueError):
    """The classifier's text did not contain a usable decision payload."""

    def __init__(self, message: str, *, raw_response: str) -> None:
        super().__init__(message)
        self.raw_response = raw_response

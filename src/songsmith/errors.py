# src/songsmith/errors.py


class SongsmithError(Exception):
    """Base class for every failure the generation flow reports."""


class ValidationError(SongsmithError):
    """
    The client request broke one of the documented constraints.

    `code` is the machine-readable error sent back to the caller
    (e.g. "invalid_genre"); `message` names the field and, where there is a
    fixed set, the accepted values.
    """

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class AuthError(SongsmithError):
    """The OAuth token exchange failed."""


class UpstreamError(SongsmithError):
    """The chat-completion call failed or returned nothing usable."""

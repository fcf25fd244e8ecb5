"""Exceptions raised or returned by the MISP client.

Reportable errors derive from ``MispError`` and are handed back to the caller
alongside the (possibly empty) result. Construction errors are raised.
"""


class MispError(Exception):
    """Base class for reportable MISP client errors."""


class MispRemoteError(MispError):
    """The MISP server answered with a status other than 200.

    Args:
        status_code: HTTP status returned by the server.
        message: Raw response body, verbatim.
    """

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(status_code, message)
        self.status_code = status_code
        self.message = message

    def __str__(self) -> str:
        return f"MISP ERROR (HTTP {self.status_code}) : {self.message}"


class MispDecodeError(MispError):
    """A 200 response body did not match the expected envelope shape."""


class UnknownQueryError(MispError, TypeError):
    """The query is neither an ``EventQuery`` nor an ``AttributeQuery``."""


class UnknownProtocolError(ValueError):
    """Connection scheme is not ``http`` or ``https``."""

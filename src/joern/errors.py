"""Exceptions raised by the Joern client."""

from __future__ import annotations


class JoernError(Exception):
    """Base class for every error raised by this package."""


class ConnectionError(JoernError):  # noqa: A001
    """The WebSocket push channel could not be dialed or closed."""


class TransportError(JoernError):
    """An HTTP exchange failed before the server answered with a status."""


class CancellationError(TransportError):
    """The cancel event was set before or during an HTTP exchange."""


class RemoteError(JoernError):
    """The server answered with a non-200 status.

    ``reason`` is the HTTP status line, e.g. ``"404 Not Found"``.
    """

    def __init__(
        self,
        reason: str,
        status_code: int | None = None,
        body: str = "",
    ):
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code
        self.body = body


class DecodeError(JoernError):
    """A response body did not match the expected shape."""

    def __init__(self, message: str, body: str = ""):
        super().__init__(message)
        self.body = body

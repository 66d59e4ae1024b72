"""
Error taxonomy.

Every failure of the client surfaces as one of these exceptions. Nothing is
retried; callers decide what to show to their users.
"""

from __future__ import annotations

from typing import Optional


class CampusNavigatorError(Exception):
    """Base class for all errors raised by campusnav."""


class InvalidQuery(CampusNavigatorError):
    """The request could not be built, nothing was sent."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"The query was invalid and not sent: {reason}")


class ResponseUnreadable(CampusNavigatorError):
    """No data, a malformed response or a network-layer error."""

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        msg = "The response data could not be read."
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class ServerStatus(CampusNavigatorError):
    """The server answered with a non-2xx status code."""

    def __init__(self, status: int, message: Optional[str] = None) -> None:
        self.status = status
        self.message = message
        if message:
            text = f"Server returned status code {status} and error: {message}"
        else:
            text = f"Server returned status code {status}"
        super().__init__(text)


class ServerReportedError(CampusNavigatorError):
    """2xx status, but the body is an error envelope like {"error": "..."}."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Server reported an error: {message}")


class ReEncodingFailed(CampusNavigatorError):
    def __init__(self) -> None:
        super().__init__("The received data had to be re-encoded before parsing, which failed.")


class DecodeFailed(CampusNavigatorError):
    """Well-formed bytes, but not the shape we expected."""

    def __init__(self, error: object) -> None:
        self.error = error
        super().__init__(f"The received data could not be decoded as JSON: {error}")


class InvalidResourcePath(CampusNavigatorError):
    """A URL or path does not match any known resource grammar."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"The URL to this specific resource could not be read: {path}")

"""Errors raised while talking to the Gemini API."""

from __future__ import annotations


class GeminiResponseError(Exception):
    """A request to the Gemini API did not produce a usable reply."""


class RequestFailed(GeminiResponseError):
    """The HTTP request itself failed (connection, timeout, decoding)."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause))
        self.cause = cause


class StatusNotOk(GeminiResponseError):
    """The server answered with a non-success status; holds the response body."""

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.text = text


class GeminiResponseStreamError(Exception):
    """A chunk of a streamed reply could not be read."""


class StreamRequestFailed(GeminiResponseStreamError):
    """The underlying HTTP stream failed."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause))
        self.cause = cause


class InvalidResponseFormat(GeminiResponseStreamError):
    """A streamed chunk was not a valid response; holds the offending text."""

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.text = text
"""Finding files referenced in text and loading them as base64."""

from __future__ import annotations

import asyncio
import re
from base64 import b64encode
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import httpx

GuessMimeType = Callable[[str], str]
DecideDownload = Callable[[httpx.Headers], bool]
RegexLike = Union[str, "re.Pattern[str]"]


@dataclass(frozen=True)
class MatchedFile:
    """A regex match in the text and the file it points to, if it could be loaded.

    ``index`` and ``length`` locate the whole match in the text; ``mime_type``
    and ``base64`` are both ``None`` when the file could not be loaded.
    """

    index: int
    length: int
    mime_type: str | None = None
    base64: str | None = None


def _compile(regex: RegexLike) -> re.Pattern[str]:
    pattern = re.compile(regex) if isinstance(regex, str) else regex
    if pattern.groups < 1:
        raise ValueError("regex must have a capture group holding the file URL")
    return pattern


def _is_web_url(url: str) -> bool:
    return url.startswith("https://") or url.startswith("http://")


async def _load_remote(
    client: httpx.AsyncClient,
    url: str,
    guess_mime_type: GuessMimeType,
    decide_download: DecideDownload,
) -> tuple[str | None, str | None]:
    try:
        async with client.stream("GET", url) as response:
            if not decide_download(response.headers):
                return None, None
            mime_type = response.headers.get("Content-Type")
            data = await response.aread()
    except (httpx.HTTPError, httpx.InvalidURL):
        return None, None
    if mime_type is None:
        mime_type = str(guess_mime_type(url))
    return mime_type, b64encode(data).decode("ascii")


async def _load_local(url: str, guess_mime_type: GuessMimeType) -> tuple[str | None, str | None]:
    try:
        data = await asyncio.to_thread(Path(url).read_bytes)
    except (OSError, ValueError):
        return None, None
    return str(guess_mime_type(url)), b64encode(data).decode("ascii")


async def get_file_base64s(
    markdown: str,
    regex: RegexLike,
    guess_mime_type: GuessMimeType,
    decide_download: DecideDownload,
    timeout: float,
) -> list[MatchedFile]:
    """Load every file whose URL is the first capture group of a ``regex`` match.

    URLs starting with ``http://`` or ``https://`` are downloaded when
    ``decide_download`` accepts the response headers; anything else is read
    from the file system. ``guess_mime_type`` gives the MIME type of local
    files and of downloads without a ``Content-Type`` header. Results keep
    the order of the matches. ``timeout`` is in seconds.
    """
    pattern = _compile(regex)
    matches = list(pattern.finditer(markdown))
    if any(match.group(1) is None for match in matches):
        raise ValueError("the first capture group of regex did not match a URL")

    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:

        async def load(match: re.Match[str]) -> MatchedFile:
            url = match.group(1)
            if _is_web_url(url):
                mime_type, encoded = await _load_remote(
                    client, url, guess_mime_type, decide_download
                )
            else:
                mime_type, encoded = await _load_local(url, guess_mime_type)
            return MatchedFile(
                index=match.start(),
                length=match.end() - match.start(),
                mime_type=mime_type,
                base64=encoded,
            )

        results = await asyncio.gather(*(load(match) for match in matches))
    return list(results)
"""Turning markdown with image links into request parts."""

from __future__ import annotations

import re
from collections.abc import Sequence

from .files import DecideDownload, GuessMimeType, MatchedFile, RegexLike, get_file_base64s
from .request import InlineData, Part, Text

DEFAULT_IMAGE_REGEX = re.compile(r"!\[.*?].?\((.*?)\)", re.DOTALL)
REQ_TIMEOUT = 10.0


def _guess_png(url: str) -> str:
    return "image/png"


def _always_download(headers: object) -> bool:
    return True


class MarkdownToPartsBuilder:
    """Configures how a :class:`MarkdownToParts` finds and loads files."""

    def __init__(self) -> None:
        self._regex: RegexLike | None = None
        self._guess_mime_type: GuessMimeType | None = None
        self._decide_download: DecideDownload | None = None
        self._timeout: float | None = None

    def regex(self, regex: RegexLike) -> MarkdownToPartsBuilder:
        """Use ``regex``, whose first capture group is the file URL."""
        self._regex = regex
        return self

    def guess_mime_type(self, guess_mime_type: GuessMimeType) -> MarkdownToPartsBuilder:
        """MIME type for local files and downloads without a Content-Type header."""
        self._guess_mime_type = guess_mime_type
        return self

    def decide_download(self, decide_download: DecideDownload) -> MarkdownToPartsBuilder:
        """Skip downloads whose response headers this rejects."""
        self._decide_download = decide_download
        return self

    def timeout(self, timeout: float) -> MarkdownToPartsBuilder:
        """Download timeout in seconds."""
        self._timeout = timeout
        return self

    async def build(self, markdown: str) -> MarkdownToParts:
        files = await get_file_base64s(
            markdown,
            DEFAULT_IMAGE_REGEX if self._regex is None else self._regex,
            self._guess_mime_type or _guess_png,
            self._decide_download or _always_download,
            REQ_TIMEOUT if self._timeout is None else self._timeout,
        )
        return MarkdownToParts(markdown, files)


class MarkdownToParts:
    """Markdown split into text and inline-data parts.

    ``![image](link)`` makes the linked file visible to the model; ``link`` may
    be a URL or a file path. Files that cannot be loaded stay as plain text.
    """

    def __init__(self, markdown: str, files: Sequence[MatchedFile]) -> None:
        self.markdown = markdown
        self.files = list(files)

    @classmethod
    def builder(cls) -> MarkdownToPartsBuilder:
        return MarkdownToPartsBuilder()

    @classmethod
    async def from_regex_checked(
        cls,
        markdown: str,
        regex: RegexLike,
        guess_mime_type: GuessMimeType = _guess_png,
        decide_download: DecideDownload = _always_download,
    ) -> MarkdownToParts:
        files = await get_file_base64s(
            markdown, regex, guess_mime_type, decide_download, REQ_TIMEOUT
        )
        return cls(markdown, files)

    @classmethod
    async def from_regex(
        cls, markdown: str, regex: RegexLike, guess_mime_type: GuessMimeType = _guess_png
    ) -> MarkdownToParts:
        return await cls.from_regex_checked(markdown, regex, guess_mime_type, _always_download)

    @classmethod
    async def new_checked(
        cls,
        markdown: str,
        guess_mime_type: GuessMimeType = _guess_png,
        decide_download: DecideDownload = _always_download,
    ) -> MarkdownToParts:
        return await cls.from_regex_checked(
            markdown, DEFAULT_IMAGE_REGEX, guess_mime_type, decide_download
        )

    @classmethod
    async def new(
        cls, markdown: str, guess_mime_type: GuessMimeType = _guess_png
    ) -> MarkdownToParts:
        return await cls.new_checked(markdown, guess_mime_type, _always_download)

    def process(self) -> list[Part]:
        """Text up to and including each loaded file's match, then the file's data."""
        parts: list[Part] = []
        remaining = self.markdown
        removed_length = 0
        for file in self.files:
            if file.mime_type is None or file.base64 is None:
                continue
            end = file.index + file.length - removed_length
            parts.append(Text(remaining[:end]))
            parts.append(InlineData(file.mime_type, file.base64))
            remaining = remaining[end:]
            removed_length += end
        if remaining:
            parts.append(Text(remaining))
        return parts
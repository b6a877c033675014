"""Replies of the Gemini API, plain and streamed."""

from __future__ import annotations

import json as _json
from collections.abc import AsyncIterable, Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

import httpx

from .errors import InvalidResponseFormat, StreamRequestFailed
from .request import Chat, Part, Text
from .sessions import Session

T = TypeVar("T")


class FinishReason(str, Enum):
    """Why the model stopped generating."""

    FINISH_REASON_UNSPECIFIED = "FINISH_REASON_UNSPECIFIED"
    STOP = "STOP"
    MAX_TOKENS = "MAX_TOKENS"
    SAFETY = "SAFETY"
    RECITATION = "RECITATION"
    LANGUAGE = "LANGUAGE"
    OTHER = "OTHER"
    BLOCKLIST = "BLOCKLIST"
    PROHIBITED_CONTENT = "PROHIBITED_CONTENT"
    SPII = "SPII"
    MALFORMED_FUNCTION_CALL = "MALFORMED_FUNCTION_CALL"
    IMAGE_SAFETY = "IMAGE_SAFETY"


def _required(data: Mapping[str, Any], name: str) -> Any:
    if name not in data:
        raise ValueError(f"missing field {name!r}")
    return data[name]


@dataclass
class Candidate:
    content: Chat
    finish_reason: FinishReason | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Candidate:
        if not isinstance(data, Mapping):
            raise ValueError("a candidate must be an object")
        reason = data.get("finishReason")
        return cls(
            content=Chat.from_dict(_required(data, "content")),
            finish_reason=None if reason is None else FinishReason(reason),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content.to_dict(),
            "finishReason": None if self.finish_reason is None else self.finish_reason.value,
        }


def extract_text(parts: Sequence[Part], separator: str = "") -> str:
    """Concatenate the text parts, each followed by ``separator``."""
    return "".join(part.text + separator for part in parts if isinstance(part, Text))


def parse_json(parts: Sequence[Part]) -> Any:
    """Parse the text of ``parts`` as JSON, undoing escaped quotes and newlines."""
    unescaped = extract_text(parts, "").replace('\\"', '"').replace("\\n", "\n")
    return _json.loads(unescaped)


@dataclass
class GeminiResponse:
    candidates: list[Candidate]
    usage_metadata: Any
    model_version: str
    prompt_feedback: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GeminiResponse:
        if not isinstance(data, Mapping):
            raise ValueError("a response must be an object")
        candidates = _required(data, "candidates")
        if not isinstance(candidates, list):
            raise ValueError("field 'candidates' must be a list")
        model_version = _required(data, "modelVersion")
        if not isinstance(model_version, str):
            raise ValueError("field 'modelVersion' must be a string")
        return cls(
            candidates=[Candidate.from_dict(c) for c in candidates],
            usage_metadata=_required(data, "usageMetadata"),
            model_version=model_version,
            prompt_feedback=data.get("promptFeedback"),
        )

    @classmethod
    def from_json(cls, text: str) -> GeminiResponse:
        return cls.from_dict(_json.loads(text))

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidates": [c.to_dict() for c in self.candidates],
            "usageMetadata": self.usage_metadata,
            "modelVersion": self.model_version,
            "promptFeedback": self.prompt_feedback,
        }

    @property
    def parts(self) -> list[Part]:
        """Parts of the first candidate."""
        return self.candidates[0].content.parts

    def text(self, separator: str = "") -> str:
        return extract_text(self.parts, separator)

    def json(self) -> Any:
        return parse_json(self.parts)


class GeminiResponseStream(Generic[T]):
    """Async iterator over a streamed reply.

    Every chunk updates the session, and ``data_extractor(session, response)``
    gives the value yielded for it. The stream must be read to the end for the
    whole reply to be stored in the session.
    """

    def __init__(
        self,
        chunks: AsyncIterable[bytes],
        session: Session,
        data_extractor: Callable[[Session, GeminiResponse], T],
    ) -> None:
        self._chunks = aiter(chunks)
        self._session = session
        self._data_extractor = data_extractor

    def __aiter__(self) -> GeminiResponseStream[T]:
        return self

    async def __anext__(self) -> T:
        try:
            chunk = await anext(self._chunks)
        except StopAsyncIteration:
            raise
        except (httpx.HTTPError, OSError) as exc:
            raise StreamRequestFailed(exc) from exc

        if isinstance(chunk, (bytes, bytearray)):
            text = bytes(chunk).decode("utf-8", errors="replace")
        else:
            text = str(chunk)
        if text == "]":
            raise StopAsyncIteration
        json_string = text[1:].strip()
        try:
            response = GeminiResponse.from_json(json_string)
        except ValueError as exc:
            raise InvalidResponseFormat(json_string) from exc
        self._session.update(response)
        return self._data_extractor(self._session, response)

    @property
    def session(self) -> Session:
        return self._session
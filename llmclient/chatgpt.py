"""Minimal client for the OpenAI chat completions API."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

BASE_URL = "https://api.openai.com/v1/chat/completions"


class Role(str, Enum):
    """Author of a chat message."""

    USER = "user"
    DEVELOPER = "developer"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Chat:
    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


def openai_body(model: str, messages: Iterable[Chat]) -> dict[str, Any]:
    """Build the JSON body of a chat completions request."""
    return {"model": model, "messages": [message.to_dict() for message in messages]}


def _index(value: Any, key: str | int) -> Any:
    if isinstance(key, int):
        if isinstance(value, list) and 0 <= key < len(value):
            return value[key]
        return None
    if isinstance(value, dict):
        return value.get(key)
    return None


class ChatGpt:
    """Asks single questions of an OpenAI chat model."""

    def __init__(
        self, api_key: str, model: str, client: httpx.AsyncClient | None = None
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._client = client

    def __repr__(self) -> str:
        return f"ChatGpt(model={self._model!r})"

    async def ask_string(self, question: str) -> str:
        """Ask ``question`` and return the reply content as JSON text.

        A string reply comes back quoted; a missing one comes back as ``null``.
        """
        body = openai_body(self._model, [Chat(Role.USER, question)])
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if self._client is not None:
            response = await self._client.post(BASE_URL, json=body, headers=headers)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(BASE_URL, json=body, headers=headers)
        data = response.json()
        content = data
        for key in ("choices", 0, "message", "content"):
            content = _index(content, key)
        return json.dumps(content, ensure_ascii=False, separators=(",", ":"))
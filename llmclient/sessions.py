"""Conversation history kept between requests."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from .request import Chat, Part, Role, Text, concatenate_parts

if TYPE_CHECKING:
    from .response import GeminiResponse


class Session:
    """A bounded history of user and model chats.

    ``history_limit`` is the total number of chats (user and model) kept;
    ``Session(2)`` keeps one question and one reply.
    """

    def __init__(self, history_limit: int, remember_reply: bool = True) -> None:
        if history_limit < 0:
            raise ValueError("history_limit must not be negative")
        self._history: deque[Chat] = deque()
        self._history_limit = history_limit
        self._chat_no = 0
        self.remember_reply = remember_reply

    def __repr__(self) -> str:
        return (
            f"Session(history_limit={self._history_limit}, chat_no={self._chat_no}, "
            f"remember_reply={self.remember_reply}, history={list(self._history)!r})"
        )

    @property
    def history(self) -> list[Chat]:
        """The stored chats, oldest first."""
        return list(self._history)

    @property
    def history_limit(self) -> int:
        return self._history_limit

    @property
    def chat_no(self) -> int:
        """Count of all chats ever added; halve it for question/reply pairs."""
        return self._chat_no

    def _add_chat(self, chat: Chat) -> Session:
        if self._history and self._history[-1].role == chat.role:
            concatenate_parts(self._history[-1].parts, chat.parts)
            return self
        self._history.append(chat)
        self._chat_no += 1
        if len(self._history) > self._history_limit:
            self._history.popleft()
        return self

    def ask(self, parts: Iterable[Part]) -> Session:
        """Add a user chat; merged into the previous one if that was also the user's."""
        return self._add_chat(Chat(Role.USER, list(parts)))

    def ask_string(self, prompt: str) -> Session:
        return self._add_chat(Chat(Role.USER, [Text(prompt)]))

    def reply(self, parts: Iterable[Part]) -> Session:
        return self._add_chat(Chat(Role.MODEL, list(parts)))

    def reply_string(self, prompt: str) -> Session:
        return self._add_chat(Chat(Role.MODEL, [Text(prompt)]))

    def update(self, response: GeminiResponse) -> list[Part] | None:
        """Record a model reply.

        When replies are not remembered, a trailing user question is dropped
        instead and ``None`` is returned.
        """
        if self.remember_reply:
            reply_parts = response.parts
            self._add_chat(Chat(Role.MODEL, list(reply_parts)))
            return reply_parts
        if self._history and self._history[-1].role == Role.USER:
            self._history.pop()
        return None

    def parts_at(self, chat_previous_no: int) -> list[Part] | None:
        """Parts of the ``chat_previous_no``-th last chat (1 is the last one)."""
        if not 1 <= chat_previous_no <= len(self._history):
            return None
        return self._history[len(self._history) - chat_previous_no].parts

    def last_message(self) -> list[Part] | None:
        return self._history[-1].parts if self._history else None

    def last_message_text(self, separator: str = "") -> str | None:
        """Text parts of the last chat, each followed by ``separator``."""
        parts = self.last_message()
        if parts is None:
            return None
        return "".join(part.text + separator for part in parts if isinstance(part, Text))

    def forget_last_conversation(self) -> tuple[Chat | None, Chat | None]:
        """Remove the last chat, and the user question before it if there is one.

        Returns the removed chats as ``(last, second_last)``.
        """
        last = self._history.pop() if self._history else None
        if self._history and self._history[-1].role == Role.USER:
            return last, self._history.pop()
        return last, None

    def to_dict(self) -> dict[str, Any]:
        return {
            "history": [chat.to_dict() for chat in self._history],
            "history_limit": self._history_limit,
            "chat_no": self._chat_no,
            "remember_reply": self.remember_reply,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Session:
        if not isinstance(data, Mapping):
            raise ValueError("a session must be an object")
        try:
            history = data["history"]
            limit = data["history_limit"]
            chat_no = data["chat_no"]
            remember = data["remember_reply"]
        except KeyError as exc:
            raise ValueError(f"missing field {exc.args[0]!r}") from exc
        if not isinstance(history, list):
            raise ValueError("field 'history' must be a list")
        for name, value in (("history_limit", limit), ("chat_no", chat_no)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"field {name!r} must be a non-negative integer")
        if not isinstance(remember, bool):
            raise ValueError("field 'remember_reply' must be a boolean")
        session = cls(limit, remember)
        session._history.extend(Chat.from_dict(chat) for chat in history)
        session._chat_no = chat_no
        return session
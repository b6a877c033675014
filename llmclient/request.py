"""Request-side types of the Gemini API and their JSON form."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class Role(str, Enum):
    """Author of a chat turn."""

    USER = "user"
    MODEL = "model"


class Language(str, Enum):
    """Language of generated executable code."""

    LANGUAGE_UNSPECIFIED = "LANGUAGE_UNSPECIFIED"
    PYTHON = "PYTHON"


class Outcome(str, Enum):
    """Outcome of a code execution."""

    OUTCOME_UNSPECIFIED = "OUTCOME_UNSPECIFIED"
    OUTCOME_OK = "OUTCOME_OK"
    OUTCOME_FAILED = "OUTCOME_FAILED"
    OUTCOME_DEADLINE_EXCEEDED = "OUTCOME_DEADLINE_EXCEEDED"


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class InlineData:
    mime_type: str
    data: str


@dataclass(frozen=True)
class ExecutableCode:
    language: Language
    code: str


@dataclass(frozen=True)
class CodeExecuteResult:
    outcome: Outcome
    output: str | None = None


@dataclass(frozen=True)
class FunctionCall:
    name: str
    args: Any = None
    id: str | None = None


@dataclass(frozen=True)
class FunctionResponse:
    name: str
    response: Any
    id: str | None = None


@dataclass(frozen=True)
class FileData:
    file_uri: str
    mime_type: str | None = None


Part = Union[
    Text, InlineData, ExecutableCode, CodeExecuteResult, FunctionCall, FunctionResponse, FileData
]

_MISSING = object()


def _field(data: Mapping[str, Any], *names: str, required: bool = True) -> Any:
    for name in names:
        if name in data:
            return data[name]
    if required:
        raise ValueError(f"missing field {names[0]!r}")
    return None


def _str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string")
    return value


def _opt_str(value: Any, name: str) -> str | None:
    return None if value is None else _str(value, name)


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} must be an object")
    return value


def _omit_none(**fields: Any) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


def part_to_dict(part: Part) -> dict[str, Any]:
    """Serialise a part to its tagged JSON object."""
    if isinstance(part, Text):
        return {"text": part.text}
    if isinstance(part, InlineData):
        return {"inline_data": {"mime_type": part.mime_type, "data": part.data}}
    if isinstance(part, ExecutableCode):
        return {"executable_code": {"language": part.language.value, "code": part.code}}
    if isinstance(part, CodeExecuteResult):
        return {
            "code_execution_result": _omit_none(outcome=part.outcome.value, output=part.output)
        }
    if isinstance(part, FunctionCall):
        return {"functionCall": _omit_none(id=part.id, name=part.name, args=part.args)}
    if isinstance(part, FunctionResponse):
        body = _omit_none(id=part.id, name=part.name)
        body["response"] = part.response
        return {"functionResponse": body}
    if isinstance(part, FileData):
        return {"file_data": _omit_none(mime_type=part.mime_type, file_uri=part.file_uri)}
    raise TypeError(f"not a part: {part!r}")


def _text(value: Any) -> Part:
    return Text(_str(value, "text"))


def _inline_data(value: Any) -> Part:
    body = _mapping(value, "inline_data")
    return InlineData(
        mime_type=_str(_field(body, "mime_type"), "mime_type"),
        data=_str(_field(body, "data"), "data"),
    )


def _executable_code(value: Any) -> Part:
    body = _mapping(value, "executable_code")
    return ExecutableCode(
        language=Language(_field(body, "language")),
        code=_str(_field(body, "code"), "code"),
    )


def _code_execution_result(value: Any) -> Part:
    body = _mapping(value, "code_execution_result")
    return CodeExecuteResult(
        outcome=Outcome(_field(body, "outcome")),
        output=_opt_str(_field(body, "output", required=False), "output"),
    )


def _function_call(value: Any) -> Part:
    body = _mapping(value, "functionCall")
    return FunctionCall(
        name=_str(_field(body, "name"), "name"),
        args=_field(body, "args", required=False),
        id=_opt_str(_field(body, "id", required=False), "id"),
    )


def _function_response(value: Any) -> Part:
    body = _mapping(value, "functionResponse")
    response = body.get("response", _MISSING)
    if response is _MISSING or response is None:
        raise ValueError("missing field 'response'")
    return FunctionResponse(
        name=_str(_field(body, "name"), "name"),
        response=response,
        id=_opt_str(_field(body, "id", required=False), "id"),
    )


def _file_data(value: Any) -> Part:
    body = _mapping(value, "file_data")
    return FileData(
        file_uri=_str(_field(body, "file_uri", "fileUri"), "file_uri"),
        mime_type=_opt_str(_field(body, "mime_type", "mimeType", required=False), "mime_type"),
    )


_PART_READERS = {
    "text": _text,
    "inline_data": _inline_data,
    "inlineData": _inline_data,
    "executable_code": _executable_code,
    "executableCode": _executable_code,
    "code_execution_result": _code_execution_result,
    "codeExecutionResult": _code_execution_result,
    "functionCall": _function_call,
    "functionResponse": _function_response,
    "file_data": _file_data,
    "fileData": _file_data,
}


def part_from_dict(data: Mapping[str, Any]) -> Part:
    """Read a part from its tagged JSON object (camelCase aliases accepted)."""
    body = _mapping(data, "a part")
    if len(body) != 1:
        raise ValueError("a part must have exactly one key")
    ((key, value),) = body.items()
    reader = _PART_READERS.get(key)
    if reader is None:
        raise ValueError(f"unknown part variant {key!r}")
    return reader(value)


@dataclass
class Chat:
    """One turn of a conversation."""

    role: Role
    parts: list[Part] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role.value, "parts": [part_to_dict(p) for p in self.parts]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Chat:
        body = _mapping(data, "a chat")
        parts = _field(body, "parts")
        if not isinstance(parts, list):
            raise ValueError("field 'parts' must be a list")
        return cls(role=Role(_field(body, "role")), parts=[part_from_dict(p) for p in parts])


@dataclass
class SystemInstruction:
    """System prompt sent with every request."""

    parts: list[Part] = field(default_factory=list)

    @classmethod
    def from_str(cls, prompt: str) -> SystemInstruction:
        return cls([Text(prompt)])

    def to_dict(self) -> dict[str, Any]:
        return {"parts": [part_to_dict(p) for p in self.parts]}


@dataclass(frozen=True)
class Tool:
    """A tool the model may use, serialised as ``{kind: value}``."""

    kind: str
    value: Any

    @classmethod
    def google_search(cls, config: Any = None) -> Tool:
        return cls("google_search", {} if config is None else config)

    @classmethod
    def function_declarations(cls, declarations: Iterable[Any]) -> Tool:
        return cls("functionDeclarations", list(declarations))

    @classmethod
    def code_execution(cls, config: Any = None) -> Tool:
        return cls("code_execution", {} if config is None else config)

    def to_dict(self) -> dict[str, Any]:
        return {self.kind: self.value}


def request_body(
    system_instruction: SystemInstruction | None,
    tools: Sequence[Tool] | None,
    contents: Iterable[Chat],
    generation_config: Any,
) -> dict[str, Any]:
    """Build the JSON body of a generateContent request."""
    body: dict[str, Any] = {
        "system_instruction": None if system_instruction is None else system_instruction.to_dict()
    }
    if tools is not None:
        body["tools"] = [tool.to_dict() for tool in tools]
    body["contents"] = [chat.to_dict() for chat in contents]
    if generation_config is not None:
        body["generation_config"] = generation_config
    return body


def concatenate_parts(updating: list[Part], updator: Sequence[Part]) -> None:
    """Merge the first part of ``updator`` into ``updating``.

    Text, inline data, code and code results are appended to a last part of
    the same kind; anything else is pushed as a new part.
    """
    if not updator:
        return
    new = updator[0]
    last = updating[-1] if updating else None

    if isinstance(new, Text) and isinstance(last, Text):
        updating[-1] = Text(last.text + new.text)
    elif isinstance(new, InlineData) and isinstance(last, InlineData):
        updating[-1] = dataclasses.replace(last, data=last.data + new.data)
    elif isinstance(new, ExecutableCode) and isinstance(last, ExecutableCode):
        updating[-1] = dataclasses.replace(last, code=last.code + new.code)
    elif isinstance(new, CodeExecuteResult) and isinstance(last, CodeExecuteResult):
        if last.output is None:
            updating[-1] = dataclasses.replace(last, output=new.output)
        elif new.output is not None:
            updating[-1] = dataclasses.replace(last, output=last.output + new.output)
    else:
        updating.append(new)
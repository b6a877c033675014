import json

import pytest

from llmclient.request import (
    Chat,
    CodeExecuteResult,
    ExecutableCode,
    FileData,
    FunctionCall,
    FunctionResponse,
    InlineData,
    Language,
    Outcome,
    Role,
    SystemInstruction,
    Text,
    Tool,
    concatenate_parts,
    part_from_dict,
    part_to_dict,
    request_body,
)

ALL_PARTS = [
    Text("hello"),
    InlineData("image/png", "aGVsbG8="),
    ExecutableCode(Language.PYTHON, "print(1)"),
    CodeExecuteResult(Outcome.OUTCOME_OK, "1\n"),
    CodeExecuteResult(Outcome.OUTCOME_FAILED),
    FunctionCall("lookup", {"q": "x"}, id="call-1"),
    FunctionCall("lookup"),
    FunctionResponse("lookup", {"result": 3}),
    FileData("gs://bucket/file.pdf", "application/pdf"),
    FileData("gs://bucket/file.pdf"),
]


@pytest.mark.parametrize("part", ALL_PARTS)
def test_part_round_trip(part):
    data = part_to_dict(part)
    assert part_from_dict(json.loads(json.dumps(data))) == part


def test_text_part_wire_form():
    assert part_to_dict(Text("hi")) == {"text": "hi"}


def test_variant_tags():
    tags = [next(iter(part_to_dict(p))) for p in ALL_PARTS[:6]]
    assert tags == [
        "text",
        "inline_data",
        "executable_code",
        "code_execution_result",
        "code_execution_result",
        "functionCall",
    ]


def test_optional_fields_are_omitted():
    assert part_to_dict(FunctionCall("lookup")) == {"functionCall": {"name": "lookup"}}
    assert part_to_dict(FileData("gs://x")) == {"file_data": {"file_uri": "gs://x"}}
    assert "output" not in part_to_dict(CodeExecuteResult(Outcome.OUTCOME_OK))[
        "code_execution_result"
    ]


def test_camel_case_aliases_are_read():
    assert part_from_dict({"inlineData": {"mime_type": "image/png", "data": "AA=="}}) == InlineData(
        "image/png", "AA=="
    )
    assert part_from_dict({"fileData": {"mimeType": "text/plain", "fileUri": "gs://f"}}) == FileData(
        "gs://f", "text/plain"
    )
    assert part_from_dict(
        {"executableCode": {"language": "PYTHON", "code": "x = 1"}}
    ) == ExecutableCode(Language.PYTHON, "x = 1")
    assert part_from_dict(
        {"codeExecutionResult": {"outcome": "OUTCOME_DEADLINE_EXCEEDED"}}
    ) == CodeExecuteResult(Outcome.OUTCOME_DEADLINE_EXCEEDED)


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"text": "a", "inline_data": {"mime_type": "a", "data": "b"}},
        {"unknown": 1},
        {"text": 5},
        {"inline_data": {"data": "b"}},
        {"executable_code": {"language": "RUST", "code": ""}},
        {"functionResponse": {"name": "f"}},
    ],
)
def test_invalid_parts_raise(data):
    with pytest.raises(ValueError):
        part_from_dict(data)


def test_chat_round_trip():
    chat = Chat(Role.MODEL, [Text("a"), InlineData("image/png", "AA==")])
    data = chat.to_dict()
    assert data["role"] == "model"
    assert Chat.from_dict(data) == chat


def test_chat_from_dict_bad_role():
    with pytest.raises(ValueError):
        Chat.from_dict({"role": "system", "parts": []})


def test_system_instruction_from_str():
    prompt = "Classify the given words"
    instruction = SystemInstruction.from_str(prompt)
    assert instruction.parts == [Text(prompt)]
    assert instruction.to_dict() == {"parts": [{"text": prompt}]}


def test_tool_forms():
    assert Tool.code_execution().to_dict() == {"code_execution": {}}
    assert Tool.google_search({}).to_dict() == {"google_search": {}}
    decl = {"name": "schedule_meeting"}
    assert Tool.function_declarations([decl]).to_dict() == {"functionDeclarations": [decl]}


def test_request_body_minimal():
    chat = Chat(Role.USER, [Text("Hi")])
    body = request_body(None, None, [chat], None)
    assert body == {"system_instruction": None, "contents": [chat.to_dict()]}


def test_request_body_full():
    chat = Chat(Role.USER, [Text("Hi")])
    config = {"temperature": 0.5}
    body = request_body(
        SystemInstruction.from_str("be brief"), [Tool.code_execution()], [chat], config
    )
    assert list(body) == ["system_instruction", "tools", "contents", "generation_config"]
    assert body["tools"] == [{"code_execution": {}}]
    assert body["generation_config"] == config
    assert body["system_instruction"] == {"parts": [{"text": "be brief"}]}


def test_concatenate_text():
    first, second = "Hello, ", "world"
    parts = [Text(first)]
    concatenate_parts(parts, [Text(second)])
    assert parts == [Text(first + second)]


def test_concatenate_only_uses_first_updator_part():
    parts = [Text("a")]
    concatenate_parts(parts, [Text("b"), Text("c")])
    assert parts == [Text("a" + "b")]


def test_concatenate_empty_updator_is_noop():
    parts = [Text("a")]
    concatenate_parts(parts, [])
    assert parts == [Text("a")]


def test_concatenate_mismatched_kind_pushes():
    parts = [Text("a")]
    data = InlineData("image/png", "AA==")
    concatenate_parts(parts, [data])
    assert parts == [Text("a"), data]


def test_concatenate_into_empty_pushes():
    parts = []
    concatenate_parts(parts, [Text("a")])
    assert parts == [Text("a")]


def test_concatenate_inline_data_and_code():
    parts = [InlineData("image/png", "AA")]
    concatenate_parts(parts, [InlineData("image/jpeg", "BB")])
    assert parts == [InlineData("image/png", "AA" + "BB")]

    code = [ExecutableCode(Language.PYTHON, "x = 1\n")]
    concatenate_parts(code, [ExecutableCode(Language.PYTHON, "print(x)")])
    assert code == [ExecutableCode(Language.PYTHON, "x = 1\n" + "print(x)")]


def test_concatenate_code_results():
    parts = [CodeExecuteResult(Outcome.OUTCOME_OK)]
    concatenate_parts(parts, [CodeExecuteResult(Outcome.OUTCOME_OK, "1")])
    assert parts == [CodeExecuteResult(Outcome.OUTCOME_OK, "1")]

    concatenate_parts(parts, [CodeExecuteResult(Outcome.OUTCOME_OK, "2")])
    assert parts == [CodeExecuteResult(Outcome.OUTCOME_OK, "1" + "2")]

    concatenate_parts(parts, [CodeExecuteResult(Outcome.OUTCOME_OK)])
    assert parts == [CodeExecuteResult(Outcome.OUTCOME_OK, "1" + "2")]


def test_concatenate_function_calls_always_push():
    call = FunctionCall("f")
    parts = [FunctionCall("f")]
    concatenate_parts(parts, [call])
    assert parts == [FunctionCall("f"), call]
    assert len(parts) == 2
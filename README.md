# llmclient

Async Python clients for the Gemini `generateContent` API and the OpenAI chat
completions API. Both are built on `httpx`.

The Gemini client gives you:

- sessions that keep the conversation history and trim it to a limit you set
- streamed replies that are added to the session as the chunks arrive
- tools: Google search, function calling and code execution
- JSON mode with a response schema
- markdown-to-parts conversion. An `![alt](link)` image in a prompt is sent to
  the model as inline data, whether the link is a URL or a file path.

## Installation

```
pip install llmclient
```

To run the test suite, install the test extra:

```
pip install "llmclient[test]"
pytest
```

## Asking Gemini

```python
import asyncio

from llmclient.gemini import Gemini
from llmclient.sessions import Session


async def main():
    session = Session(6)  # keeps at most 6 chats: 3 questions and 3 replies
    gemini = Gemini("placeholder", "gemini-2.0-flash")
    response = await gemini.ask(session.ask_string("Hi"))
    print(response.text(""))


asyncio.run(main())
```

`Gemini(api_key, model, sys_prompt=None, timeout=60.0, client=None)` takes a
timeout in seconds. You can also pass an `httpx.AsyncClient` so that
connections are reused. Without one, each request opens its own client.
`set_model`, `set_api_key` and the other setters return the client, so calls
can be chained.

`gemini.ask(session)` does four things:

- it sends the whole history
- it raises if the request fails
- it stores the model's reply in the session
- it returns a `GeminiResponse`

On the response, `parts` holds the parts of the first candidate. `text(sep)`
joins its text parts, putting `sep` after each one. `json()` parses that text
as JSON.

## Sessions

`Session(history_limit, remember_reply=True)` stores `Chat` objects, oldest
first, in `session.history`.

- `ask` / `ask_string` add a user chat. `reply` / `reply_string` add a model
  chat. If two chats in a row come from the same role, the new parts are
  merged into the previous chat. Text, inline data, code and code results are
  joined onto a last part of the same kind; any other part is added as a new
  part.
- When the history grows past `history_limit`, the oldest chat is dropped.
  `chat_no` counts every chat ever added.
- If `remember_reply` is false, the model's reply is not stored and the
  pending user question is removed. One-off questions then stay out of the
  history. Set it with `session.remember_reply = False` or with
  `Session(6, remember_reply=False)`.
- `last_message()`, `last_message_text(sep)` and `parts_at(n)` read the
  history. `parts_at(1)` gives the last chat.
- `forget_last_conversation()` removes the last chat, and also the user
  question before it if there is one. It returns both as `(last, second_last)`.
- `to_dict()` and `Session.from_dict(...)` turn a session into plain JSON data
  and back, so you can save it wherever you like.

## System prompts and JSON mode

```python
from llmclient.request import SystemInstruction

gemini = Gemini(
    "placeholder",
    "gemini-2.0-flash-lite",
    SystemInstruction.from_str("Classify the given words"),
)
gemini.set_json_mode({
    "type": "object",
    "properties": {
        "positive": {"type": "array", "items": {"type": "string"}},
        "negative": {"type": "array", "items": {"type": "string"}},
    },
})
response = await gemini.ask(session.ask_string('["Joy", "Fear", "Hope"]'))
print(response.json())
```

`unset_json_mode()` sets the two JSON-mode keys of the generation config to
`null`. `set_generation_config(...)` sets any other generation parameters.

## Streaming

```python
session.ask_string("Explain machine learning in one line")
stream = await gemini.ask_as_stream(
    session,
    lambda session, chunk: session.last_message_text(""),
)
async for text in stream:
    print(text)

history = stream.session
```

Each chunk updates the session. The stream then yields whatever the extractor
returns for that chunk. Read the stream to the end: only then does the session
hold the full reply.

## Tools

```python
from llmclient.request import Tool

gemini.set_tools([Tool.code_execution({})])
```

`Tool.google_search({})` and `Tool.function_declarations([...])` work the
same way. To turn tools off, call `set_tools(None)` or
`unset_code_execution_mode()`.

## Images in markdown

```python
from llmclient.markdown import MarkdownToParts

parser = await MarkdownToParts.new(
    "What is in this image ![photo](images/photo.png)?",
    lambda url: "image/png",
)
parts = parser.process()
response = await gemini.ask(session.ask(parts))
```

The text is kept unchanged. After each image that can be fetched or read, its
data is added as an `InlineData` part. Links that fail to load are left as
plain text.

A web download uses the `Content-Type` header of the response when there is
one. Otherwise it falls back to the MIME-type guesser, which is also used for
local files.

To set your own regex, MIME guesser, download filter or timeout (in seconds,
10 by default), use:

```python
MarkdownToParts.builder().regex(...).timeout(5).build(markdown)
```

The first capture group of the regex must be the link. The lower-level
`llmclient.files.get_file_base64s` returns the matches and the files they
loaded.

## ChatGPT

```python
from llmclient.chatgpt import ChatGpt

reply = await ChatGpt("placeholder", "gpt-4o-mini").ask_string("Hi")
print(reply)
```

`ask_string` sends one user message. It returns the reply content as JSON
text, so a string reply comes back in quotes. If the content is missing, it
returns `null`. There are no sessions for this client.

## Errors

A failed Gemini request raises `GeminiResponseError`. It comes as one of two
kinds:

- `RequestFailed` for transport or decoding errors
- `StatusNotOk`, whose `text` holds the response body

While streaming, a failed chunk raises `GeminiResponseStreamError`, either as
`StreamRequestFailed` or as `InvalidResponseFormat` (which carries the bad
text). All of these are in `llmclient.errors`. The ChatGPT client lets `httpx`
and JSON errors propagate as they are.

## What it does not do

This is a library only. It has no command-line tool and does not manage API
keys. Storing sessions is up to you, using `Session.to_dict` and
`Session.from_dict`.
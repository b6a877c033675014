"""Client for the Gemini generateContent API."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Sequence
from typing import Any, TypeVar

import httpx

from .errors import RequestFailed, StatusNotOk
from .request import SystemInstruction, Tool, request_body
from .response import GeminiResponse, GeminiResponseStream
from .sessions import Session

BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_TIMEOUT = 60.0

T = TypeVar("T")


async def _read_chunks(
    response: httpx.Response, client: httpx.AsyncClient, owns_client: bool
) -> AsyncIterator[bytes]:
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    finally:
        await response.aclose()
        if owns_client:
            await client.aclose()


class Gemini:
    """Sends a session's history to a Gemini model and records the reply.

    ``timeout`` is in seconds. A ``client`` may be given to reuse connections;
    otherwise a client is opened for each request.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        sys_prompt: SystemInstruction | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._sys_prompt = sys_prompt
        self._timeout = timeout
        self._client = client
        self._generation_config: Any = None
        self._tools: list[Tool] | None = None

    def __repr__(self) -> str:
        return f"Gemini(model={self._model!r})"

    @property
    def model(self) -> str:
        return self._model

    @property
    def generation_config(self) -> Any:
        return self._generation_config

    @property
    def tools(self) -> list[Tool] | None:
        return None if self._tools is None else list(self._tools)

    def set_generation_config(self, generation_config: Any) -> Gemini:
        """Set the generation config sent with every request."""
        self._generation_config = generation_config
        return self

    def set_model(self, model: str) -> Gemini:
        self._model = model
        return self

    def set_api_key(self, api_key: str) -> Gemini:
        self._api_key = api_key
        return self

    def set_json_mode(self, schema: Any) -> Gemini:
        """Ask for JSON replies following ``schema``."""
        if self._generation_config is None:
            self._generation_config = {
                "response_mime_type": "application/json",
                "response_schema": schema,
            }
        elif isinstance(self._generation_config, dict):
            self._generation_config["response_mime_type"] = "application/json"
            self._generation_config["response_schema"] = schema
        else:
            raise TypeError("generation config must be a JSON object to set JSON mode")
        return self

    def unset_json_mode(self) -> Gemini:
        """Null out the JSON mode keys of the generation config, if there is one."""
        if isinstance(self._generation_config, dict):
            self._generation_config["response_schema"] = None
            self._generation_config["response_mime_type"] = None
        return self

    def set_tools(self, tools: Sequence[Tool] | None) -> Gemini:
        """Allow ``tools``, or no tools at all when ``None``."""
        self._tools = None if tools is None else list(tools)
        return self

    def unset_code_execution_mode(self) -> Gemini:
        self._tools = None
        return self

    def _url(self, method: str) -> str:
        return f"{BASE_URL}/{self._model}:{method}?key={self._api_key}"

    def _body(self, session: Session) -> dict[str, Any]:
        return request_body(
            self._sys_prompt, self._tools, session.history, self._generation_config
        )

    def _open_client(self) -> tuple[httpx.AsyncClient, bool]:
        if self._client is not None:
            return self._client, False
        return httpx.AsyncClient(timeout=self._timeout), True

    async def ask(self, session: Session) -> GeminiResponse:
        """Send the session's history and store the reply in the session."""
        client, owns_client = self._open_client()
        try:
            try:
                response = await client.post(
                    self._url("generateContent"), json=self._body(session)
                )
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise RequestFailed(exc) from exc
            if not response.is_success:
                raise StatusNotOk(response.text)
            try:
                reply = GeminiResponse.from_dict(response.json())
            except ValueError as exc:
                raise RequestFailed(exc) from exc
        finally:
            if owns_client:
                await client.aclose()
        session.update(reply)
        return reply

    async def ask_as_stream(
        self,
        session: Session,
        data_extractor: Callable[[Session, GeminiResponse], T],
    ) -> GeminiResponseStream[T]:
        """Send the session's history and stream the reply.

        The stream must be read to the end for the whole reply to be stored
        in the session. ``data_extractor(session, chunk_response)`` gives the
        value yielded for each chunk.
        """
        client, owns_client = self._open_client()
        try:
            request = client.build_request(
                "POST", self._url("streamGenerateContent"), json=self._body(session)
            )
            response = await client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            if owns_client:
                await client.aclose()
            raise RequestFailed(exc) from exc

        if not response.is_success:
            try:
                text = (await response.aread()).decode("utf-8", errors="replace")
            except httpx.HTTPError as exc:
                raise RequestFailed(exc) from exc
            finally:
                await response.aclose()
                if owns_client:
                    await client.aclose()
            raise StatusNotOk(text)

        return GeminiResponseStream(
            _read_chunks(response, client, owns_client), session, data_extractor
        )
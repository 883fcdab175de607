"""Tests for wren.server.sender response emission rules."""

from wren.http.response import Response
from wren.server.sender import send_response


async def _emit(response: Response, method: str = "GET") -> list[dict]:
    messages: list[dict] = []

    async def send(message: dict) -> None:
        messages.append(message)

    await send_response(response, send, method=method)
    return messages


class TestSendResponse:
    async def test_200_preserves_body(self) -> None:
        messages = await _emit(Response("ok"))
        assert messages[0]["type"] == "http.response.start"
        assert messages[0]["status"] == 200
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"2"
        assert headers[b"content-type"] == b"text/html; charset=utf-8"
        assert messages[1]["type"] == "http.response.body"
        assert messages[1]["body"] == b"ok"

    async def test_header_names_lowercased(self) -> None:
        messages = await _emit(Response("ok").with_header("X-Custom", "Value"))
        assert (b"x-custom", b"Value") in messages[0]["headers"]

    async def test_204_drops_body(self) -> None:
        messages = await _emit(Response("unexpected-body").with_status(204))
        assert dict(messages[0]["headers"])[b"content-length"] == b"0"
        assert messages[1]["body"] == b""

    async def test_304_drops_body(self) -> None:
        messages = await _emit(Response("unexpected-body").with_status(304))
        assert messages[1]["body"] == b""

    async def test_head_keeps_length_but_sends_no_body(self) -> None:
        messages = await _emit(Response("hello"), method="HEAD")
        assert dict(messages[0]["headers"])[b"content-length"] == b"5"
        assert messages[1]["body"] == b""

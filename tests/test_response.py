"""Tests for wren.http.response: chainable immutable responses."""

from wren.http.response import Redirect, Response


class TestResponse:
    def test_defaults(self) -> None:
        response = Response("hi")
        assert response.status == 200
        assert response.content_type.startswith("text/html")
        assert response.headers == ()

    def test_with_methods_return_new_instances(self) -> None:
        original = Response("hi")
        changed = original.with_status(201).with_header("X-A", "1").with_content_type("text/plain")
        assert original.status == 200
        assert original.headers == ()
        assert changed.status == 201
        assert changed.headers == (("X-A", "1"),)
        assert changed.content_type == "text/plain"

    def test_with_headers_keeps_order(self) -> None:
        response = Response().with_header("A", "1").with_headers({"B": "2", "C": "3"})
        assert [name for name, _ in response.headers] == ["A", "B", "C"]

    def test_header_lookup_is_case_insensitive(self) -> None:
        response = Response().with_header("X-Frame-Options", "DENY")
        assert response.header("x-frame-options") == "DENY"
        assert response.header("missing") is None

    def test_body_conversions(self) -> None:
        assert Response("é").body_bytes == "é".encode()
        assert Response(b"abc").text == "abc"


class TestRedirect:
    def test_to_response(self) -> None:
        response = Redirect("/login").to_response()
        assert response.status == 302
        assert response.header("Location") == "/login"
        assert response.body == ""

    def test_custom_status_and_headers(self) -> None:
        response = Redirect("/new", status=301, headers=(("X-Why", "moved"),)).to_response()
        assert response.status == 301
        assert response.header("X-Why") == "moved"

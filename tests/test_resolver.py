"""Tests for wren.resolver: (verb, segments) to exactly one action."""

import pytest

from wren.actions import compile_controller
from wren.controller import Controller
from wren.errors import NotFound
from wren.resolver import default_action, explicit_name, resolve


class WidgetsController(Controller):
    def index_action(self):
        return []

    def object_action(self, identifier):
        return {}

    def create_action(self, params):
        return {}

    def update_action(self, identifier, params):
        return {}

    def delete_action(self, identifier):
        return {}

    def search_action(self, identifier):
        return {}

    def list_all_action(self, args):
        return {}


ACTIONS = compile_controller(WidgetsController).actions


def _name(method: str, *segments: str, override: str | None = None) -> str:
    return resolve(method, segments, ACTIONS, override).action.name


class TestVerbDefaults:
    def test_get_collection(self) -> None:
        resolution = resolve("GET", (), ACTIONS)
        assert resolution.action.name == "index"
        assert resolution.identifier is None
        assert resolution.args == ()

    def test_get_object(self) -> None:
        resolution = resolve("GET", ("42",), ACTIONS)
        assert resolution.action.name == "object"
        assert resolution.identifier == "42"
        assert resolution.args == ("42",)

    def test_head_behaves_like_get(self) -> None:
        assert _name("HEAD") == "index"
        assert _name("HEAD", "42") == "object"

    def test_post_collection_creates(self) -> None:
        assert _name("POST") == "create"

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH"])
    def test_write_with_identifier_updates(self, method: str) -> None:
        resolution = resolve(method, ("42",), ACTIONS)
        assert resolution.action.name == "update"
        assert resolution.identifier == "42"

    def test_delete(self) -> None:
        assert resolve("DELETE", ("42",), ACTIONS).identifier == "42"
        assert _name("DELETE", "42") == "delete"
        assert _name("DELETE") == "delete"

    def test_unknown_verb(self) -> None:
        with pytest.raises(NotFound):
            resolve("OPTIONS", (), ACTIONS)

    def test_put_without_identifier(self) -> None:
        with pytest.raises(NotFound):
            resolve("PUT", (), ACTIONS)

    def test_missing_default_action(self) -> None:
        class ReadOnlyController(Controller):
            def index_action(self):
                return []

        actions = compile_controller(ReadOnlyController).actions
        with pytest.raises(NotFound):
            resolve("POST", (), actions)


class TestExplicitNames:
    def test_single_segment_names_declared_action(self) -> None:
        resolution = resolve("GET", ("search",), ACTIONS)
        assert resolution.action.name == "search"
        assert resolution.identifier is None

    def test_explicit_name_ignores_verb(self) -> None:
        assert _name("POST", "search") == "search"

    def test_remaining_segments_become_arguments(self) -> None:
        resolution = resolve("GET", ("search", "gears"), ACTIONS)
        assert resolution.action.name == "search"
        assert resolution.identifier == "gears"
        assert resolution.args == ("gears",)

    def test_hyphens_normalise(self) -> None:
        resolution = resolve("GET", ("list-all", "a", "b"), ACTIONS)
        assert resolution.action.name == "list_all"
        assert resolution.args == ("a", "b")

    def test_undeclared_single_segment_is_identifier(self) -> None:
        resolution = resolve("GET", ("gizmo",), ACTIONS)
        assert resolution.action.name == "object"
        assert resolution.identifier == "gizmo"

    def test_default_actions_are_not_addressable(self) -> None:
        # "delete" is an identifier here, never the delete action
        resolution = resolve("GET", ("delete",), ACTIONS)
        assert resolution.action.name == "object"
        assert resolution.identifier == "delete"
        with pytest.raises(NotFound):
            resolve("GET", ("delete", "42"), ACTIONS)

    def test_unknown_name_with_arguments(self) -> None:
        with pytest.raises(NotFound):
            resolve("GET", ("missing", "x"), ACTIONS)

    def test_identifier_cannot_take_arguments(self) -> None:
        with pytest.raises(NotFound):
            resolve("GET", ("42", "extra"), ACTIONS)


class TestOverride:
    def test_override_wins(self) -> None:
        resolution = resolve("GET", ("anything", "7"), ACTIONS, override="search")
        assert resolution.action.name == "search"
        assert resolution.identifier == "7"
        assert resolution.args == ("7",)

    def test_override_must_exist(self) -> None:
        with pytest.raises(NotFound):
            resolve("GET", (), ACTIONS, override="nope")

    def test_none_falls_through(self) -> None:
        assert _name("GET", override=None) == "index"


class TestHelpers:
    def test_explicit_name(self) -> None:
        assert explicit_name("list-all") == "list_all"
        assert explicit_name("search") == "search"
        assert explicit_name("42") is None
        assert explicit_name("a.b") is None
        assert explicit_name("_private") is None

    def test_default_action(self) -> None:
        assert default_action("GET", ()) == ("index", None)
        assert default_action("GET", ("1",)) == ("object", "1")
        assert default_action("PATCH", ("1",)) == ("update", "1")

    def test_deterministic(self) -> None:
        first = resolve("GET", ("search", "x"), ACTIONS)
        second = resolve("GET", ("search", "x"), ACTIONS)
        assert first == second

"""Tests for wren.context: request context and per-dispatch state."""

import json

import pytest
from kida import DictLoader, Environment

from wren.app import App
from wren.context import DispatchContext, get_request
from wren.controller import Controller
from wren.http.request import Request
from wren.testing import TestClient


class TestGetRequest:
    def test_outside_request(self) -> None:
        with pytest.raises(LookupError):
            get_request()

    async def test_inside_action(self) -> None:
        app = App(kida_env=Environment(loader=DictLoader({})))

        @app.controller("/whoami")
        class WhoamiController(Controller):
            def index_action(self, request):
                return {"path": get_request().path, "method": request.method}

        async with TestClient(app) as client:
            response = await client.get("/whoami")
        assert json.loads(response.text) == {"path": "/whoami", "method": "GET"}

    async def test_reset_after_request(self) -> None:
        app = App(kida_env=Environment(loader=DictLoader({})))

        @app.controller("/")
        class HomeController(Controller):
            def index_action(self):
                return ""

        async with TestClient(app) as client:
            await client.get("/")
        with pytest.raises(LookupError):
            get_request()


class TestDispatchContext:
    def test_defaults(self) -> None:
        context = DispatchContext(request=Request(method="GET", path="/"), controller="home")
        assert context.action is None
        assert context.identifier is None
        assert context.args == ()
        assert context.component_config == {}

    def test_fresh_component_config(self) -> None:
        request = Request(method="GET", path="/")
        first = DispatchContext(request=request, controller="a")
        second = DispatchContext(request=request, controller="b")
        first.component_config["x"] = {}
        assert second.component_config == {}

    def test_controller_sees_context(self) -> None:
        context = DispatchContext(request=Request(method="GET", path="/"), controller="home")
        controller = Controller(context)
        assert controller.request is context.request
        assert controller.view is None
        assert controller.layout is None

"""Tests for wren.components: outcomes and the ordered chain."""

from typing import Any

import pytest

from wren.components import (
    CONTINUE,
    BaseComponent,
    ComponentChain,
    Continue,
    Halt,
    Link,
    Replace,
    outcome_of,
)
from wren.context import DispatchContext
from wren.controller import Controller
from wren.http.request import Request
from wren.http.response import Response


class Recorder(BaseComponent):
    """Records every step into a shared log and answers with scripted values."""

    def __init__(
        self,
        name: str,
        log: list[str],
        before: Any = None,
        after: Any = None,
    ) -> None:
        self.name = name
        self.log = log
        self._before = before
        self._after = after

    def before(self, request, controller, config):
        self.log.append(f"{self.name}.before")
        return self._before

    def after(self, response, request, config):
        self.log.append(f"{self.name}.after")
        return self._after


def _chain(*components: BaseComponent, configs: dict | None = None) -> ComponentChain:
    configs = configs or {}
    return ComponentChain(tuple(Link(c, configs.get(c.name, {})) for c in components))


def _controller() -> Controller:
    return Controller(DispatchContext(request=Request(method="GET", path="/"), controller="x"))


async def _fail() -> Response:
    return Response("not found", status=404)


class TestOutcomeOf:
    def test_passthrough(self) -> None:
        halt = Halt(Response("x"))
        assert outcome_of(halt, post=False) is halt

    def test_truthy_and_none_continue(self) -> None:
        assert outcome_of(None, post=False) == Continue()
        assert outcome_of(True, post=True) is CONTINUE

    def test_false_halts_without_response(self) -> None:
        assert outcome_of(False, post=False) == Halt()

    def test_bare_response_depends_on_phase(self) -> None:
        response = Response("x")
        assert outcome_of(response, post=False) == Halt(response)
        assert outcome_of(response, post=True) == Replace(response)

    def test_anything_else_is_rejected(self) -> None:
        with pytest.raises(TypeError, match="int"):
            outcome_of(42, post=False)


class TestRunBefore:
    async def test_all_continue_in_declared_order(self) -> None:
        log: list[str] = []
        chain = _chain(Recorder("a", log), Recorder("b", log), Recorder("c", log))
        configs: dict = {}
        halted = await chain.run_before(Request(method="GET", path="/"), _controller(), configs)
        assert halted is None
        assert log == ["a.before", "b.before", "c.before"]
        assert set(configs) == {"a", "b", "c"}

    async def test_short_circuit_stops_the_phase(self) -> None:
        log: list[str] = []
        stop = Response("stop", status=401)
        chain = _chain(
            Recorder("a", log),
            Recorder("b", log, before=Halt(stop)),
            Recorder("c", log),
        )
        halted = await chain.run_before(Request(method="GET", path="/"), _controller(), {})
        assert halted == Halt(stop)
        assert log == ["a.before", "b.before"]

    async def test_replace_in_pre_phase_halts(self) -> None:
        log: list[str] = []
        replacement = Response("swap")
        chain = _chain(Recorder("a", log, before=Replace(replacement)), Recorder("b", log))
        halted = await chain.run_before(Request(method="GET", path="/"), _controller(), {})
        assert halted == Halt(replacement)
        assert log == ["a.before"]

    async def test_prepare_component_merges_over_static_config(self) -> None:
        seen: dict[str, Any] = {}

        class Probe(BaseComponent):
            name = "probe"

            def before(self, request, controller, config):
                seen.update(config)

        class Tuned(Controller):
            def prepare_component(self, name, request):
                return {"level": "debug"} if name == "probe" else None

        controller = Tuned(DispatchContext(request=Request(method="GET", path="/"), controller="t"))
        chain = _chain(Probe(), configs={"probe": {"level": "info", "keep": 1}})
        configs: dict = {}
        await chain.run_before(Request(method="GET", path="/"), controller, configs)
        assert seen == {"level": "debug", "keep": 1}
        assert dict(configs["probe"]) == {"level": "debug", "keep": 1}

    async def test_async_steps(self) -> None:
        class AsyncGate(BaseComponent):
            name = "gate"

            async def before(self, request, controller, config):
                return Halt()

        halted = await _chain(AsyncGate()).run_before(
            Request(method="GET", path="/"), _controller(), {}
        )
        assert halted == Halt()


class TestRunAfter:
    async def test_all_continue(self) -> None:
        log: list[str] = []
        chain = _chain(Recorder("a", log), Recorder("b", log))
        response = Response("ok")
        result = await chain.run_after(response, Request(method="GET", path="/"), {}, _fail)
        assert result is response
        assert log == ["a.after", "b.after"]

    async def test_replace_feeds_later_components(self) -> None:
        seen: list[str] = []

        class Stamp(BaseComponent):
            name = "stamp"

            def after(self, response, request, config):
                return Replace(response.with_header("X-Stamp", "1"))

        class Check(BaseComponent):
            name = "check"

            def after(self, response, request, config):
                seen.append(response.header("X-Stamp"))

        result = await _chain(Stamp(), Check()).run_after(
            Response("ok"), Request(method="GET", path="/"), {}, _fail
        )
        assert result.header("X-Stamp") == "1"
        assert seen == ["1"]

    async def test_halt_without_response_is_not_found(self) -> None:
        log: list[str] = []
        chain = _chain(Recorder("a", log, after=False), Recorder("b", log))
        result = await chain.run_after(Response("ok"), Request(method="GET", path="/"), {}, _fail)
        assert result.status == 404
        assert log == ["a.after"]

    async def test_halt_with_response_stops(self) -> None:
        log: list[str] = []
        final = Response("final", status=503)
        chain = _chain(Recorder("a", log, after=Halt(final)), Recorder("b", log))
        result = await chain.run_after(Response("ok"), Request(method="GET", path="/"), {}, _fail)
        assert result is final
        assert log == ["a.after"]

    async def test_uses_config_recorded_by_pre_phase(self) -> None:
        seen: list[Any] = []

        class Probe(BaseComponent):
            name = "probe"

            def after(self, response, request, config):
                seen.append(config.get("mode"))

        chain = _chain(Probe(), configs={"probe": {"mode": "static"}})
        await chain.run_after(
            Response("ok"), Request(method="GET", path="/"), {"probe": {"mode": "merged"}}, _fail
        )
        await chain.run_after(Response("ok"), Request(method="GET", path="/"), {}, _fail)
        assert seen == ["merged", "static"]


class TestChain:
    def test_names_and_len(self) -> None:
        log: list[str] = []
        chain = _chain(Recorder("a", log), Recorder("b", log))
        assert chain.names == ("a", "b")
        assert len(chain) == 2
        assert "a, b" in repr(chain)

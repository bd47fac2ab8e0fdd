import threading
import time

import pytest

from xpkit.engine import (
    CacheOptions,
    Engine,
    EngineError,
    Manager,
    Watch,
    watch_for,
)

NAME = "coolcontroller"


class MockCache:
    def __init__(self, start=None):
        self._start = start or (lambda stop: stop.wait())

    def start(self, stop):
        return self._start(stop)


class MockController:
    def __init__(self, start=None, watch=None):
        self._start = start or (lambda stop: stop.wait())
        self._watch = watch or (lambda source, handler, *predicates: None)

    def start(self, stop):
        return self._start(stop)

    def watch(self, source, handler, *predicates):
        return self._watch(source, handler, *predicates)


def _raise(err):
    raise err


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_new_cache_error():
    boom = RuntimeError("boom")
    e = Engine(
        Manager(),
        new_cache=lambda cfg, o: _raise(boom),
        new_controller=lambda n, m, o: MockController(),
    )
    with pytest.raises(EngineError) as excinfo:
        e.start(NAME, None)
    assert str(excinfo.value) == "cannot create new cache: boom"
    assert excinfo.value.cause is boom
    e.stop(NAME)
    assert e.err(NAME) is None


def test_new_controller_error():
    boom = RuntimeError("boom")
    e = Engine(
        Manager(),
        new_cache=lambda cfg, o: None,
        new_controller=lambda n, m, o: _raise(boom),
    )
    with pytest.raises(EngineError) as excinfo:
        e.start(NAME, None)
    assert str(excinfo.value) == "cannot create new controller: boom"
    e.stop(NAME)
    assert e.err(NAME) is None


def test_watch_error():
    boom = RuntimeError("boom")
    ctrl = MockController(watch=lambda s, h, *p: _raise(boom))
    e = Engine(
        Manager(),
        new_cache=lambda cfg, o: None,
        new_controller=lambda n, m, o: ctrl,
    )
    with pytest.raises(EngineError) as excinfo:
        e.start(NAME, None, watch_for(object(), None))
    assert str(excinfo.value) == "cannot setup watch: boom"
    assert excinfo.value.cause is boom
    e.stop(NAME)
    assert e.err(NAME) is None


def test_cache_crash_error():
    boom = RuntimeError("boom")
    e = Engine(
        Manager(),
        new_cache=lambda cfg, o: MockCache(start=lambda stop: _raise(boom)),
        new_controller=lambda n, m, o: MockController(start=lambda stop: None),
    )
    e.start(NAME, None)
    assert _wait_for(lambda: e.err(NAME) is not None)
    e.stop(NAME)
    err = e.err(NAME)
    assert str(err) == "cache error: boom"
    assert err.cause is boom


def test_controller_crash_error():
    boom = RuntimeError("boom")
    e = Engine(
        Manager(),
        new_cache=lambda cfg, o: MockCache(start=lambda stop: None),
        new_controller=lambda n, m, o: MockController(start=lambda stop: _raise(boom)),
    )
    e.start(NAME, None)
    assert _wait_for(lambda: e.err(NAME) is not None)
    e.stop(NAME)
    assert str(e.err(NAME)) == "controller error: boom"


def test_stop_signals_cache_and_controller():
    stopped = []
    cache = MockCache(start=lambda stop: stopped.append(("cache", stop.wait(2))))
    ctrl = MockController(start=lambda stop: stopped.append(("ctrl", stop.wait(2))))
    e = Engine(Manager(), new_cache=lambda c, o: cache, new_controller=lambda n, m, o: ctrl)
    e.start(NAME, None)
    assert e.is_running(NAME) is True
    e.stop(NAME)
    assert e.is_running(NAME) is False
    assert _wait_for(lambda: len(stopped) == 2)
    assert sorted(stopped) == [("cache", True), ("ctrl", True)]
    assert e.err(NAME) is None


def test_start_while_running_is_noop():
    calls = []

    def new_cache(cfg, o):
        calls.append(cfg)
        return MockCache()

    e = Engine(Manager(), new_cache=new_cache, new_controller=lambda n, m, o: MockController())
    e.start(NAME, None)
    e.start(NAME, None)
    assert len(calls) == 1
    assert e.is_running(NAME) is True
    e.stop(NAME)
    assert e.is_running(NAME) is False
    assert e.err(NAME) is None


def test_waits_for_election():
    elected = threading.Event()
    started = threading.Event()

    def cache_start(stop):
        started.set()
        stop.wait()

    mgr = Manager(elected=elected)
    e = Engine(
        mgr,
        new_cache=lambda c, o: MockCache(start=cache_start),
        new_controller=lambda n, m, o: MockController(),
    )
    e.start(NAME, None)
    assert e.is_running(NAME) is True
    assert started.wait(0.1) is False
    elected.set()
    assert started.wait(2) is True
    assert e.is_running(NAME) is True
    e.stop(NAME)
    assert e.is_running(NAME) is False


def test_cache_and_controller_receive_manager_details():
    seen = {}

    def new_cache(cfg, o):
        seen["cfg"] = cfg
        seen["options"] = o
        return MockCache()

    def new_controller(name, mgr, options):
        seen["name"] = name
        seen["options_ctrl"] = options
        return MockController()

    mgr = Manager(config="cfg", scheme="scheme", rest_mapper="mapper")
    e = Engine(mgr, new_cache=new_cache, new_controller=new_controller)
    e.start(NAME, {"max": 1})
    e.stop(NAME)
    assert seen == {
        "cfg": "cfg",
        "options": CacheOptions(scheme="scheme", mapper="mapper"),
        "name": NAME,
        "options_ctrl": {"max": 1},
    }


def test_watch_receives_kind_cache_handler_and_predicates():
    got = []
    cache = MockCache()
    ctrl = MockController(watch=lambda s, h, *p: got.append((s.kind, s.cache, h, p)))
    e = Engine(Manager(), new_cache=lambda c, o: cache, new_controller=lambda n, m, o: ctrl)
    e.start(NAME, None, watch_for("kind", "handler", "p1", "p2"))
    e.stop(NAME)
    assert got == [("kind", cache, "handler", ("p1", "p2"))]


def test_watch_for_builds_watch():
    assert watch_for("k", "h", "p") == Watch(kind="k", handler="h", predicates=("p",))


def test_first_error_is_kept():
    e = Engine(
        Manager(),
        new_cache=lambda c, o: MockCache(start=lambda stop: _raise(RuntimeError("a"))),
        new_controller=lambda n, m, o: MockController(
            start=lambda stop: _raise(RuntimeError("b"))
        ),
    )
    e.start(NAME, None)
    assert _wait_for(lambda: e.err(NAME) is not None)
    first = e.err(NAME)
    time.sleep(0.05)
    e.stop(NAME)
    assert e.err(NAME) is first
    assert str(first) in {"cache error: a", "controller error: b"}
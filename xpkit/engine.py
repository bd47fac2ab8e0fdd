"""An engine that manages the lifecycles of controllers and their caches.

The lifecycle of each controller is independent of the engine and of the
manager the engine uses. Each controller gets its own cache whose lifecycle
is tied to the controller, so that stopping a controller also stops every
informer it started.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable

ERR_CREATE_CACHE = "cannot create new cache"
ERR_CREATE_CONTROLLER = "cannot create new controller"
ERR_CRASH_CACHE = "cache error"
ERR_CRASH_CONTROLLER = "controller error"
ERR_WATCH = "cannot setup watch"


@dataclass(frozen=True)
class CacheOptions:
    """Options used to create a new cache."""

    scheme: Any = None
    mapper: Any = None


def _already_elected() -> threading.Event:
    elected = threading.Event()
    elected.set()
    return elected


@dataclass
class Manager:
    """What the engine needs from a controller manager.

    ``elected`` is set once this process is the leader; caches and
    controllers are not started before then. By default it is already set.
    """

    config: Any = None
    scheme: Any = None
    rest_mapper: Any = None
    elected: threading.Event = field(default_factory=_already_elected)


@dataclass(frozen=True)
class Watch:
    """A kind of object to watch, its event handler and its predicates."""

    kind: Any
    handler: Any
    predicates: tuple[Any, ...] = ()


def watch_for(kind: Any, handler: Any, *args: Any) -> Watch:
    """Return a Watch of ``kind`` handled by ``handler`` and filtered by ``args``."""
    return Watch(kind=kind, handler=handler, predicates=tuple(args))


@dataclass(frozen=True)
class _KindSource:
    """A source of events for a kind of object, served from a cache."""

    kind: Any
    cache: Any


class EngineError(Exception):
    """A controller or its cache could not be set up, or crashed."""

    def __init__(self, message: str, cause: BaseException):
        super().__init__(f"{message}: {cause}")
        self.message = message
        self.cause = cause


# new_cache(config, CacheOptions) returns an object with start(stop_event).
NewCacheFn = Callable[[Any, CacheOptions], Any]
# new_controller(name, manager, options) returns an object with
# start(stop_event) and watch(source, handler, *predicates).
NewControllerFn = Callable[[str, Manager, Any], Any]


class Engine:
    """Starts and stops named controllers, each with its own cache."""

    def __init__(
        self,
        mgr: Manager,
        *,
        new_cache: NewCacheFn,
        new_controller: NewControllerFn,
    ):
        self._mgr = mgr
        self._new_cache = new_cache
        self._new_controller = new_controller
        self._started: dict[str, threading.Event] = {}
        self._errors: dict[str, BaseException | None] = {}
        self._lock = threading.Lock()

    def is_running(self, name: str) -> bool:
        """Return True if the named controller was started and has not stopped."""
        with self._lock:
            return name in self._started

    def err(self, name: str) -> BaseException | None:
        """Return the first error the named controller met, if any."""
        with self._lock:
            return self._errors.get(name)

    def stop(self, name: str) -> None:
        """Stop the named controller."""
        self._done(name, None)

    def _done(self, name: str, err: BaseException | None) -> None:
        with self._lock:
            stop = self._started.pop(name, None)
            if stop is not None:
                stop.set()
            # The first error is kept if this is called more than once.
            if self._errors.get(name) is not None:
                return
            self._errors[name] = err

    def start(self, name: str, options: Any, *args: Watch) -> None:
        """Start the named controller with the supplied watches; do not block.

        Starting a controller that is already running does nothing.
        """
        if self.is_running(name):
            return

        stop = threading.Event()
        with self._lock:
            self._started[name] = stop
            self._errors[name] = None

        try:
            cache = self._new_cache(
                self._mgr.config,
                CacheOptions(scheme=self._mgr.scheme, mapper=self._mgr.rest_mapper),
            )
        except Exception as err:
            raise EngineError(ERR_CREATE_CACHE, err) from err

        try:
            ctrl = self._new_controller(name, self._mgr, options)
        except Exception as err:
            raise EngineError(ERR_CREATE_CONTROLLER, err) from err

        for w in args:
            try:
                ctrl.watch(_KindSource(w.kind, cache), w.handler, *w.predicates)
            except Exception as err:
                raise EngineError(ERR_WATCH, err) from err

        self._run(name, f"{name}-cache", lambda: cache.start(stop), ERR_CRASH_CACHE)
        self._run(
            name, f"{name}-controller", lambda: ctrl.start(stop), ERR_CRASH_CONTROLLER
        )

    def _run(self, name: str, thread_name: str, fn: Callable[[], Any], msg: str) -> None:
        def target() -> None:
            self._mgr.elected.wait()
            try:
                fn()
            except Exception as err:
                self._done(name, EngineError(msg, err))
            else:
                self._done(name, None)

        threading.Thread(target=target, name=thread_name, daemon=True).start()
"""Events relating to resources, and recorders that publish them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Protocol


class EventType(str, Enum):
    """A type of event."""

    NORMAL = "Normal"
    WARNING = "Warning"


@dataclass
class Event:
    """An event relating to a resource."""

    type: EventType
    reason: str
    message: str
    annotations: dict[str, str] = field(default_factory=dict)


def _slice_map(pairs: Iterable[str], to: dict[str, str]) -> None:
    items = list(pairs)
    # A trailing key without a value is ignored.
    for key, value in zip(items[0::2], items[1::2]):
        to[key] = value


def normal(reason: str, message: str, *args: str) -> Event:
    """Return an informational event annotated with alternating keys and values."""
    e = Event(type=EventType.NORMAL, reason=reason, message=message)
    _slice_map(args, e.annotations)
    return e


def warning(reason: str, err: BaseException | str, *args: str) -> Event:
    """Return a warning event, typically describing an error."""
    e = Event(type=EventType.WARNING, reason=reason, message=str(err))
    _slice_map(args, e.annotations)
    return e


class EventSink(Protocol):
    """Something that publishes annotated events to an API server."""

    def annotated_event(
        self,
        obj: Any,
        annotations: dict[str, str],
        event_type: str,
        reason: str,
        message: str,
    ) -> None: ...


class Recorder(ABC):
    """Records events."""

    @abstractmethod
    def event(self, obj: Any, e: Event) -> None:
        """Record ``e`` against ``obj``."""

    @abstractmethod
    def with_annotations(self, *args: str) -> Recorder:
        """Return a recorder that adds the supplied annotations to every event."""


class APIRecorder(Recorder):
    """Records events to an API server through an event sink."""

    def __init__(self, kube: EventSink, annotations: dict[str, str] | None = None):
        self.kube = kube
        self.annotations: dict[str, str] = dict(annotations or {})

    def event(self, obj: Any, e: Event) -> None:
        self.kube.annotated_event(
            obj, self.annotations, EventType(e.type).value, e.reason, e.message
        )

    def with_annotations(self, *args: str) -> Recorder:
        recorder = APIRecorder(self.kube, self.annotations)
        _slice_map(args, recorder.annotations)
        return recorder


class NopRecorder(Recorder):
    """A recorder that does nothing."""

    def event(self, obj: Any, e: Event) -> None:
        pass

    def with_annotations(self, *args: str) -> Recorder:
        return self
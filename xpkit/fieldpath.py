"""Field paths that reference a field within a JSON-like object.

A field path is written the way a field would be accessed in JavaScript,
without a leading period, for example ``metadata.name``,
``spec.containers[0].name``, ``data[.config.yml]`` or
``metadata.annotations['example.org/external-name']``.

Leading, trailing or doubled periods, empty brackets and a period directly
before an opening bracket are rejected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Callable, Generator, Iterator, Optional

_MAX_INDEX = 2**32 - 1
_UNSIGNED = re.compile(r"[0-9]+")
_FIELD_END = re.compile(r"[\[\].]")

_PERIOD = "."
_LEFT_BRACKET = "["
_RIGHT_BRACKET = "]"


class SegmentType(IntEnum):
    """Whether a segment names an object field or an array index."""

    FIELD = 1
    INDEX = 2


@dataclass(frozen=True)
class Segment:
    """One segment of a field path."""

    type: SegmentType
    field: str = ""
    index: int = 0


class Segments(list):
    """The segments of a field path; ``str()`` renders them as a path."""

    def __getitem__(self, key):
        result = super().__getitem__(key)
        return Segments(result) if isinstance(key, slice) else result

    def __str__(self) -> str:
        parts = []
        for s in self:
            if s.type is SegmentType.FIELD:
                parts.append(f"[{s.field}]" if _PERIOD in s.field else f".{s.field}")
            elif s.type is SegmentType.INDEX:
                parts.append(f"[{s.index}]")
        return "".join(parts).removeprefix(".")


class FieldPathError(ValueError):
    """A field path could not be parsed."""

    def __init__(self, reason: str, position: int):
        super().__init__(f"{reason} at position {position}")
        self.reason = reason
        self.position = position


def field_or_index(s: str) -> Segment:
    """Return an index segment if ``s`` is an unsigned 32 bit integer, else a field."""
    if _UNSIGNED.fullmatch(s):
        value = int(s)
        if value <= _MAX_INDEX:
            return Segment(type=SegmentType.INDEX, index=value)
    return field(s)


def field(s: str) -> Segment:
    """Return a field segment named ``s``, with surrounding quotes removed."""
    return Segment(type=SegmentType.FIELD, field=s.strip("'\""))


class _ItemType(Enum):
    PERIOD = auto()
    LEFT_BRACKET = auto()
    RIGHT_BRACKET = auto()
    FIELD = auto()
    FIELD_OR_INDEX = auto()


@dataclass(frozen=True)
class _Item:
    type: _ItemType
    pos: int
    val: str


_Lexed = Generator[_Item, None, Optional[Callable[[], "_Lexed"]]]


class _Lexer:
    """A small state-machine lexer; each state yields items and returns the next state."""

    def __init__(self, text: str):
        self.input = text
        self.pos = 0
        self.start = 0

    def items(self) -> Iterator[_Item]:
        state: Optional[Callable[[], _Lexed]] = self._lex_field
        while state is not None:
            state = yield from state()

    def _emit(self, kind: _ItemType) -> Iterator[_Item]:
        # Empty values are never emitted.
        if self.pos <= self.start:
            return
        item = _Item(kind, self.start, self.input[self.start : self.pos])
        self.start = self.pos
        yield item

    def _fail(self, pos: int, reason: str) -> FieldPathError:
        offset = len(self.input[:pos].encode("utf-8", "surrogatepass"))
        return FieldPathError(reason, offset)

    def _lex_field(self) -> _Lexed:
        m = _FIELD_END.search(self.input, self.pos)
        if m is None:
            self.pos = len(self.input)
            yield from self._emit(_ItemType.FIELD)
            return None
        ch = m.group()
        if ch == _RIGHT_BRACKET:
            raise self._fail(m.start(), f"unexpected {ch!r}")
        self.pos = m.start()
        yield from self._emit(_ItemType.FIELD)
        return self._lex_left_bracket if ch == _LEFT_BRACKET else self._lex_period

    def _lex_period(self) -> _Lexed:
        if self.pos == 0 or self.pos == len(self.input) - 1:
            raise self._fail(self.pos, f"unexpected {_PERIOD!r}")
        self.pos += 1
        yield from self._emit(_ItemType.PERIOD)
        following = self.input[self.pos : self.pos + 1]
        if following in (_PERIOD, _LEFT_BRACKET):
            raise self._fail(self.pos, f"unexpected {following!r}")
        return self._lex_field

    def _lex_left_bracket(self) -> _Lexed:
        if _RIGHT_BRACKET not in self.input[self.pos :]:
            raise self._fail(self.pos, f"unterminated {_LEFT_BRACKET!r}")
        self.pos += 1
        yield from self._emit(_ItemType.LEFT_BRACKET)
        return self._lex_field_or_index

    def _lex_field_or_index(self) -> _Lexed:
        # Periods carry no meaning between brackets.
        right = self.input.index(_RIGHT_BRACKET, self.pos)
        if right == self.pos:
            raise self._fail(self.pos, f"unexpected {_RIGHT_BRACKET!r}")
        left = self.input.find(_LEFT_BRACKET, self.pos, right)
        if left != -1:
            raise self._fail(left, f"unexpected {_LEFT_BRACKET!r}")
        self.pos = right
        yield from self._emit(_ItemType.FIELD_OR_INDEX)
        return self._lex_right_bracket

    def _lex_right_bracket(self) -> _Lexed:
        self.pos += 1
        yield from self._emit(_ItemType.RIGHT_BRACKET)
        return self._lex_field


def parse(path: str) -> Segments:
    """Parse ``path`` into segments; raise FieldPathError if it is malformed."""
    segments = Segments()
    for item in _Lexer(path).items():
        if item.type is _ItemType.FIELD:
            segments.append(field(item.val))
        elif item.type is _ItemType.FIELD_OR_INDEX:
            segments.append(field_or_index(item.val))
    return segments
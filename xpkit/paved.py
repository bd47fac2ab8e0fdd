"""Get, set and merge values within a JSON-like object by field path."""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any, Callable, Mapping, TypeVar

from xpkit.fieldpath import FieldPathError, Segment, Segments, SegmentType, parse
from xpkit.mergeopts import MergeFlag, MergeOptions

T = TypeVar("T")


class PathError(ValueError):
    """A value could not be read or written at a field path."""


class NotFoundError(PathError, LookupError):
    """A field did not exist, or an array index was out of bounds."""


def is_not_found(err: BaseException | None) -> bool:
    """Return True if ``err``, or any error it was raised from, is a not-found error."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, NotFoundError):
            return True
        seen.add(id(err))
        err = err.__cause__
    return False


def _encode(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"object of type {type(value).__name__} is not JSON serializable")


def _to_json_value(value: Any) -> Any:
    """Return ``value`` as plain JSON data: dicts, lists, strings, numbers, bools, None."""
    try:
        encoded = json.dumps(value, default=_encode, allow_nan=False)
    except (TypeError, ValueError) as err:
        raise PathError(f"cannot marshal value to JSON: {err}") from err
    return json.loads(encoded)


def _parse(path: str) -> Segments:
    try:
        return parse(path)
    except FieldPathError as err:
        quoted = json.dumps(path, ensure_ascii=False)
        raise PathError(f"cannot parse path {quoted}: {err}") from err


def _prepare_element(array: list, current: Segment, nxt: Segment) -> None:
    existing = array[current.index]
    if existing is None:
        if nxt.type is SegmentType.INDEX:
            array[current.index] = [None] * (nxt.index + 1)
        else:
            array[current.index] = {}
        return
    if nxt.type is SegmentType.INDEX and isinstance(existing, list):
        if nxt.index >= len(existing):
            existing.extend([None] * (nxt.index - len(existing) + 1))


def _prepare_field(obj: dict, current: Segment, nxt: Segment) -> None:
    if current.field not in obj:
        if nxt.type is SegmentType.INDEX:
            obj[current.field] = [None] * (nxt.index + 1)
        else:
            obj[current.field] = {}
        return
    existing = obj[current.field]
    if nxt.type is SegmentType.INDEX and isinstance(existing, list):
        if nxt.index >= len(existing):
            existing.extend([None] * (nxt.index - len(existing) + 1))


def _is_empty(value: Any) -> bool:
    return value is None or value is False or value in ("", 0) or (
        isinstance(value, (list, dict)) and not value
    )


def _deep_merge(dst: Any, src: Any, flags: MergeFlag) -> Any:
    if isinstance(dst, dict) and isinstance(src, dict):
        merged = dict(dst)
        for key, value in src.items():
            merged[key] = _deep_merge(merged[key], value, flags) if key in merged else value
        return merged
    if isinstance(dst, list) and isinstance(src, list) and MergeFlag.APPEND_SLICE in flags:
        return dst + src
    if not _is_empty(src) and (MergeFlag.OVERRIDE in flags or _is_empty(dst)):
        return src
    return dst


def _remove_source_duplicates(dst: Any, src: Any) -> Any:
    if not isinstance(dst, list) or not isinstance(src, list):
        return src
    return [item for item in src if item not in dst]


def _merge(dst: Any, src: Any, options: MergeOptions | None) -> Any:
    """Merge ``src`` onto ``dst``; if either is None, ``src`` replaces ``dst``."""
    if dst is None or src is None:
        return src
    options = options or MergeOptions()
    if options.is_append_slice():
        src = _remove_source_duplicates(dst, src)
    return _deep_merge(dst, src, options.merge_configuration())


class Paved:
    """A JSON object whose values can be read and written by field path."""

    def __init__(self, obj: dict[str, Any] | None = None):
        self._object = obj

    def to_json(self) -> str:
        """Serialise the underlying object to JSON."""
        return json.dumps(self._object, sort_keys=True, separators=(",", ":"))

    def load_json(self, data: str | bytes) -> None:
        """Replace the underlying object with the one decoded from ``data``."""
        decoded = json.loads(data)
        if decoded is not None and not isinstance(decoded, dict):
            raise PathError("cannot unmarshal non-object JSON into a paved object")
        self._object = decoded

    def unstructured_content(self) -> dict[str, Any]:
        """Return the JSON-serialisable content; an empty dict if there is none."""
        if self._object is None:
            return {}
        return self._object

    def set_unstructured_content(self, content: dict[str, Any] | None) -> None:
        """Replace the JSON-serialisable content."""
        self._object = content

    def _get(self, segments: Segments) -> Any:
        if not segments:
            return None
        it: Any = self._object
        for i, current in enumerate(segments):
            if current.type is SegmentType.INDEX:
                if not isinstance(it, list):
                    raise PathError(f"{segments[:i]}: not an array")
                if current.index >= len(it):
                    raise NotFoundError(f"{segments[:i + 1]}: no such element")
                it = it[current.index]
            else:
                if not isinstance(it, dict):
                    raise PathError(f"{segments[:i]}: not an object")
                if current.field not in it:
                    raise NotFoundError(f"{segments[:i + 1]}: no such field")
                it = it[current.field]
        return it

    def get_value(self, path: str) -> Any:
        """Return the value at ``path``."""
        return self._get(_parse(path))

    def get_value_into(self, path: str, factory: Callable[[Any], T]) -> T:
        """Return ``factory`` applied to a JSON copy of the value at ``path``."""
        value = _to_json_value(self.get_value(path))
        try:
            return factory(value)
        except (TypeError, ValueError) as err:
            raise PathError(f"cannot unmarshal value from JSON: {err}") from err

    def get_string(self, path: str) -> str:
        """Return the string at ``path``."""
        value = self.get_value(path)
        if not isinstance(value, str):
            raise PathError(f"{path}: not a string")
        return value

    def get_string_array(self, path: str) -> list[str]:
        """Return the array of strings at ``path``."""
        value = self.get_value(path)
        if not isinstance(value, list):
            raise PathError(f"{path}: not an array")
        if not all(isinstance(item, str) for item in value):
            raise PathError(f"{path}: not an array of strings")
        return list(value)

    def get_string_object(self, path: str) -> dict[str, str]:
        """Return the object with string values at ``path``."""
        value = self.get_value(path)
        if not isinstance(value, dict):
            raise PathError(f"{path}: not an object")
        if not all(isinstance(item, str) for item in value.values()):
            raise PathError(f"{path}: not an object with string field values")
        return dict(value)

    def get_bool(self, path: str) -> bool:
        """Return the boolean at ``path``."""
        value = self.get_value(path)
        if not isinstance(value, bool):
            raise PathError(f"{path}: not a bool")
        return value

    def get_number(self, path: str) -> float:
        """Return the floating point number at ``path``."""
        value = self.get_value(path)
        if not isinstance(value, float):
            raise PathError(f"{path}: not a (float64) number")
        return value

    def get_integer(self, path: str) -> int:
        """Return the integer at ``path``."""
        value = self.get_value(path)
        if not isinstance(value, int) or isinstance(value, bool):
            raise PathError(f"{path}: not a (int64) number")
        return value

    def _set(self, segments: Segments, value: Any) -> None:
        v = _to_json_value(value)
        if self._object is None:
            self._object = {}
        node: Any = self._object
        last = len(segments) - 1
        for i, current in enumerate(segments):
            if current.type is SegmentType.INDEX:
                if not isinstance(node, list):
                    raise PathError(f"{segments[:i]} is not an array")
                if i == last:
                    node[current.index] = v
                    return
                _prepare_element(node, current, segments[i + 1])
                node = node[current.index]
            else:
                if not isinstance(node, dict):
                    raise PathError(f"{segments[:i]} is not an object")
                if i == last:
                    node[current.field] = v
                    return
                _prepare_field(node, current, segments[i + 1])
                node = node[current.field]

    def set_value(self, path: str, value: Any) -> None:
        """Set ``value`` at ``path``, creating intermediate objects and arrays."""
        self._set(_parse(path), value)

    def set_string(self, path: str, value: str) -> None:
        """Set a string at ``path``."""
        self.set_value(path, value)

    def set_bool(self, path: str, value: bool) -> None:
        """Set a boolean at ``path``."""
        self.set_value(path, value)

    def set_number(self, path: str, value: float) -> None:
        """Set a number at ``path``."""
        self.set_value(path, value)

    def merge_value(self, path: str, value: Any, options: MergeOptions | None) -> None:
        """Merge ``value`` into the value at ``path`` according to ``options``.

        Without options the existing value is replaced.
        """
        try:
            dst = self.get_value(path)
        except PathError as err:
            if not is_not_found(err) and options is not None:
                raise
            dst = None
        if options is None:
            dst = None
        self.set_value(path, _merge(dst, _to_json_value(value), options))


def pave(obj: dict[str, Any] | None) -> Paved:
    """Pave a JSON object so values can be read and written by field path."""
    return Paved(obj)
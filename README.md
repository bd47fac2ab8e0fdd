# xpkit

Small, dependency-free building blocks for programs that reconcile declared
resources against the outside world: status conditions, field paths over
JSON-like data, object metadata helpers, events, a two-level logger and an
engine that starts and stops named controllers.

## Modules

- `xpkit.conditions`: `Condition`, `ConditionedStatus`, the enums
  `ConditionType`, `ConditionReason` and `ConditionStatus`, and the
  constructors `creating()`, `deleting()`, `available()`, `unavailable()`,
  `reconcile_success()` and `reconcile_error(err)`. Conditions compare equal
  while ignoring their transition time. `ConditionedStatus.set_conditions`
  keeps at most one condition of each type, `get_condition` returns an
  `Unknown` condition for a type that is not set, and `equal` ignores order.
  `new_conditioned_status(*conditions)` builds a status.
- `xpkit.mergeopts`: `MergeOptions(keep_map_values=..., append_slice=...)`.
  `merge_configuration()` returns a `MergeFlag` (`OVERRIDE` by default,
  dropped when `keep_map_values` is true, plus `APPEND_SLICE` when
  `append_slice` is true); `is_append_slice()` reports the latter.
- `xpkit.fieldpath`: `parse(path)` turns paths such as
  `spec.containers[0].name`, `data[.config.yml]` or
  `metadata.annotations['example.com/name']` into `Segments`, a list of
  `Segment` values whose `str()` renders a path again. Malformed paths raise
  `FieldPathError`, whose message gives the byte position, for example
  `unexpected '.' at position 0`. `field(s)` and `field_or_index(s)` build
  single segments; a bracketed unsigned 32-bit integer is an index.
- `xpkit.paved`: `pave(obj)` wraps a dict so values can be read and written by
  field path. `Paved` has `get_value`, `get_value_into(path, factory)`,
  `get_string`, `get_string_array`, `get_string_object`, `get_bool`,
  `get_number` (floats only), `get_integer` (ints only), `set_value`,
  `set_string`, `set_bool`, `set_number`, `merge_value(path, value, options)`,
  `to_json`, `load_json`, `unstructured_content` and
  `set_unstructured_content`. Setting a value creates missing objects and
  grows arrays along the way; values are stored as plain JSON data
  (dataclasses become dicts, enums their values). Errors are `PathError`;
  missing fields and out-of-range indices raise `NotFoundError`, which
  `is_not_found(err)` recognises through chained causes too.
- `xpkit.meta`: `ObjectMeta`, `OwnerReference`, `NamespacedName` and helpers:
  `reference_to`, `typed_reference_to`, `as_owner`, `as_controller`,
  `get_controller_of`, `have_same_controller`, `namespaced_name_of`,
  `add_owner_reference`, `add_controller_reference` (raises
  `ControllerConflictError` when another owner already controls the object),
  finalizer, label and annotation helpers, `was_created`, `was_deleted`,
  `get_external_name`, `set_external_name`, and the propagation helpers
  `allow_propagation`, `annotation_key_propagate_to`,
  `allows_propagation_from` and `allows_propagation_to`.
- `xpkit.types`: `GroupVersionKind` with `to_api_version_and_kind()`,
  `from_api_version_and_kind`, reference and selector records
  (`TypedReference`, `ObjectReference`, `SecretReference`,
  `SecretKeySelector`, `Selector`, ...), spec and status records, and the
  enums `DeletionPolicy`, `UpdatePolicy` and `CredentialsSource`.
- `xpkit.event`: `normal(reason, message, *keys_and_values)` and
  `warning(reason, err, *keys_and_values)` build an `Event`; a trailing key
  without a value is ignored. `APIRecorder` passes events to any object with
  an `annotated_event(obj, annotations, event_type, reason, message)` method;
  `with_annotations` returns a recorder that adds annotations to every event.
  `NopRecorder` discards events.
- `xpkit.logs`: the `Logger` interface (`info`, `debug`, `with_values`),
  `new_logger(log)` over a standard `logging.Logger` (debug messages go out at
  `DEBUG`, key/value pairs are appended as `key=value` and passed as
  `extra["key_values"]`), and `new_nop_logger()`.
- `xpkit.engine`: `Engine(manager, new_cache=..., new_controller=...)` starts
  named controllers, each with its own cache, on background threads that
  wait for `Manager.elected`. `start(name, options, *watches)` does nothing
  if the controller is running and raises `EngineError` if the cache,
  controller or a watch (built with `watch_for(kind, handler, *predicates)`)
  cannot be set up. `is_running(name)`, `stop(name)` and `err(name)` report
  and control each controller; `err` keeps the first crash.

## Example

```python
from xpkit.paved import pave, is_not_found
from xpkit.conditions import (
    ConditionStatus,
    available,
    new_conditioned_status,
    reconcile_success,
)

p = pave({"spec": {"containers": [{"name": "web"}]}})
p.set_value("spec.containers[1].name", "sidecar")
assert p.get_string("spec.containers[1].name") == "sidecar"

try:
    p.get_value("metadata.name")
except Exception as err:
    assert is_not_found(err)

status = new_conditioned_status(available(), reconcile_success())
assert status.get_condition("Ready").status == ConditionStatus.TRUE
```

## What it does not do

xpkit does not talk to any API server. There is no client, no informer or
cache implementation and no controller implementation: `Engine` calls the
`new_cache` and `new_controller` factories you give it and only manages the
lifecycles of what they return. Likewise `APIRecorder` publishes nothing by
itself; it hands events to the sink you supply. There is no command-line
program.

## Install

```
pip install .
```

Run the tests with:

```
pip install .[test]
pytest
```
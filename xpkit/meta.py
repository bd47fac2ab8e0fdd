"""Helpers for working with the metadata of API objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from xpkit.types import GroupVersionKind, ObjectReference, TypedReference

ANNOTATION_KEY_EXTERNAL_NAME = "crossplane.io/external-name"

ANNOTATION_KEY_PROPAGATE_TO_PREFIX = "to.propagate.crossplane.io/"
ANNOTATION_KEY_PROPAGATE_FROM_NAMESPACE = "from.propagate.crossplane.io/namespace"
ANNOTATION_KEY_PROPAGATE_FROM_NAME = "from.propagate.crossplane.io/name"

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193


@dataclass
class OwnerReference:
    """A reference from an object to one of its owners."""

    api_version: str = ""
    kind: str = ""
    name: str = ""
    uid: str = ""
    controller: bool | None = None
    block_owner_deletion: bool | None = None


@dataclass(frozen=True)
class NamespacedName:
    """The namespace and name of an object."""

    namespace: str = ""
    name: str = ""

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class ObjectMeta:
    """The metadata of an API object."""

    namespace: str = ""
    name: str = ""
    uid: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    finalizers: list[str] = field(default_factory=list)
    owner_references: list[OwnerReference] = field(default_factory=list)
    creation_timestamp: datetime | None = None
    deletion_timestamp: datetime | None = None


class ControllerConflictError(ValueError):
    """An object is already controlled by a different owner."""

    def __init__(self, obj_name: str, controller: OwnerReference):
        super().__init__(
            f"{obj_name} is already controlled by {controller.kind} "
            f"{controller.name} (UID {controller.uid})"
        )
        self.controller = controller


def get_controller_of(o: ObjectMeta) -> OwnerReference | None:
    """Return the owner reference marked as controller, if any."""
    return next((r for r in o.owner_references if r.controller), None)


def reference_to(o: ObjectMeta, of: GroupVersionKind) -> ObjectReference:
    """Return an object reference to ``o``, presumed to be of kind ``of``."""
    api_version, kind = of.to_api_version_and_kind()
    return ObjectReference(
        api_version=api_version,
        kind=kind,
        namespace=o.namespace,
        name=o.name,
        uid=o.uid,
    )


def typed_reference_to(o: ObjectMeta, of: GroupVersionKind) -> TypedReference:
    """Return a typed reference to ``o``, presumed to be of kind ``of``."""
    api_version, kind = of.to_api_version_and_kind()
    return TypedReference(api_version=api_version, kind=kind, name=o.name, uid=o.uid)


def as_owner(r: TypedReference) -> OwnerReference:
    """Convert a typed reference to an owner reference."""
    return OwnerReference(api_version=r.api_version, kind=r.kind, name=r.name, uid=r.uid)


def as_controller(r: TypedReference) -> OwnerReference:
    """Convert a typed reference to a controller reference."""
    ref = as_owner(r)
    ref.controller = True
    return ref


def have_same_controller(a: ObjectMeta, b: ObjectMeta) -> bool:
    """Return True if both objects are controlled by the same object."""
    ac = get_controller_of(a)
    bc = get_controller_of(b)
    # Two objects without any controller do not share one.
    if ac is None or bc is None:
        return False
    return ac.uid == bc.uid


def namespaced_name_of(r: ObjectReference) -> NamespacedName:
    """Return the namespaced name of the referenced object."""
    return NamespacedName(namespace=r.namespace, name=r.name)


def add_owner_reference(o: ObjectMeta, r: OwnerReference) -> None:
    """Add an owner, replacing any existing owner with the same UID."""
    for i, existing in enumerate(o.owner_references):
        if existing.uid == r.uid:
            o.owner_references[i] = r
            return
    o.owner_references.append(r)


def add_controller_reference(o: ObjectMeta, r: OwnerReference) -> None:
    """Add a controller reference; raise if another owner already controls ``o``."""
    c = get_controller_of(o)
    if c is not None and c.uid != r.uid:
        raise ControllerConflictError(o.name, c)
    add_owner_reference(o, r)


def add_finalizer(o: ObjectMeta, finalizer: str) -> None:
    """Add ``finalizer`` unless it is already present."""
    if finalizer not in o.finalizers:
        o.finalizers.append(finalizer)


def remove_finalizer(o: ObjectMeta, finalizer: str) -> None:
    """Remove ``finalizer`` from the object."""
    o.finalizers = [f for f in o.finalizers if f != finalizer]


def finalizer_exists(o: ObjectMeta, finalizer: str) -> bool:
    """Return True if ``finalizer`` is set on the object."""
    return finalizer in o.finalizers


def add_labels(o: ObjectMeta, labels: dict[str, str]) -> None:
    """Add the supplied labels to the object."""
    o.labels.update(labels)


def remove_labels(o: ObjectMeta, *args: str) -> None:
    """Remove the labels with the supplied keys."""
    for key in args:
        o.labels.pop(key, None)


def add_annotations(o: ObjectMeta, annotations: dict[str, str]) -> None:
    """Add the supplied annotations to the object."""
    o.annotations.update(annotations)


def remove_annotations(o: ObjectMeta, *args: str) -> None:
    """Remove the annotations with the supplied keys."""
    for key in args:
        o.annotations.pop(key, None)


def was_deleted(o: ObjectMeta) -> bool:
    """Return True if the object was deleted from the API server."""
    return o.deletion_timestamp is not None


def was_created(o: ObjectMeta) -> bool:
    """Return True if the object was created in the API server."""
    return o.creation_timestamp is not None


def get_external_name(o: ObjectMeta) -> str:
    """Return the external name annotation, or an empty string."""
    return o.annotations.get(ANNOTATION_KEY_EXTERNAL_NAME, "")


def set_external_name(o: ObjectMeta, name: str) -> None:
    """Set the external name annotation."""
    add_annotations(o, {ANNOTATION_KEY_EXTERNAL_NAME: name})


def allow_propagation(from_: ObjectMeta, to: ObjectMeta) -> None:
    """Allow propagation between two objects by annotating both."""
    add_annotations(
        to,
        {
            ANNOTATION_KEY_PROPAGATE_FROM_NAMESPACE: from_.namespace,
            ANNOTATION_KEY_PROPAGATE_FROM_NAME: from_.name,
        },
    )
    add_annotations(
        from_, {annotation_key_propagate_to(to): f"{to.namespace}/{to.name}"}
    )


def _fnv1a32(data: bytes, h: int = _FNV32_OFFSET) -> int:
    for byte in data:
        h = ((h ^ byte) * _FNV32_PRIME) & 0xFFFFFFFF
    return h


def annotation_key_propagate_to(o: ObjectMeta) -> str:
    """Return the annotation key consenting to propagation to ``o``.

    The suffix is an FNV-1a hash of the namespace and name of ``o``.
    """
    h = _fnv1a32(o.namespace.encode("utf-8"))
    h = _fnv1a32(o.name.encode("utf-8"), h)
    return f"{ANNOTATION_KEY_PROPAGATE_TO_PREFIX}{h:x}"


def allows_propagation_from(to: ObjectMeta) -> NamespacedName:
    """Return the namespaced name of the object ``to`` should be propagated from."""
    return NamespacedName(
        namespace=to.annotations.get(ANNOTATION_KEY_PROPAGATE_FROM_NAMESPACE, ""),
        name=to.annotations.get(ANNOTATION_KEY_PROPAGATE_FROM_NAME, ""),
    )


def allows_propagation_to(from_: ObjectMeta) -> set[NamespacedName]:
    """Return the namespaced names that ``from_`` may be propagated to."""
    result: set[NamespacedName] = set()
    for key, value in from_.annotations.items():
        if not key.startswith(ANNOTATION_KEY_PROPAGATE_TO_PREFIX):
            continue
        parts = value.split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            continue
        result.add(NamespacedName(namespace=parts[0], name=parts[1]))
    return result
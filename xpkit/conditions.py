"""Conditions that describe the observed state of a resource."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ConditionType(str, Enum):
    """A condition a resource could be in."""

    READY = "Ready"
    SYNCED = "Synced"


class ConditionReason(str, Enum):
    """The reason a resource is in a condition."""

    AVAILABLE = "Available"
    UNAVAILABLE = "Unavailable"
    CREATING = "Creating"
    DELETING = "Deleting"
    RECONCILE_SUCCESS = "ReconcileSuccess"
    RECONCILE_ERROR = "ReconcileError"


class ConditionStatus(str, Enum):
    """Whether a condition currently holds."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Condition:
    """A condition that may apply to a resource.

    The last transition time takes no part in comparisons.
    """

    type: ConditionType | str = ""
    status: ConditionStatus | str = ""
    last_transition_time: datetime | None = field(default=None, compare=False)
    reason: ConditionReason | str = ""
    message: str = ""

    def equal(self, other: Condition) -> bool:
        """Return True if identical to ``other``, ignoring the transition time."""
        return (
            self.type == other.type
            and self.status == other.status
            and self.reason == other.reason
            and self.message == other.message
        )

    def with_message(self, msg: str) -> Condition:
        """Return a copy of this condition carrying ``msg`` as its message."""
        return dataclasses.replace(self, message=msg)


def _type_key(c: Condition) -> str:
    return c.type.value if isinstance(c.type, Enum) else c.type


@dataclass
class ConditionedStatus:
    """The observed status of a resource; at most one condition per type."""

    conditions: list[Condition] = field(default_factory=list)

    def get_condition(self, condition_type: ConditionType | str) -> Condition:
        """Return the condition of the given type, or an Unknown one."""
        for c in self.conditions:
            if c.type == condition_type:
                return c
        return Condition(type=condition_type, status=ConditionStatus.UNKNOWN)

    def set_conditions(self, *args: Condition) -> None:
        """Set conditions, replacing any existing ones of the same type.

        A supplied condition identical (ignoring transition time) to an
        existing one leaves the existing one in place.
        """
        for new in args:
            exists = False
            for i, existing in enumerate(self.conditions):
                if existing.type != new.type:
                    continue
                exists = True
                if not existing.equal(new):
                    self.conditions[i] = new
            if not exists:
                self.conditions.append(new)

    def equal(self, other: ConditionedStatus | None) -> bool:
        """Return True if both hold the same conditions, ignoring order and times."""
        if other is None:
            return False
        if len(self.conditions) != len(other.conditions):
            return False
        mine = sorted(self.conditions, key=_type_key)
        theirs = sorted(other.conditions, key=_type_key)
        return all(a.equal(b) for a, b in zip(mine, theirs))


def new_conditioned_status(*args: Condition) -> ConditionedStatus:
    """Return a status with the supplied conditions set."""
    status = ConditionedStatus()
    status.set_conditions(*args)
    return status


def creating() -> Condition:
    """The resource is currently being created."""
    return Condition(
        type=ConditionType.READY,
        status=ConditionStatus.FALSE,
        last_transition_time=_now(),
        reason=ConditionReason.CREATING,
    )


def deleting() -> Condition:
    """The resource is currently being deleted."""
    return Condition(
        type=ConditionType.READY,
        status=ConditionStatus.FALSE,
        last_transition_time=_now(),
        reason=ConditionReason.DELETING,
    )


def available() -> Condition:
    """The resource is observed to be available for use."""
    return Condition(
        type=ConditionType.READY,
        status=ConditionStatus.TRUE,
        last_transition_time=_now(),
        reason=ConditionReason.AVAILABLE,
    )


def unavailable() -> Condition:
    """The resource is expected to be available but is known not to be."""
    return Condition(
        type=ConditionType.READY,
        status=ConditionStatus.FALSE,
        last_transition_time=_now(),
        reason=ConditionReason.UNAVAILABLE,
    )


def reconcile_success() -> Condition:
    """The most recent reconciliation of the resource succeeded."""
    return Condition(
        type=ConditionType.SYNCED,
        status=ConditionStatus.TRUE,
        last_transition_time=_now(),
        reason=ConditionReason.RECONCILE_SUCCESS,
    )


def reconcile_error(err: BaseException | str) -> Condition:
    """Reconciling the resource failed with ``err``."""
    return Condition(
        type=ConditionType.SYNCED,
        status=ConditionStatus.FALSE,
        last_transition_time=_now(),
        reason=ConditionReason.RECONCILE_ERROR,
        message=str(err),
    )
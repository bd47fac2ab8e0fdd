"""Options controlling how a value is merged into a field path."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Flag, auto


class MergeFlag(Flag):
    """Merge behaviours that may be combined."""

    OVERRIDE = auto()
    APPEND_SLICE = auto()


@dataclass
class MergeOptions:
    """Merge options for a field path.

    ``keep_map_values`` preserves values already present in a merged map;
    ``append_slice`` preserves elements already present in a merged list.
    """

    keep_map_values: bool | None = None
    append_slice: bool | None = None

    def merge_configuration(self) -> MergeFlag:
        """Return the merge flags; by default maps and lists are replaced."""
        config = MergeFlag.OVERRIDE
        if self.keep_map_values:
            config = MergeFlag(0)
        if self.append_slice:
            config |= MergeFlag.APPEND_SLICE
        return config

    def is_append_slice(self) -> bool:
        """Return True if ``append_slice`` is set to True."""
        return bool(self.append_slice)
"""Settings entry model."""

from dataclasses import dataclass


@dataclass
class SettingsEntry:
    """A single settings record.

    ``id`` is assigned by the store when the entry is first persisted and is
    0 before that. ``key`` is chosen by the caller and is unique across the
    store. ``value`` is always text; typed access happens on read.
    """

    id: int = 0
    key: int = 0
    value: str = ""
    description: str = ""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class Option:
    label: str
    key: str


class OptionList:
    """Ordered ``(label, key)`` choices with a selected index.

    The selection is remembered by key as well as by position so that it
    survives growth: after every append the index is re-pointed at the
    entry carrying the previously resolved key.  When that key is gone the
    selection falls back to ``default_index``.
    """

    def __init__(self, *, default_index: int = 0) -> None:
        self._entries: list[Option] = []
        self.default_index = default_index
        self._selected = default_index
        self._selected_key: str | None = None

    # -- read helpers ---------------------------------------------------
    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Option]:
        return iter(list(self._entries))

    def __contains__(self, key: object) -> bool:
        return any(o.key == key for o in self._entries)

    def labels(self) -> list[str]:
        return [o.label for o in self._entries]

    def keys(self) -> list[str]:
        return [o.key for o in self._entries]

    @property
    def selected_index(self) -> int:
        return self._selected

    @property
    def selected_key(self) -> str | None:
        return self._selected_key

    def index_of(self, key: str | None, default: int | None = None) -> int:
        """Return the position of *key* or the fallback index."""

        for i, option in enumerate(self._entries):
            if option.key == key:
                return i
        return self.default_index if default is None else default

    def key_at(self, index: int) -> str:
        """Return the key at *index*; out-of-range indices resolve to entry 0."""

        if not self._entries:
            return ""
        if not 0 <= index < len(self._entries):
            index = 0
        return self._entries[index].key

    # -- mutation -------------------------------------------------------
    def clear(self) -> None:
        self._entries.clear()
        self._selected = self.default_index

    def append(self, label: str, key: str) -> None:
        self._entries.append(Option(label, key))
        self._follow_selected_key()

    def extend(self, options: list[tuple[str, str]]) -> None:
        for label, key in options:
            self._entries.append(Option(label, key))
        self._follow_selected_key()

    def select(self, index: int) -> int:
        """Select *index*, clamping anything out of range to ``0``."""

        if not isinstance(index, int) or isinstance(index, bool):
            index = 0
        if not 0 <= index < max(len(self._entries), 1):
            index = 0
        self._selected = index
        self._selected_key = (
            self._entries[index].key if index < len(self._entries) else None
        )
        return index

    def select_key(self, key: str | None) -> int:
        """Select the entry carrying *key*, falling back to ``default_index``.

        The key is kept as the resolved selection even when it is not (yet)
        present, so that a later append that brings it in re-points the
        selection.
        """

        index = self.index_of(key)
        self.select(index)
        if key is not None and key not in self:
            self._selected_key = key
        return self._selected

    def _follow_selected_key(self) -> None:
        if self._selected_key is None:
            if self._selected < len(self._entries):
                self._selected_key = self._entries[self._selected].key
            return
        for i, option in enumerate(self._entries):
            if option.key == self._selected_key:
                self._selected = i
                return
        self._selected = self.default_index


__all__ = ["Option", "OptionList"]

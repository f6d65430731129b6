from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Iterator, TypeVar

from heatgrid.errors import HeatmapConfigError


K = TypeVar("K", bound=Hashable)


@dataclass(frozen=True)
class AxisEntry(Generic[K]):
    key: K
    label: str
    index: int


class Axis(Generic[K]):
    """Ordered, de-duplicated categorical axis.

    Every key owns a display label and a dense zero-based index assigned in order of
    first insertion. Entries are never removed, so indices are stable for the lifetime
    of the axis.
    """

    def __init__(self, title: str = "", *, to_label: Callable[[K], str] = str) -> None:
        self.title = title or ""
        self._to_label = to_label
        self._indices: dict[K, int] = {}
        self._labels: dict[K, str] = {}

    @classmethod
    def of(cls, title: str, *keys: K) -> "Axis[K]":
        return cls(title).add_entries(*keys)

    @classmethod
    def from_range(cls, title: str, start: int, stop: int) -> "Axis[int]":
        """Integer axis covering ``start..stop`` inclusive."""
        if stop < start:
            raise HeatmapConfigError("stop must be >= start")
        axis: Axis[int] = cls(title)  # type: ignore[assignment]
        for key in range(start, stop + 1):
            axis.add_entry(key)
        return axis

    def add_entry(self, key: K, label: str | None = None) -> "Axis[K]":
        if key in self._indices:
            return self
        self._indices[key] = len(self._indices)
        self._labels[key] = self._to_label(key) if label is None else str(label)
        return self

    def add_entries(self, *keys: K) -> "Axis[K]":
        for key in keys:
            self.add_entry(key)
        return self

    def index_of(self, key: K) -> int | None:
        return self._indices.get(key)

    def label_of(self, key: K) -> str | None:
        return self._labels.get(key)

    def to_label(self, key: K) -> str:
        return self._to_label(key)

    @property
    def count(self) -> int:
        return len(self._indices)

    def labels(self) -> list[str]:
        return [entry.label for entry in self]

    def with_title(self, title: str) -> "Axis[K]":
        out: Axis[K] = Axis(title, to_label=self._to_label)
        for entry in self:
            out.add_entry(entry.key, entry.label)
        return out

    def __len__(self) -> int:
        return len(self._indices)

    def __contains__(self, key: object) -> bool:
        return key in self._indices

    def __iter__(self) -> Iterator[AxisEntry[K]]:
        # dicts keep insertion order, which is also index order
        for key, index in self._indices.items():
            yield AxisEntry(key=key, label=self._labels[key], index=index)

    def __repr__(self) -> str:
        return f"Axis(title={self.title!r}, count={self.count})"

"""
Category Registry

DESIGN DECISION: Categories are free text, but the set of known
labels only ever grows. A record is never rejected for an unknown
category; the registry simply learns it. Nothing is ever removed.
"""

from typing import Iterable, Iterator, Optional

from expense_ledger.config import DEFAULT_CATEGORIES


class CategoryRegistry:
    """Append-only set of known category labels, in first-seen order."""

    def __init__(self, seed: Optional[Iterable[str]] = None):
        self._labels: dict[str, None] = {}
        for label in DEFAULT_CATEGORIES if seed is None else seed:
            self.ensure(label)

    def ensure(self, label: str) -> bool:
        """
        Add a label if it is not known yet.

        Returns True if the label was new. Empty labels are ignored.
        """
        if not label or label in self._labels:
            return False
        self._labels[label] = None
        return True

    def contains(self, label: str) -> bool:
        return label in self._labels

    def all(self) -> list[str]:
        """All known labels, for populating filter choices."""
        return list(self._labels)

    def __contains__(self, label: object) -> bool:
        return label in self._labels

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._labels))

    def __len__(self) -> int:
        return len(self._labels)

    def __repr__(self) -> str:
        return f"CategoryRegistry({self.all()!r})"

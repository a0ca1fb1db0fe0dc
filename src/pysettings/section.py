from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass
class KeyValuePair:
    """A key and its textual value.

    ``line`` is the 1-based line of the settings file where the pair was
    parsed.  Only ``key`` and ``value`` take part in equality.
    """

    key: str
    value: str
    line: int = field(compare=False)
    modified: bool = field(default=False, compare=False)

    def __str__(self) -> str:
        return f"key: {self.key}, value: {self.value}\n"


class Section:
    """Insertion-ordered group of unique keys."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.entries: list[KeyValuePair] = []

    def _find(self, key: str) -> KeyValuePair | None:
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def add(self, key: str, value: str, line: int) -> int | None:
        """Append a pair.

        Returns ``None`` on success or, when *key* already exists, the line
        where it was first defined; the new pair is not stored in that case.
        """
        existing = self._find(key)
        if existing is not None:
            return existing.line
        self.entries.append(KeyValuePair(key, value, line))
        return None

    def get(self, key: str) -> str | None:
        entry = self._find(key)
        return None if entry is None else entry.value

    def set(self, key: str, value: str) -> bool:
        entry = self._find(key)
        if entry is None:
            return False
        entry.value = value
        entry.modified = True
        return True

    def clear(self) -> None:
        self.entries.clear()

    def keys(self) -> list[str]:
        return [entry.key for entry in self.entries]

    def __contains__(self, key: object) -> bool:
        return any(entry.key == key for entry in self.entries)

    def __iter__(self) -> Iterator[KeyValuePair]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Section):
            return NotImplemented
        return self.name == other.name and self.entries == other.entries

    def __repr__(self) -> str:
        return f"Section({self.name!r}, {len(self.entries)} entries)"

    def __str__(self) -> str:
        return f"[{self.name}]\n" + "".join(str(e) for e in self.entries) + "\n"

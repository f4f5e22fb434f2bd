from __future__ import annotations

from collections import Counter
from typing import Iterator


class DeletionCandidates:
    """Set of signal ids marked for deletion, each tagged with the first reason that hit it."""

    def __init__(self) -> None:
        self._reasons: dict[str, str] = {}

    def add(self, signal_id: str, reason: str) -> bool:
        if signal_id in self._reasons:
            return False
        self._reasons[signal_id] = reason
        return True

    def reason_for(self, signal_id: str) -> str | None:
        return self._reasons.get(signal_id)

    def items(self) -> list[tuple[str, str]]:
        return list(self._reasons.items())

    def ids(self) -> list[str]:
        return list(self._reasons)

    def breakdown(self) -> dict[str, int]:
        return dict(Counter(self._reasons.values()))

    def __contains__(self, signal_id: object) -> bool:
        return signal_id in self._reasons

    def __iter__(self) -> Iterator[str]:
        return iter(self._reasons)

    def __len__(self) -> int:
        return len(self._reasons)

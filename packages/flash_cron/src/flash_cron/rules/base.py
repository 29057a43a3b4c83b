from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterator


class RecurrenceRule(ABC):
    """
    Abstract base class for recurrence rules.

    A rule answers "when is the next (or previous) occurrence" relative to a
    point in time. Rules work at one-second granularity: sub-second parts of
    the argument are dropped before searching.
    """

    @abstractmethod
    def first_at_or_after(self, t: datetime) -> datetime | None: ...

    @abstractmethod
    def first_after(self, t: datetime) -> datetime | None: ...

    @abstractmethod
    def last_at_or_before(self, t: datetime) -> datetime | None: ...

    def upcoming(self, t: datetime) -> Iterator[datetime]:
        """Yields successive occurrences strictly after `t`."""
        nxt = self.first_after(t)
        while nxt is not None:
            yield nxt
            nxt = self.first_after(nxt)

    def occurrences_between(
        self, start: datetime, end: datetime
    ) -> Iterator[datetime]:
        """Yields occurrences in the closed interval [floor(start), end]."""
        nxt = self.first_at_or_after(start)
        # Compared as timestamps so a repeated wall hour keeps its order
        while nxt is not None and nxt.timestamp() <= end.timestamp():
            yield nxt
            nxt = self.first_after(nxt)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, self.__class__):
            return self.__dict__ == other.__dict__
        return False

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, repr(self)))

    def __repr__(self) -> str:
        params = ", ".join(
            f"{k}={v!r}" for k, v in self.__dict__.items() if not k.startswith("_")
        )
        return f"{self.__class__.__name__}({params})"

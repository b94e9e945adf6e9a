"""Forward-only reader over the references of a split."""

from __future__ import annotations

from typing import Iterator, Sequence, Tuple

from worksplit.errors import ReaderStateError
from worksplit.models import SplitRecord


class SequentialReader:
    """Yields ``(index, path)`` pairs for each reference in a split.

    The reader starts before the first element; call :meth:`advance` to move
    onto it. Once :meth:`advance` returns ``False`` the reader is exhausted
    and stays that way.
    """

    def __init__(self, split: SplitRecord) -> None:
        self.split = split
        self._paths = split.paths
        self._total = len(self._paths)
        self._index = -1
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def advance(self) -> bool:
        if self._exhausted:
            return False
        if self._index + 1 < self._total:
            self._index += 1
            return True
        self._exhausted = True
        return False

    def current(self) -> Tuple[int, str]:
        if self._exhausted:
            raise ReaderStateError("Reader is exhausted")
        if self._index < 0:
            raise ReaderStateError("Reader has not been advanced yet")
        return self._index, self._paths[self._index]

    def progress(self) -> float:
        if self._exhausted or self._total == 0:
            return 1.0
        return max(self._index, 0) / self._total

    def locations(self) -> Sequence[str]:
        return self.split.locations()

    def close(self) -> None:
        pass

    def __iter__(self) -> Iterator[Tuple[int, str]]:
        while self.advance():
            yield self.current()

    def __enter__(self) -> "SequentialReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

"""Storage collaborator contract consumed by the planner."""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from worksplit.models import BlockLocation


@runtime_checkable
class Storage(Protocol):
    """Minimal view of a block storage layer.

    Every method raises :class:`worksplit.errors.NotFoundError` for a missing
    location. Any other failure propagates as-is and aborts planning.
    """

    def list_status(self, path: str) -> List[str]:
        """Return the entries of ``path``; a plain file lists as itself."""
        ...

    def read_bytes(self, path: str) -> bytes: ...

    def file_length(self, path: str) -> int: ...

    def block_locations(self, path: str, offset: int, length: int) -> List[BlockLocation]:
        """Return the blocks overlapping ``[offset, offset + length)`` in file order."""
        ...

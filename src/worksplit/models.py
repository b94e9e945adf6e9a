"""Core worksplit data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

from worksplit.errors import MissingLocalityDataError


@dataclass(frozen=True, slots=True)
class WorkDescriptor:
    """A unit of processing pointing at a byte range of a source file."""

    source_file_path: Optional[str] = None
    range_start: int = 0
    range_end: Optional[int] = None
    properties: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if self.range_start < 0:
            raise ValueError(f"range_start must be non-negative, got {self.range_start}")
        if self.range_end is not None and self.range_end < self.range_start:
            raise ValueError(
                f"range_end ({self.range_end}) must not precede range_start ({self.range_start})"
            )

    @property
    def has_locality(self) -> bool:
        return bool(self.source_file_path)

    def require_source_path(self) -> str:
        if not self.source_file_path:
            raise MissingLocalityDataError(
                f"work descriptor with missing source file path - {self}"
            )
        return self.source_file_path


@dataclass(frozen=True, slots=True)
class Single:
    """Descriptor file holding exactly one descriptor."""

    descriptor: WorkDescriptor

    def flatten(self) -> list[WorkDescriptor]:
        return [self.descriptor]


@dataclass(frozen=True, slots=True)
class Container:
    """Descriptor file bundling several descriptors, order preserved."""

    descriptors: Tuple[WorkDescriptor, ...]

    def flatten(self) -> list[WorkDescriptor]:
        return list(self.descriptors)


DescriptorFile = Union[Single, Container]


@dataclass(frozen=True, slots=True)
class BlockLocation:
    """A physical block of a file and the hosts storing a replica of it."""

    hosts: Tuple[str, ...]
    offset: int
    length: int


@runtime_checkable
class Locatable(Protocol):
    """Anything that can report the hosts it would prefer to run on."""

    def locations(self) -> Sequence[str]: ...


@runtime_checkable
class Codec(Protocol):
    """Anything with a stable binary representation."""

    def encode(self) -> bytes: ...


def _unique(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(values))


@dataclass(frozen=True, slots=True, eq=False)
class SplitRecord:
    """Ordered descriptor-file references handed to a single worker.

    Paths compare in order; preferred hosts compare as a set.
    """

    paths: Tuple[str, ...]
    preferred_hosts: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "paths", tuple(self.paths))
        object.__setattr__(self, "preferred_hosts", _unique(self.preferred_hosts))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SplitRecord):
            return NotImplemented
        return self.paths == other.paths and frozenset(self.preferred_hosts) == frozenset(
            other.preferred_hosts
        )

    def __hash__(self) -> int:
        return hash((self.paths, frozenset(self.preferred_hosts)))

    def __len__(self) -> int:
        return len(self.paths)

    def locations(self) -> Sequence[str]:
        return self.preferred_hosts

    def encode(self) -> bytes:
        from worksplit.codec import encode

        return encode(self)

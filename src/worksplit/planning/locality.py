"""Host weighting for data-local split placement."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from worksplit.config import LOCALITY_THRESHOLD, MIN_LOCATION_NAMES
from worksplit.errors import MissingLocalityDataError
from worksplit.models import BlockLocation, WorkDescriptor
from worksplit.storage.base import Storage

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class HostWeights:
    """Bytes contributed by each host across a set of descriptors."""

    by_host: Dict[str, int] = field(default_factory=dict)
    total_length: int = 0

    def add(self, hosts: Iterable[str], num_bytes: int) -> None:
        if num_bytes <= 0:
            return
        for host in hosts:
            self.by_host[host] = self.by_host.get(host, 0) + num_bytes

    def ranked(self) -> List[Tuple[str, int]]:
        """Hosts ordered by weight, heaviest first; ties keep insertion order."""
        return sorted(self.by_host.items(), key=lambda item: item[1], reverse=True)


def clipped_length(block: BlockLocation, range_start: int, range_end: int) -> int:
    """Bytes of ``block`` falling inside ``[range_start, range_end)``."""
    start = max(block.offset, range_start)
    end = min(block.offset + block.length, range_end)
    return max(end - start, 0)


def select_top_hosts(
    ranked: Sequence[Tuple[str, int]],
    total_length: int,
    *,
    min_location_names: int = MIN_LOCATION_NAMES,
    locality_threshold: float = LOCALITY_THRESHOLD,
) -> List[str]:
    """Cut the ranked host list down to the hosts worth reporting.

    A host is kept while fewer than ``min_location_names`` hosts have been
    kept, while it ties with the previously kept host, or while it alone
    holds at least ``locality_threshold`` of the bytes.
    """
    previous: int | None = None
    end = 0
    while end < len(ranked):
        value = ranked[end][1]
        share = value / total_length if total_length > 0 else 0.0
        if not (end < min_location_names or value == previous or share >= locality_threshold):
            break
        previous = value
        end += 1
    return [host for host, _ in ranked[:end]]


class HostWeightEstimator:
    """Ranks the hosts storing the largest share of a descriptor set's bytes."""

    def __init__(
        self,
        storage: Storage,
        *,
        min_location_names: int = MIN_LOCATION_NAMES,
        locality_threshold: float = LOCALITY_THRESHOLD,
    ) -> None:
        self.storage = storage
        self.min_location_names = min_location_names
        self.locality_threshold = locality_threshold

    def accumulate(self, descriptors: Iterable[WorkDescriptor]) -> HostWeights:
        weights = HostWeights()
        for descriptor in descriptors:
            try:
                path = descriptor.require_source_path()
            except MissingLocalityDataError as exc:
                LOGGER.warning("Skipping block location retrieval for %s", exc)
                continue

            range_start = descriptor.range_start
            range_end = descriptor.range_end
            if range_end is None:
                range_end = self.storage.file_length(path)
            length = max(range_end - range_start, 0)
            weights.total_length += length

            for block in self.storage.block_locations(path, range_start, length):
                weights.add(block.hosts, clipped_length(block, range_start, range_start + length))
        return weights

    def estimate(self, descriptors: Iterable[WorkDescriptor]) -> List[str]:
        weights = self.accumulate(descriptors)
        hosts = select_top_hosts(
            weights.ranked(),
            weights.total_length,
            min_location_names=self.min_location_names,
            locality_threshold=self.locality_threshold,
        )
        LOGGER.debug("Selected hosts %s out of %d candidates", hosts, len(weights.by_host))
        return hosts

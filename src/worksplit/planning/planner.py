"""Split planning: group descriptor files and attach preferred hosts."""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Sequence

from worksplit.config import PlannerConfig
from worksplit.errors import NoInputError
from worksplit.models import SplitRecord
from worksplit.planning.locality import HostWeightEstimator
from worksplit.planning.resolver import DescriptorResolver
from worksplit.storage.base import Storage

LOGGER = logging.getLogger(__name__)


def group_size(reference_count: int, max_workers: int | None) -> int:
    """Number of references per group so at most ``max_workers`` groups exist."""
    if max_workers is None:
        return 1
    return math.ceil(reference_count / max(max_workers, 1))


def chunk(references: Sequence[str], size: int) -> List[List[str]]:
    return [list(references[i : i + size]) for i in range(0, len(references), size)]


class SplitPlanner:
    """Partitions descriptor files into worker-sized, locality-aware splits."""

    def __init__(
        self,
        storage: Storage,
        config: PlannerConfig | None = None,
        *,
        resolver: DescriptorResolver | None = None,
        estimator: HostWeightEstimator | None = None,
    ) -> None:
        self.storage = storage
        self.config = config or PlannerConfig()
        self.resolver = resolver or DescriptorResolver(storage)
        self.estimator = estimator or HostWeightEstimator(
            storage,
            min_location_names=self.config.min_location_names,
            locality_threshold=self.config.locality_threshold,
        )

    def list_references(self, inputs: Iterable[str]) -> List[str]:
        """Expand input locations into the descriptor files they hold."""
        references: List[str] = []
        for location in inputs:
            found = self.storage.list_status(str(location))
            LOGGER.info("Found %d input files at %s: %s", len(found), location, found)
            references.extend(found)
        return references

    def hosts_for(self, ref: str) -> List[str]:
        return self.estimator.estimate(self.resolver.resolve(ref))

    def plan(self, references: Sequence[str], max_workers: int | None = None) -> List[SplitRecord]:
        """Group ``references`` into at most ``max_workers`` splits.

        ``max_workers`` falls back to the configured bound; leaving both unset
        yields one split per reference.
        """
        if not references:
            raise NoInputError("No input found!")
        if max_workers is None:
            max_workers = self.config.max_workers

        size = group_size(len(references), max_workers)
        splits: List[SplitRecord] = []
        for group in chunk(references, size):
            hosts: List[str] = []
            for ref in group:
                hosts.extend(self.hosts_for(ref))
            splits.append(SplitRecord(paths=tuple(group), preferred_hosts=tuple(hosts)))

        LOGGER.info(
            "Planned %d splits of up to %d references from %d inputs",
            len(splits),
            size,
            len(references),
        )
        return splits

    def plan_inputs(self, inputs: Iterable[str], max_workers: int | None = None) -> List[SplitRecord]:
        return self.plan(self.list_references(inputs), max_workers)

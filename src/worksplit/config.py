"""Planner configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

MIN_LOCATION_NAMES = 3
LOCALITY_THRESHOLD = 0.75
DEFAULT_BLOCK_SIZE = 128 * 1024 * 1024

ENV_MAX_WORKERS = "WORKSPLIT_MAX_WORKERS"
ENV_BLOCK_SIZE = "WORKSPLIT_BLOCK_SIZE"
ENV_HOST_MAP = "WORKSPLIT_HOST_MAP"


def _int_from_env(env: Mapping[str, str], key: str) -> int | None:
    raw = env.get(key, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc


@dataclass(slots=True)
class PlannerConfig:
    max_workers: int | None = None
    min_location_names: int = MIN_LOCATION_NAMES
    locality_threshold: float = LOCALITY_THRESHOLD
    block_size: int = DEFAULT_BLOCK_SIZE
    host_map: Path | None = None

    def __post_init__(self) -> None:
        if self.block_size <= 0:
            raise ValueError(f"block_size must be positive, got {self.block_size}")
        if self.host_map is not None:
            self.host_map = Path(self.host_map)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "PlannerConfig":
        """Build a config from ``WORKSPLIT_*`` environment variables."""
        env = os.environ if env is None else env
        block_size = _int_from_env(env, ENV_BLOCK_SIZE)
        host_map = env.get(ENV_HOST_MAP, "").strip()
        return cls(
            max_workers=_int_from_env(env, ENV_MAX_WORKERS),
            block_size=block_size if block_size is not None else DEFAULT_BLOCK_SIZE,
            host_map=Path(host_map) if host_map else None,
        )


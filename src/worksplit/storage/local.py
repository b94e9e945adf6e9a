"""Local filesystem storage with a simulated block layout."""

from __future__ import annotations

import json
import logging
import socket
from pathlib import Path
from typing import Dict, List, Mapping, Sequence, Tuple

from worksplit.config import DEFAULT_BLOCK_SIZE, PlannerConfig
from worksplit.errors import NotFoundError
from worksplit.models import BlockLocation

LOGGER = logging.getLogger(__name__)

DEFAULT_KEY = "*"

HostLayout = Tuple[Tuple[str, ...], ...]


def load_host_map(path: Path) -> Dict[str, HostLayout]:
    """Load a host map file.

    The file maps a data file path (or ``"*"`` for every other file) to a
    list of per-block host lists. Block ``i`` of a file is stored on
    ``layout[i % len(layout)]``.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise NotFoundError(f"Host map {path} does not exist.") from exc
    if not isinstance(raw, dict):
        raise ValueError(f"Host map {path} must be a JSON object")

    host_map: Dict[str, HostLayout] = {}
    for key, layout in raw.items():
        if not isinstance(layout, list) or not all(isinstance(hosts, list) for hosts in layout):
            raise ValueError(f"Host map entry {key!r} must be a list of host lists")
        host_map[key] = tuple(tuple(str(host) for host in hosts) for hosts in layout)
    return host_map


class LocalFileStorage:
    """Serves descriptor files and block layouts from the local filesystem."""

    def __init__(
        self,
        *,
        block_size: int = DEFAULT_BLOCK_SIZE,
        host_map: Mapping[str, Sequence[Sequence[str]]] | None = None,
        default_hosts: Sequence[str] | None = None,
    ) -> None:
        if block_size <= 0:
            raise ValueError(f"block_size must be positive, got {block_size}")
        self.block_size = block_size
        self.host_map: Dict[str, HostLayout] = {
            self._key(path): tuple(tuple(hosts) for hosts in layout)
            for path, layout in (host_map or {}).items()
        }
        self.default_hosts = tuple(default_hosts) if default_hosts else (socket.gethostname(),)

    @classmethod
    def from_config(cls, config: PlannerConfig) -> "LocalFileStorage":
        host_map = load_host_map(config.host_map) if config.host_map is not None else None
        return cls(block_size=config.block_size, host_map=host_map)

    @staticmethod
    def _key(path: str) -> str:
        if path == DEFAULT_KEY:
            return path
        return str(Path(path).expanduser().resolve())

    def _existing(self, path: str) -> Path:
        resolved = Path(path).expanduser()
        if not resolved.exists():
            raise NotFoundError(f"Path {path} does not exist.")
        return resolved

    def list_status(self, path: str) -> List[str]:
        resolved = self._existing(path)
        if resolved.is_dir():
            return [str(child) for child in sorted(resolved.iterdir()) if child.is_file()]
        return [str(resolved)]

    def read_bytes(self, path: str) -> bytes:
        return self._existing(path).read_bytes()

    def file_length(self, path: str) -> int:
        return self._existing(path).stat().st_size

    def _hosts_for_block(self, path: str, index: int) -> Tuple[str, ...]:
        layout = self.host_map.get(self._key(path)) or self.host_map.get(DEFAULT_KEY)
        if not layout:
            return self.default_hosts
        return layout[index % len(layout)]

    def block_locations(self, path: str, offset: int, length: int) -> List[BlockLocation]:
        file_length = self.file_length(path)
        end = min(offset + length, file_length)
        if length <= 0 or offset >= end:
            return []

        blocks: List[BlockLocation] = []
        for index in range(offset // self.block_size, (end - 1) // self.block_size + 1):
            block_offset = index * self.block_size
            blocks.append(
                BlockLocation(
                    hosts=self._hosts_for_block(path, index),
                    offset=block_offset,
                    length=min(self.block_size, file_length - block_offset),
                )
            )
        LOGGER.debug("%d blocks overlap %s[%d:%d]", len(blocks), path, offset, end)
        return blocks

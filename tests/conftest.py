"""Shared fixtures for worksplit tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Sequence

import pytest

from worksplit.errors import NotFoundError
from worksplit.models import BlockLocation


class InMemoryStorage:
    """Storage double keeping descriptor files and block layouts in dicts."""

    def __init__(self) -> None:
        self.files: Dict[str, bytes] = {}
        self.directories: Dict[str, List[str]] = {}
        self.lengths: Dict[str, int] = {}
        self.blocks: Dict[str, List[BlockLocation]] = {}
        self.calls: List[str] = []

    def add_descriptor(self, ref: str, payload: object) -> str:
        self.files[ref] = json.dumps(payload).encode("utf-8")
        return ref

    def add_data_file(self, path: str, layout: Sequence[Sequence[str]], block_size: int) -> None:
        """Register a data file whose block ``i`` lives on ``layout[i]``."""
        self.lengths[path] = len(layout) * block_size
        self.blocks[path] = [
            BlockLocation(hosts=tuple(hosts), offset=i * block_size, length=block_size)
            for i, hosts in enumerate(layout)
        ]

    def list_status(self, path: str) -> List[str]:
        if path in self.directories:
            return list(self.directories[path])
        if path in self.files:
            return [path]
        raise NotFoundError(f"Path {path} does not exist.")

    def read_bytes(self, path: str) -> bytes:
        self.calls.append(path)
        try:
            return self.files[path]
        except KeyError:
            raise NotFoundError(f"Path {path} does not exist.") from None

    def file_length(self, path: str) -> int:
        try:
            return self.lengths[path]
        except KeyError:
            raise NotFoundError(f"Path {path} does not exist.") from None

    def block_locations(self, path: str, offset: int, length: int) -> List[BlockLocation]:
        if path not in self.blocks:
            raise NotFoundError(f"Path {path} does not exist.")
        end = offset + length
        return [
            block
            for block in self.blocks[path]
            if block.offset < end and block.offset + block.length > offset
        ]


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def descriptor_dir(tmp_path: Path) -> Path:
    """A directory with two single descriptors and one container over a local data file."""
    data = tmp_path / "data.bin"
    data.write_bytes(b"x" * 1000)

    work = tmp_path / "work"
    work.mkdir()
    (work / "a.wu").write_text(
        json.dumps({"source_file_path": str(data), "range_start": 0, "range_end": 500})
    )
    (work / "b.wu").write_text(json.dumps({"source_file_path": str(data), "range_start": 500}))
    (work / "c.mwu").write_text(
        json.dumps(
            {
                "descriptors": [
                    {"source_file_path": str(data), "range_start": 100, "range_end": 200},
                    {"task": "no locality"},
                ]
            }
        )
    )
    return work

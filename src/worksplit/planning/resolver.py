"""Descriptor file loading."""

from __future__ import annotations

import json
import logging
from typing import Any, List

from worksplit.errors import DescriptorFormatError
from worksplit.models import Container, DescriptorFile, Single, WorkDescriptor
from worksplit.storage.base import Storage

LOGGER = logging.getLogger(__name__)

CONTAINER_EXTENSION = ".mwu"

_FIELDS = ("source_file_path", "range_start", "range_end")


def is_container(ref: str) -> bool:
    return ref.endswith(CONTAINER_EXTENSION)


def _optional_int(ref: str, payload: dict, key: str) -> int | None:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise DescriptorFormatError(f"{ref}: '{key}' must be an integer, got {value!r}")
    return value


def parse_descriptor(ref: str, payload: Any) -> WorkDescriptor:
    if not isinstance(payload, dict):
        raise DescriptorFormatError(f"{ref}: descriptor must be a JSON object")

    source = payload.get("source_file_path")
    if source is not None and not isinstance(source, str):
        raise DescriptorFormatError(f"{ref}: 'source_file_path' must be a string")

    range_start = _optional_int(ref, payload, "range_start")
    try:
        return WorkDescriptor(
            source_file_path=source,
            range_start=range_start if range_start is not None else 0,
            range_end=_optional_int(ref, payload, "range_end"),
            properties={k: v for k, v in payload.items() if k not in _FIELDS},
        )
    except ValueError as exc:
        raise DescriptorFormatError(f"{ref}: {exc}") from exc


def parse_descriptor_file(ref: str, raw: bytes) -> DescriptorFile:
    """Decode the JSON body of a descriptor file into its tagged variant."""
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DescriptorFormatError(f"{ref}: not a valid descriptor file ({exc})") from exc

    if not is_container(ref):
        return Single(parse_descriptor(ref, payload))

    if isinstance(payload, dict):
        payload = payload.get("descriptors")
    if not isinstance(payload, list):
        raise DescriptorFormatError(f"{ref}: container must hold a 'descriptors' list")
    return Container(tuple(parse_descriptor(ref, item) for item in payload))


class DescriptorResolver:
    """Expands descriptor-file references into flat descriptor lists."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def load(self, ref: str) -> DescriptorFile:
        return parse_descriptor_file(ref, self.storage.read_bytes(ref))

    def resolve(self, ref: str) -> List[WorkDescriptor]:
        descriptors = self.load(ref).flatten()
        LOGGER.debug("Resolved %d descriptors from %s", len(descriptors), ref)
        return descriptors

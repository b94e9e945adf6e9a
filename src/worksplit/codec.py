"""Binary wire format for split records.

Layout, all integers big-endian::

    [path_count:int32] ([len:uint16][utf-8 bytes]) * path_count
    [host_count:int32] ([len:uint16][utf-8 bytes]) * host_count
"""

from __future__ import annotations

import struct
from typing import List, Sequence, Tuple

from worksplit.errors import CorruptRecordError
from worksplit.models import SplitRecord

_COUNT = struct.Struct(">i")
_STR_LEN = struct.Struct(">H")
MAX_STRING_BYTES = 0xFFFF


def _write_strings(out: bytearray, values: Sequence[str]) -> None:
    out += _COUNT.pack(len(values))
    for value in values:
        raw = value.encode("utf-8")
        if len(raw) > MAX_STRING_BYTES:
            raise ValueError(f"Encoded string is too long ({len(raw)} bytes): {value[:64]!r}...")
        out += _STR_LEN.pack(len(raw))
        out += raw


def encode(record: SplitRecord) -> bytes:
    """Serialize a split record into its wire representation."""
    out = bytearray()
    _write_strings(out, record.paths)
    _write_strings(out, record.preferred_hosts)
    return bytes(out)


class _Cursor:
    def __init__(self, data: bytes) -> None:
        self.data = memoryview(data)
        self.pos = 0

    def take(self, size: int, what: str) -> memoryview:
        end = self.pos + size
        if end > len(self.data):
            raise CorruptRecordError(
                f"Truncated record: needed {size} bytes for {what} at offset {self.pos}, "
                f"only {len(self.data) - self.pos} left"
            )
        chunk = self.data[self.pos : end]
        self.pos = end
        return chunk

    def read_strings(self, what: str) -> List[str]:
        (count,) = _COUNT.unpack(self.take(_COUNT.size, f"{what} count"))
        if count < 0:
            raise CorruptRecordError(f"Negative {what} count: {count}")
        values: List[str] = []
        for i in range(count):
            (size,) = _STR_LEN.unpack(self.take(_STR_LEN.size, f"{what}[{i}] length"))
            raw = self.take(size, f"{what}[{i}]")
            try:
                values.append(bytes(raw).decode("utf-8"))
            except UnicodeDecodeError as exc:
                raise CorruptRecordError(f"Invalid UTF-8 in {what}[{i}]") from exc
        return values


def _decode_parts(data: bytes) -> Tuple[List[str], List[str]]:
    cursor = _Cursor(data)
    paths = cursor.read_strings("path")
    hosts = cursor.read_strings("host")
    if cursor.pos != len(cursor.data):
        raise CorruptRecordError(f"{len(cursor.data) - cursor.pos} trailing bytes after record")
    return paths, hosts


def decode(data: bytes) -> SplitRecord:
    """Build a split record from its wire representation."""
    paths, hosts = _decode_parts(data)
    return SplitRecord(paths=tuple(paths), preferred_hosts=tuple(hosts))

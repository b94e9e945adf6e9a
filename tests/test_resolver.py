"""Tests for descriptor file resolution."""

from __future__ import annotations

import pytest

from worksplit.errors import DescriptorFormatError, NotFoundError
from worksplit.models import Container, Single, WorkDescriptor
from worksplit.planning.resolver import (
    DescriptorResolver,
    is_container,
    parse_descriptor_file,
)


class TestParseDescriptorFile:
    """Test JSON descriptor parsing."""

    def test_single(self) -> None:
        parsed = parse_descriptor_file(
            "job/a.wu",
            b'{"source_file_path": "/data/a", "range_start": 5, "range_end": 10, "owner": "etl"}',
        )

        assert isinstance(parsed, Single)
        assert parsed.descriptor == WorkDescriptor("/data/a", 5, 10)
        assert parsed.descriptor.properties == {"owner": "etl"}

    def test_single_defaults(self) -> None:
        parsed = parse_descriptor_file("a.wu", b'{"source_file_path": "/data/a"}')
        assert parsed == Single(WorkDescriptor(source_file_path="/data/a"))

    def test_container_object(self) -> None:
        parsed = parse_descriptor_file(
            "job/b.mwu",
            b'{"descriptors": [{"source_file_path": "/x"}, {"source_file_path": "/y"}]}',
        )

        assert isinstance(parsed, Container)
        assert [d.source_file_path for d in parsed.flatten()] == ["/x", "/y"]

    def test_container_list(self) -> None:
        parsed = parse_descriptor_file("b.mwu", b'[{"source_file_path": "/x"}, {}]')
        assert parsed.flatten() == [WorkDescriptor("/x"), WorkDescriptor()]

    def test_empty_container(self) -> None:
        assert parse_descriptor_file("b.mwu", b'{"descriptors": []}').flatten() == []

    @pytest.mark.parametrize(
        ("ref", "raw", "message"),
        [
            ("a.wu", b"not json", "not a valid descriptor file"),
            ("a.wu", b"\xff\xfe", "not a valid descriptor file"),
            ("a.wu", b"[1, 2]", "must be a JSON object"),
            ("a.wu", b'{"source_file_path": 3}', "must be a string"),
            ("a.wu", b'{"range_start": "0"}', "'range_start' must be an integer"),
            ("a.wu", b'{"range_end": true}', "'range_end' must be an integer"),
            ("a.wu", b'{"range_start": -4}', "non-negative"),
            ("a.wu", b'{"range_start": 10, "range_end": 2}', "must not precede"),
            ("b.mwu", b'{"items": []}', "'descriptors' list"),
            ("b.mwu", b'[{"source_file_path": 1}]', "must be a string"),
        ],
    )
    def test_invalid(self, ref: str, raw: bytes, message: str) -> None:
        with pytest.raises(DescriptorFormatError, match=message):
            parse_descriptor_file(ref, raw)


def test_is_container() -> None:
    assert is_container("/job/units.mwu")
    assert not is_container("/job/unit.wu")
    assert not is_container("/job/unit.mwu.bak")


class TestDescriptorResolver:
    """Test resolution through storage."""

    def test_resolve_single(self, storage) -> None:
        storage.add_descriptor("a.wu", {"source_file_path": "/data/a"})

        assert DescriptorResolver(storage).resolve("a.wu") == [WorkDescriptor("/data/a")]

    def test_resolve_container_preserves_order(self, storage) -> None:
        storage.add_descriptor(
            "b.mwu",
            {"descriptors": [{"source_file_path": f"/data/{i}"} for i in range(5)]},
        )

        resolved = DescriptorResolver(storage).resolve("b.mwu")

        assert [d.source_file_path for d in resolved] == [f"/data/{i}" for i in range(5)]

    def test_missing_reference(self, storage) -> None:
        with pytest.raises(NotFoundError):
            DescriptorResolver(storage).resolve("missing.wu")

    def test_load_returns_variant(self, storage) -> None:
        storage.add_descriptor("b.mwu", [{"source_file_path": "/data/a"}])
        assert isinstance(DescriptorResolver(storage).load("b.mwu"), Container)

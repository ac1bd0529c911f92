"""Tests for the streaming archive reader and entry filter."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from orcid_toolkit.pipeline.ingestion.archive import (
    ArchiveError,
    ArchiveReader,
    ReaderMetrics,
    filter_record_entries,
    read_document,
)


def test_record_entries_filters_by_suffix(make_archive) -> None:
    archive = make_archive(
        [
            ("summaries/000/0000-0000-0000-0001.xml", "<a/>"),
            ("summaries/README.txt", "not a record"),
            ("summaries/000/0000-0000-0000-0002.xml", "<b/>"),
        ],
        directories=["summaries", "summaries/000"],
    )

    with ArchiveReader(archive) as reader:
        entries = list(reader.record_entries())

    assert [entry.name for entry in entries] == [
        "summaries/000/0000-0000-0000-0001.xml",
        "summaries/000/0000-0000-0000-0002.xml",
    ]
    assert [entry.content for entry in entries] == ["<a/>", "<b/>"]
    assert reader.metrics.as_dict() == {"entries_seen": 5, "entries_skipped": 3, "entries_read": 2}


@pytest.mark.parametrize("mode", ["w:gz", "w:bz2", "w:xz", "w"])
def test_compression_is_detected(make_archive, mode: str) -> None:
    archive = make_archive({"r/1.xml": "<a/>"}, name=f"archive-{mode.replace(':', '-')}.tar", mode=mode)

    with ArchiveReader(archive) as reader:
        assert [entry.name for entry in reader.record_entries()] == ["r/1.xml"]


def test_non_utf8_entries_are_skipped(make_archive) -> None:
    archive = make_archive({"r/bad.xml": b"\xff\xfe\x00bad", "r/good.xml": "<ok/>"})

    with ArchiveReader(archive) as reader:
        entries = list(reader.record_entries())

    assert [entry.name for entry in entries] == ["r/good.xml"]
    assert reader.metrics.entries_skipped == 1


def test_custom_suffix(make_archive) -> None:
    archive = make_archive({"r/1.xml": "<a/>", "r/2.rec": "<b/>"})

    with ArchiveReader(archive) as reader:
        assert [entry.name for entry in reader.record_entries(suffix=".rec")] == ["r/2.rec"]


def test_reader_accepts_binary_stream(make_archive) -> None:
    data = make_archive({"r/1.xml": "<a/>"}).read_bytes()

    with ArchiveReader(io.BytesIO(data)) as reader:
        assert len(list(reader.record_entries())) == 1


def test_reader_is_single_pass(make_archive) -> None:
    with ArchiveReader(make_archive({"r/1.xml": "<a/>"})) as reader:
        list(reader.record_entries())
        with pytest.raises(ArchiveError):
            list(reader.members())


def test_garbage_input_is_fatal(tmp_path: Path) -> None:
    bogus = tmp_path / "bogus.tar.gz"
    bogus.write_bytes(b"this is not an archive at all" * 40)

    with pytest.raises(ArchiveError):
        ArchiveReader(bogus)


def test_missing_archive_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(ArchiveError):
        ArchiveReader(tmp_path / "absent.tar.gz")


def test_filter_skips_members_without_stream() -> None:
    metrics = ReaderMetrics()
    members = [("dir/", None), ("dir/a.xml", io.BytesIO(b"<a/>"))]

    entries = list(filter_record_entries(members, metrics=metrics))

    assert [entry.name for entry in entries] == ["dir/a.xml"]
    assert metrics.entries_skipped == 1
    assert metrics.entries_read == 1


def test_read_document(alex_path: Path) -> None:
    entry = read_document(alex_path)
    assert entry.name == "alex.xml"
    assert "0000-0002-5082-6404" in entry.content

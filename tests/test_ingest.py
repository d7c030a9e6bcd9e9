import logging
import os
from pathlib import Path

import pytest

from markdown_transport.config import ConfigError, TransportConfig
from markdown_transport.content import filter_published, sort_by_date
from markdown_transport.ingest import iter_content_files, load_all, load_file


def _write(path: Path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")


def test_load_all_from_nested_directories(tmp_path: Path) -> None:
    content = tmp_path / "content"
    _write(content / "posts" / "first.md", "---\ntitle: First\ndraft: false\n---\nFirst body")
    _write(content / "notes" / "second.markdown", "---\ntitle: Second\n---\nSecond body")
    _write(content / "notes" / "ignore.txt", "Plain text")
    _write(content / "top.md", "No front matter")

    records = load_all(TransportConfig(content_dir=content))

    assert [record.slug for record in records] == ["second", "first", "top"]
    assert records[1].metadata.title == "First"
    assert records[2].metadata.title == "Untitled"


def test_traversal_is_depth_first_in_name_order(tmp_path: Path) -> None:
    content = tmp_path / "content"
    for relative in ("b.md", "a/z.md", "a/deeper/y.md", "c/x.md"):
        _write(content / relative, "body")

    paths = [path.relative_to(content).as_posix() for path in iter_content_files(content)]

    assert paths == ["a/deeper/y.md", "a/z.md", "b.md", "c/x.md"]


def test_custom_extensions_are_respected(tmp_path: Path) -> None:
    content = tmp_path / "content"
    _write(content / "one.md", "body")
    _write(content / "two.mdx", "body")

    records = load_all(TransportConfig(content_dir=content, extensions=["mdx"]))

    assert [record.slug for record in records] == ["two"]


def test_returns_empty_when_directory_missing(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    records = load_all(TransportConfig(content_dir=tmp_path / "missing"))

    assert records == []
    assert "Directory not found" in caplog.text


def test_missing_content_directory_configuration_raises() -> None:
    with pytest.raises(ConfigError):
        load_all(TransportConfig())


def test_git_directory_is_not_descended_into(tmp_path: Path) -> None:
    content = tmp_path / "content"
    _write(content / ".git" / "notes.md", "internal")
    _write(content / "post.md", "body")

    records = load_all(TransportConfig(content_dir=content))

    assert [record.slug for record in records] == ["post"]


def test_broken_entries_are_skipped(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    content = tmp_path / "content"
    _write(content / "good.md", "body")
    dangling = content / "dangling.md"
    try:
        dangling.symlink_to(content / "does-not-exist.md")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks are not supported here")

    with caplog.at_level(logging.ERROR):
        records = load_all(TransportConfig(content_dir=content))

    assert [record.slug for record in records] == ["good"]
    assert "dangling.md" in caplog.text


@pytest.mark.skipif(
    os.name == "nt" or (hasattr(os, "geteuid") and os.geteuid() == 0),
    reason="permission bits are not enforced",
)
def test_unreadable_directory_does_not_abort_traversal(tmp_path: Path) -> None:
    content = tmp_path / "content"
    _write(content / "open" / "visible.md", "body")
    _write(content / "sealed" / "hidden.md", "body")
    sealed = content / "sealed"
    sealed.chmod(0)
    try:
        records = load_all(TransportConfig(content_dir=content))
    finally:
        sealed.chmod(0o755)

    assert [record.slug for record in records] == ["visible"]


def test_load_file_reads_a_single_document(tmp_path: Path) -> None:
    path = tmp_path / "solo.md"
    _write(path, "---\ntitle: Solo\n---\nBody")

    record = load_file(path)

    assert record.metadata.title == "Solo"
    assert record.slug == "solo"


def test_load_file_propagates_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_file(tmp_path / "nope.md")


def test_load_then_filter_and_sort_scenario(tmp_path: Path) -> None:
    content = tmp_path / "content"
    _write(content / "a-hello.md", '---\ntitle: "Hello"\npublishDate: "2020-01-01"\ndraft: false\n---\nHi')
    _write(content / "b-draft.md", '---\ntitle: "Draft"\npublishDate: "2020-01-01"\ndraft: true\n---\n')
    _write(content / "c-future.md", '---\ntitle: "Future"\npublishDate: "2999-01-01"\ndraft: false\n---\n')
    _write(content / "d-twin.md", '---\ntitle: "Twin"\npublishDate: "2020-01-01"\ndraft: false\n---\n')

    records = load_all(TransportConfig(content_dir=content))
    published = sort_by_date(filter_published(records))

    assert len(records) == 4
    assert [record.metadata.title for record in published] == ["Hello", "Twin"]

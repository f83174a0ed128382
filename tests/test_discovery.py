"""Tests for knowledge_extractor.discovery."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from knowledge_extractor.discovery import FileDiscoverer, discover_files
from tests._fixtures.repo_builder import RepoBuilder


def test_discover_orders_known_files_by_tier(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "README.md": "# Project\n",
            ".eslintrc.json": "{}\n",
            "CONVENTIONS.md": "# Conventions\n",
            "CLAUDE.md": "# Instructions\n",
            ".github/copilot-instructions.md": "Use hooks.\n",
        }
    )

    files = repo_builder.discover()

    assert [(f.relative_path, f.priority_tier, f.source_category) for f in files] == [
        ("CLAUDE.md", 1, "ai-instructions"),
        (".github/copilot-instructions.md", 1, "ai-instructions"),
        ("CONVENTIONS.md", 2, "conventions"),
        ("README.md", 3, "readme"),
        (".eslintrc.json", 4, "linting"),
    ]
    assert all(f.absolute_path.is_file() for f in files)


def test_discover_skips_directories_named_like_known_files(repo_builder: RepoBuilder) -> None:
    (repo_builder.path() / ".cursor" / "rules").mkdir(parents=True)
    repo_builder.write({".cursorrules": "Always write tests.\n"})

    paths = [f.relative_path for f in repo_builder.discover()]

    assert paths == [".cursorrules"]


def test_discover_scans_docs_with_posix_paths(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "docs/guide.md": "# Guide\n",
            "docs/api/endpoints.mdx": "# Endpoints\n",
            "docs/notes.TXT": "notes\n",
            "docs/diagram.png": "binary",
            "docs/.hidden/secret.md": "# Hidden\n",
        }
    )

    files = repo_builder.discover()

    assert [f.relative_path for f in files] == [
        "docs/api/endpoints.mdx",
        "docs/guide.md",
        "docs/notes.TXT",
    ]
    assert {f.source_category for f in files} == {"documentation"}
    assert {f.priority_tier for f in files} == {3}


def test_discover_docs_keep_discovery_order_after_known_tier_three(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "README.md": "# Readme\n",
            "docs/a.md": "# A\n",
            ".prettierrc": "semi: false\n",
        }
    )

    paths = [f.relative_path for f in repo_builder.discover()]

    assert paths == ["README.md", "docs/a.md", ".prettierrc"]


def test_discover_respects_max_depth(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    deep = root / "docs" / "a" / "b" / "c" / "d"
    deep.mkdir(parents=True)
    (root / "docs" / "a" / "b" / "c" / "level3.md").write_text("# L3\n", encoding="utf-8")
    (deep / "level4.md").write_text("# L4\n", encoding="utf-8")

    default_paths = [f.relative_path for f in FileDiscoverer().discover(root)]
    shallow_paths = [f.relative_path for f in FileDiscoverer(max_depth=1).discover(root)]

    assert default_paths == ["docs/a/b/c/level3.md"]
    assert shallow_paths == []


def test_discover_custom_docs_dir(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"handbook/intro.md": "# Intro\n", "docs/other.md": "# Other\n"})

    files = FileDiscoverer(docs_dir="handbook").discover(repo_builder.path())

    assert [f.relative_path for f in files] == ["handbook/intro.md"]


def test_discover_empty_repository_returns_empty_list(repo_builder: RepoBuilder) -> None:
    assert repo_builder.discover() == []


def test_discover_rejects_missing_root(tmp_path: Path) -> None:
    missing = tmp_path / "missing"
    with pytest.raises(FileNotFoundError) as excinfo:
        FileDiscoverer().discover(missing)
    assert str(missing) in str(excinfo.value)


def test_discover_rejects_file_root(tmp_path: Path) -> None:
    target = tmp_path / "file.md"
    target.write_text("x", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        FileDiscoverer().discover(target)


@pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="permission bits not enforced")
def test_discover_unreadable_docs_subdirectory_is_skipped(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"docs/ok.md": "# Ok\n", "docs/locked/hidden.md": "# Hidden\n"})
    locked = repo_builder.path() / "docs" / "locked"
    locked.chmod(0)
    try:
        paths = [f.relative_path for f in repo_builder.discover()]
    finally:
        locked.chmod(0o755)

    assert paths == ["docs/ok.md"]


def test_discover_files_wrapper_honours_docs_dir(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"handbook/intro.md": "intro", "docs/ignored.md": "ignored"})

    found = discover_files(repo_builder.path(), docs_dir="handbook")

    assert [item.relative_path for item in found] == ["handbook/intro.md"]

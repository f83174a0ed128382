"""End-to-end tests for the extraction pipeline."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from knowledge_extractor import extract
from knowledge_extractor.config import ExtractorConfig
from knowledge_extractor.git.clone import RepoAcquirer
from knowledge_extractor.pipeline import Pipeline, read_batch_file
from tests._fixtures.repo_builder import RepoBuilder

CLAUDE_MD = """
    # Agent instructions
    Read this before touching the code.
    Every change must include a test.
    Keep commits small.

    ## Error handling
    Always wrap external calls in try/catch and log the error with context.

    ## Testing
    Tests must live next to the code they cover and use vitest.
"""


def _runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
    if list(args)[:3] == ["git", "remote", "get-url"]:
        return "https://github.com/acme/app.git\n"
    if list(args)[:2] == ["git", "rev-parse"]:
        return "main\n"
    return ""


def _pipeline(config: ExtractorConfig | None = None) -> Pipeline:
    logger = logging.getLogger("tests.pipeline")
    return Pipeline(config, acquirer=RepoAcquirer(runner=_runner, logger=logger), logger=logger)


def test_conventions_rules_section_becomes_high_confidence_rule(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {"CONVENTIONS.md": "## Rules\nAlways use early returns in request handlers to keep nesting shallow.\n"}
    )

    fragments = _pipeline().process(str(repo_builder.path()))

    assert len(fragments) == 1
    fragment = fragments[0]
    assert fragment.category == "conventions"
    assert fragment.type == "rule"
    assert fragment.confidence == "high"
    assert fragment.source.repo == "acme/app"
    assert fragment.source.url == "https://github.com/acme/app/blob/main/CONVENTIONS.md#L1"


def test_lint_config_becomes_single_whole_file_fragment(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {".eslintrc.json": json.dumps({"rules": {"no-console": "error", "eqeqeq": "warn"}}, indent=2)}
    )

    blocks = extract(repo_builder.path())
    fragments = _pipeline().process(str(repo_builder.path()))

    assert len(blocks) == 1
    assert blocks[0].section_title == ".eslintrc.json"
    assert blocks[0].line_start == 1
    assert blocks[0].line_end == len(blocks[0].content.splitlines())
    assert len(fragments) == 1
    assert fragments[0].title == ".eslintrc.json"
    assert fragments[0].confidence == "low"


def test_thin_preamble_is_dropped_even_with_normative_words(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "README.md": """
                Contributors must read the whole guide before they open a pull request.
                Builds must pass.

                ## Setup
                You should run the bootstrap script before anything else in this repo.
            """
        }
    )

    fragments = _pipeline().process(str(repo_builder.path()))

    assert [fragment.title for fragment in fragments] == ["Setup"]
    assert fragments[0].confidence == "medium"


def test_license_section_is_dropped(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "CONTRIBUTING.md": """
                ## License
                Copyright 2024 Example Corp. MIT License. You must keep this notice in every copy.

                ## Reviews
                Every pull request must be reviewed by a maintainer before it is merged.
            """
        }
    )

    fragments = _pipeline().process(str(repo_builder.path()))

    assert [fragment.title for fragment in fragments] == ["Reviews"]


def test_sections_of_one_file_get_distinct_ids(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"CLAUDE.md": CLAUDE_MD})

    fragments = _pipeline().process(str(repo_builder.path()))

    assert [fragment.title for fragment in fragments] == ["Agent instructions", "Error handling", "Testing"]
    assert [fragment.source.line for fragment in fragments] == [1, 6, 9]
    ids = [fragment.id for fragment in fragments]
    assert len(set(ids)) == 3
    assert all(len(fragment_id) == 12 for fragment_id in ids)
    assert fragments[1].category == "error-handling"
    assert fragments[2].category == "testing"


def test_repeated_runs_are_identical(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "CLAUDE.md": CLAUDE_MD,
            "package.json": json.dumps({"dependencies": {"next": "^14.2.0"}}),
            "docs/guide.md": "## Deploy\nAlways deploy through the pipeline, never from a laptop.\n",
        }
    )

    first = [fragment.to_dict() for fragment in _pipeline().process(str(repo_builder.path()))]
    second = [fragment.to_dict() for fragment in _pipeline().process(str(repo_builder.path()))]

    assert first == second
    assert first[0]["stack"] == ["next.js@14.2.0"]
    assert first[-1]["source"]["file"] == "docs/guide.md"


def test_ids_survive_unrelated_edits(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"CLAUDE.md": CLAUDE_MD})
    before = {fragment.title: fragment.id for fragment in _pipeline().process(str(repo_builder.path()))}

    edited = CLAUDE_MD.replace("and use vitest.", "and use vitest with coverage enabled.")
    repo_builder.write({"CLAUDE.md": edited})
    after = {fragment.title: fragment.id for fragment in _pipeline().process(str(repo_builder.path()))}

    assert after == before


def test_empty_repository_yields_no_fragments(
    repo_builder: RepoBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="tests.pipeline"):
        fragments = _pipeline().process(str(repo_builder.path()))

    assert fragments == []
    assert any("No knowledge-bearing files" in record.getMessage() for record in caplog.records)


def test_batch_isolates_failing_repositories(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    for root, title in ((first, "Naming"), (second, "Imports")):
        root.mkdir()
        (root / "AGENTS.md").write_text(
            f"## {title}\nAlways prefer named exports over default exports in shared modules.\n",
            encoding="utf-8",
        )

    with caplog.at_level(logging.ERROR, logger="tests.pipeline"):
        fragments = _pipeline().run_batch([str(first), "not a repository!", str(second)])

    assert [fragment.title for fragment in fragments] == ["Naming", "Imports"]
    assert any("Failed to process not a repository!" in record.getMessage() for record in caplog.records)


def test_docs_depth_comes_from_config(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "docs/top.md": "## Top\nAlways document public functions with examples.\n",
            "docs/a/b/deep.md": "## Deep\nAlways document private helpers with examples.\n",
        }
    )

    fragments = _pipeline(ExtractorConfig(max_docs_depth=1)).process(str(repo_builder.path()))

    assert [fragment.source.file for fragment in fragments] == ["docs/top.md"]


def test_read_batch_file_skips_blanks_and_comments(tmp_path: Path) -> None:
    batch = tmp_path / "repos.txt"
    batch.write_text("# team repos\nacme/app\n\n  https://github.com/acme/api  \n", encoding="utf-8")

    assert read_batch_file(batch) == ["acme/app", "https://github.com/acme/api"]

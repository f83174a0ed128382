"""Tests for the knowledge signal filter."""

from __future__ import annotations

import pytest

from knowledge_extractor.extraction.signals import SignalFilter

LONG_RULE = "## Error handling\nAlways wrap database calls and log the failure context."


@pytest.fixture
def signal_filter() -> SignalFilter:
    return SignalFilter()


def test_accepts_normative_section(signal_filter: SignalFilter) -> None:
    assert signal_filter.accepts(LONG_RULE, "Error handling")


def test_rejects_content_under_threshold_even_with_signals(signal_filter: SignalFilter) -> None:
    content = "## Rules\nAlways **never** ```x```"
    assert len(content) < 50
    assert signal_filter.rejection_reason(content, "Rules") == "too-short"


def test_structured_blocks_use_looser_threshold(signal_filter: SignalFilter) -> None:
    content = '{"rules":{"no-console":"error"}}'
    assert 30 <= len(content) < 50
    assert signal_filter.accepts(content, ".eslintrc.json", structured=True)
    assert not signal_filter.accepts(content, ".eslintrc.json")
    assert signal_filter.rejection_reason('{"semi": false}', ".prettierrc", structured=True) == "too-short"


def test_structured_blocks_do_not_need_positive_signals(signal_filter: SignalFilter) -> None:
    content = '{\n  "compilerOptions": {\n    "target": "es2022"\n  }\n}'
    assert signal_filter.accepts(content, "tsconfig.json", structured=True)


def test_whitespace_around_content_does_not_change_outcome(signal_filter: SignalFilter) -> None:
    padded = "\n\n   " + LONG_RULE + "   \n\n"
    assert signal_filter.accepts(padded, "Error handling")

    short = "Always use early returns."
    assert not signal_filter.accepts("\n" * 40 + short + " " * 40, "Tips")


def test_thin_preamble_is_dropped_even_with_must(signal_filter: SignalFilter) -> None:
    content = "This project must be built with care and attention.\nIt must also be tested."
    assert len(content) >= 50
    assert signal_filter.rejection_reason(content, "preamble") == "thin-preamble"


def test_preamble_with_three_lines_is_kept(signal_filter: SignalFilter) -> None:
    content = "Welcome to the service.\n\n- Always run migrations first\n- Never commit secrets"
    assert signal_filter.accepts(content, "preamble")


@pytest.mark.parametrize(
    "content",
    [
        "Copyright 2024 Example Corp. MIT License. Always keep this notice in copies.",
        "## License\nThis project is released under the MIT License and you should read it.",
        "## License\nLicensed under the Apache License, Version 2.0. You must comply with it.",
    ],
)
def test_legal_boilerplate_is_dropped(signal_filter: SignalFilter, content: str) -> None:
    assert signal_filter.rejection_reason(content, "License") == "legal"


def test_copyright_prefix_is_dropped(signal_filter: SignalFilter) -> None:
    content = "Copyright (c) Example Corp. All rights reserved. Always attribute."
    assert signal_filter.rejection_reason(content, "Notice") == "legal"


@pytest.mark.parametrize(
    "title",
    [
        "Session 12 - refactor",
        "Seneste session",
        "Tidligere sessioner",
        "Changelog",
        "CHANGE LOG",
        "Version history",
        "v1.2",
        "[2.3.1] - 2024-05-01",
        "1.4.0",
    ],
)
def test_change_log_sections_are_dropped(signal_filter: SignalFilter, title: str) -> None:
    content = f"## {title}\n- Always use the new API\n- Removed the legacy endpoints entirely"
    assert signal_filter.rejection_reason(content, title) == "changelog"


@pytest.mark.parametrize("title", ["2.1 Setup", "Versioning rules", "Sessions and cookies"])
def test_non_changelog_titles_are_not_mistaken_for_noise(signal_filter: SignalFilter, title: str) -> None:
    content = f"## {title}\nYou should always pin dependencies to an exact version number."
    reason = signal_filter.rejection_reason(content, title)
    if title.lower().startswith("session"):
        assert reason == "changelog"
    else:
        assert reason is None


@pytest.mark.parametrize(
    "content, expected",
    [
        ("## Data\nVi skal altid validere input fra brugeren før det gemmes.", "normative"),
        ("## Data\nUndgå at gemme tokens i localStorage i produktionskoden her.", "normative"),
        ("## Notes\nOur naming convention keeps module names short and clear.", "vocabulary"),
        ("## Notes\nVores konvention for filnavne er kebab-case i hele projektet.", "vocabulary"),
        ("## Setup\nRun the installer:\n```bash\nmake install\n```\nThen start it.", "code-fence"),
        ("## Setup\nThe **dev server** runs on port 3000 in local environments.", "bold"),
        ("## Setup\nBefore release:\n- [ ] bump version\n- [x] update docs here", "checklist"),
        ("## Setup\nTools used in this project:\n* node\n* docker\n* terraform", "bullet"),
        ("## Setup\n⚠️ The staging database is reset every night at midnight.", "emoji"),
    ],
)
def test_positive_signals_in_english_and_danish(
    signal_filter: SignalFilter, content: str, expected: str
) -> None:
    assert signal_filter.matched_signal(content) == expected
    assert signal_filter.accepts(content, content.splitlines()[0][3:])


def test_content_without_signals_is_dropped(signal_filter: SignalFilter) -> None:
    content = "## Overview\nThis repository contains the marketing site for the spring launch."
    assert signal_filter.rejection_reason(content, "Overview") == "no-signal"

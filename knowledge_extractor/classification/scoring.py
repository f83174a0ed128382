"""Keyword scoring shared by category and type detection."""

from __future__ import annotations

from typing import Dict, Optional

from .tables import LabelTable


def score_labels(content: str, table: LabelTable) -> Dict[str, int]:
    """Count non-overlapping pattern matches per label, in table order."""
    return {
        label: sum(len(pattern.findall(content)) for pattern in patterns)
        for label, patterns in table
    }


def best_label(content: str, table: LabelTable, default: str) -> str:
    """Return the highest scoring label, or ``default`` when nothing matches.

    Only a strictly higher score replaces the current best, so ties go to
    the label listed first in ``table``.
    """
    best: Optional[str] = None
    best_score = 0
    for label, score in score_labels(content, table).items():
        if score > best_score:
            best, best_score = label, score
    return best if best is not None else default


def first_match(text: str, table: LabelTable) -> Optional[str]:
    """Return the first label with any pattern matching ``text``."""
    for label, patterns in table:
        if any(pattern.search(text) for pattern in patterns):
            return label
    return None


__all__ = ["best_label", "first_match", "score_labels"]

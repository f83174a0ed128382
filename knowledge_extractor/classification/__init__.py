"""Rule-based classification of knowledge blocks."""

from __future__ import annotations

from .classifier import (
    FragmentClassifier,
    classify_fragments,
    confidence_for,
    detect_category,
    detect_type,
    extract_code_example,
    extract_tags,
    fragment_id,
    generate_title,
    source_url,
)
from .scoring import best_label, first_match, score_labels

__all__ = [
    "FragmentClassifier",
    "best_label",
    "classify_fragments",
    "confidence_for",
    "detect_category",
    "detect_type",
    "extract_code_example",
    "extract_tags",
    "first_match",
    "fragment_id",
    "generate_title",
    "score_labels",
    "source_url",
]

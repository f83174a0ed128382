"""Classification of raw blocks into knowledge fragments."""

from __future__ import annotations

import hashlib
import logging
import re
from typing import Iterable, List, Optional, Sequence

from ..logging import get_logger
from ..models import PREAMBLE, FragmentSource, KnowledgeFragment, RawBlock, RepoIdentity, StackItem
from .scoring import best_label, first_match
from .tables import (
    CATEGORY_KEYWORDS,
    DEFAULT_CATEGORY,
    DEFAULT_TYPE,
    HIGH_CONFIDENCE_CATEGORIES,
    TECH_TERM_PATTERNS,
    TITLE_OVERRIDES,
    TYPE_SIGNALS,
)

DESCRIPTION_LENGTH = 500
TITLE_LENGTH = 100
ID_LENGTH = 12

_HEADING_MARKERS = re.compile(r"^#+\s*")
_LEADING_PUNCTUATION = re.compile(r"^[#*\-+>\s]+")
_CODE_BLOCK = re.compile(r"```[^\n`]*\n(.*?)```", re.DOTALL)


def detect_category(content: str, section_title: str = "") -> str:
    """Pick a category from the section title, falling back to keyword scoring."""
    if section_title and section_title != PREAMBLE:
        override = first_match(section_title, TITLE_OVERRIDES)
        if override is not None:
            return override
    return best_label(content.lower(), CATEGORY_KEYWORDS, DEFAULT_CATEGORY)


def detect_type(content: str) -> str:
    return best_label(content.lower(), TYPE_SIGNALS, DEFAULT_TYPE)


def confidence_for(block: RawBlock) -> str:
    """Confidence depends on where the block came from, never on its text."""
    if block.source_category in HIGH_CONFIDENCE_CATEGORIES:
        return "high"
    if block.priority_tier <= 3:
        return "medium"
    return "low"


def extract_tags(content: str, stack: Sequence[StackItem]) -> List[str]:
    """Stack names first, then detected technology terms, without duplicates."""
    tags: List[str] = []
    for item in stack:
        if item.name not in tags:
            tags.append(item.name)
    for term, pattern in TECH_TERM_PATTERNS:
        if term not in tags and pattern.search(content):
            tags.append(term)
    return tags


def generate_title(block: RawBlock) -> str:
    if block.section_title and block.section_title != PREAMBLE:
        title = _HEADING_MARKERS.sub("", block.section_title).strip()
        if title:
            return title[:TITLE_LENGTH]

    for line in block.content.splitlines():
        candidate = _LEADING_PUNCTUATION.sub("", line).strip()
        if candidate:
            return candidate[:TITLE_LENGTH]

    return f"{block.source_file} — {block.source_category}"


def extract_code_example(content: str) -> Optional[str]:
    """Body of the first fenced code block, or ``None``."""
    match = _CODE_BLOCK.search(content)
    if match is None:
        return None
    return match.group(1).strip()


def fragment_id(identity: RepoIdentity, source_file: str, line_start: int) -> str:
    """Location fingerprint: same repo, file and starting line give the same id."""
    seed = f"{identity.url or identity.slug}:{source_file}:{line_start}"
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()[:ID_LENGTH]


def source_url(identity: RepoIdentity, source_file: str, line: int) -> str:
    if not identity.url:
        return ""
    return f"{identity.url.rstrip('/')}/blob/{identity.ref}/{source_file}#L{line}"


class FragmentClassifier:
    """Turns filtered raw blocks into knowledge fragments."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("classification")

    def classify(
        self,
        blocks: Iterable[RawBlock],
        stack: Sequence[StackItem],
        identity: RepoIdentity,
    ) -> List[KnowledgeFragment]:
        stack_labels = [item.display for item in stack]
        fragments = [self.classify_block(block, stack, identity, stack_labels) for block in blocks]
        self.logger.debug("Classified %d fragments for %s", len(fragments), identity.slug)
        return fragments

    def classify_block(
        self,
        block: RawBlock,
        stack: Sequence[StackItem],
        identity: RepoIdentity,
        stack_labels: Optional[List[str]] = None,
    ) -> KnowledgeFragment:
        if stack_labels is None:
            stack_labels = [item.display for item in stack]
        return KnowledgeFragment(
            id=fragment_id(identity, block.source_file, block.line_start),
            stack=list(stack_labels),
            category=detect_category(block.content, block.section_title),
            type=detect_type(block.content),
            title=generate_title(block),
            description=block.content[:DESCRIPTION_LENGTH],
            example=extract_code_example(block.content),
            source=FragmentSource(
                repo=identity.slug,
                file=block.source_file,
                line=block.line_start,
                url=source_url(identity, block.source_file, block.line_start),
            ),
            confidence=confidence_for(block),
            tags=extract_tags(block.content, stack),
        )


def classify_fragments(
    blocks: Iterable[RawBlock],
    stack: Sequence[StackItem],
    identity: RepoIdentity,
) -> List[KnowledgeFragment]:
    return FragmentClassifier().classify(blocks, stack, identity)


__all__ = [
    "FragmentClassifier",
    "classify_fragments",
    "confidence_for",
    "detect_category",
    "detect_type",
    "extract_code_example",
    "extract_tags",
    "fragment_id",
    "generate_title",
    "source_url",
]

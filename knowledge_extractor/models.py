"""Core data models shared across knowledge extraction components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

PREAMBLE = "preamble"


@dataclass(frozen=True)
class DiscoveredFile:
    """A knowledge-bearing file located in the repository."""

    absolute_path: Path
    relative_path: str
    priority_tier: int
    source_category: str


@dataclass(frozen=True)
class RawBlock:
    """Contiguous text span extracted from a discovered file.

    ``line_start`` and ``line_end`` are 1-based and inclusive.
    """

    content: str
    source_file: str
    source_category: str
    priority_tier: int
    section_title: str
    line_start: int
    line_end: int


@dataclass(frozen=True)
class StackItem:
    """Technology detected in the repository, passed through to fragments."""

    name: str
    version: Optional[str] = None
    category: str = ""

    @property
    def display(self) -> str:
        return f"{self.name}@{self.version}" if self.version else self.name


@dataclass(frozen=True)
class RepoIdentity:
    """Who owns the repository and where it can be linked to."""

    owner: str
    name: str
    url: str = ""
    ref: str = "main"

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class FragmentSource:
    """Provenance of a knowledge fragment."""

    repo: str
    file: str
    line: int
    url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"repo": self.repo, "file": self.file, "line": self.line, "url": self.url}


@dataclass(frozen=True)
class KnowledgeFragment:
    """Classified snippet of embedded best-practice text."""

    id: str
    stack: List[str]
    category: str
    type: str
    title: str
    description: str
    example: Optional[str]
    source: FragmentSource
    confidence: str
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Return the serialisable record consumed by downstream tooling."""
        return {
            "id": self.id,
            "stack": list(self.stack),
            "category": self.category,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "example": self.example,
            "source": self.source.to_dict(),
            "confidence": self.confidence,
            "tags": list(self.tags),
        }

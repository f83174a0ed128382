"""Extract classified best-practice fragments from repository documentation."""

from __future__ import annotations

__version__ = "0.1.0"

from .models import (  # noqa: E402
    DiscoveredFile,
    FragmentSource,
    KnowledgeFragment,
    RawBlock,
    RepoIdentity,
    StackItem,
)
from .pipeline import Pipeline, classify, extract  # noqa: E402

__all__ = [
    "DiscoveredFile",
    "FragmentSource",
    "KnowledgeFragment",
    "Pipeline",
    "RawBlock",
    "RepoIdentity",
    "StackItem",
    "__version__",
    "classify",
    "extract",
]

"""Discovery of knowledge-bearing files inside a repository checkout."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Sequence, Tuple

from .logging import get_logger
from .models import DiscoveredFile

# (relative path, priority tier, source category); lower tiers carry more signal.
KNOWLEDGE_FILES: Tuple[Tuple[str, int, str], ...] = (
    ("CLAUDE.md", 1, "ai-instructions"),
    (".cursorrules", 1, "ai-instructions"),
    (".cursor/rules", 1, "ai-instructions"),
    (".clinerules", 1, "ai-instructions"),
    ("AGENTS.md", 1, "ai-instructions"),
    ("copilot-instructions.md", 1, "ai-instructions"),
    (".github/copilot-instructions.md", 1, "ai-instructions"),
    ("CONVENTIONS.md", 2, "conventions"),
    ("CODING_STANDARDS.md", 2, "conventions"),
    ("STYLE_GUIDE.md", 2, "conventions"),
    ("ARCHITECTURE.md", 2, "architecture"),
    ("DESIGN.md", 2, "architecture"),
    ("CONTRIBUTING.md", 3, "contributing"),
    ("README.md", 3, "readme"),
    ("SECURITY.md", 3, "security"),
    (".eslintrc.json", 4, "linting"),
    (".eslintrc.js", 4, "linting"),
    (".eslintrc.cjs", 4, "linting"),
    ("eslint.config.js", 4, "linting"),
    ("eslint.config.mjs", 4, "linting"),
    ("tsconfig.json", 4, "typescript"),
    (".prettierrc", 4, "formatting"),
    (".prettierrc.json", 4, "formatting"),
    ("biome.json", 4, "linting"),
)

DOCUMENTATION_CATEGORY = "documentation"
DOCUMENTATION_TIER = 3
DOCUMENTATION_SUFFIXES = (".md", ".mdx", ".txt")
DEFAULT_DOCS_DIR = "docs"
DEFAULT_MAX_DEPTH = 3


class FileDiscoverer:
    """Locates well-known knowledge files plus prose under the docs directory."""

    def __init__(
        self,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        docs_dir: str = DEFAULT_DOCS_DIR,
        known_files: Sequence[Tuple[str, int, str]] = KNOWLEDGE_FILES,
        logger: logging.Logger | None = None,
    ) -> None:
        self.max_depth = max_depth
        self.docs_dir = docs_dir
        self.known_files = tuple(known_files)
        self.logger = logger or get_logger("discovery")

    def discover(self, root: str | Path) -> List[DiscoveredFile]:
        """Return candidate files ordered by ascending priority tier."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {root}")

        found: List[DiscoveredFile] = []
        for relative, tier, category in self.known_files:
            candidate = root_path.joinpath(*relative.split("/"))
            if candidate.is_file():
                found.append(
                    DiscoveredFile(
                        absolute_path=candidate,
                        relative_path=relative,
                        priority_tier=tier,
                        source_category=category,
                    )
                )

        docs_root = root_path / self.docs_dir
        if docs_root.is_dir():
            found.extend(self._scan_docs(docs_root, root_path, depth=0))

        # list.sort is stable, so equal tiers keep discovery order.
        found.sort(key=lambda item: item.priority_tier)
        self.logger.debug("Discovered %d knowledge files under %s", len(found), root_path)
        return found

    def _scan_docs(self, directory: Path, root: Path, *, depth: int) -> List[DiscoveredFile]:
        if depth > self.max_depth:
            return []

        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as exc:
            self.logger.warning("Could not scan %s: %s", directory, exc)
            return []

        results: List[DiscoveredFile] = []
        for entry in entries:
            path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                if entry.name.startswith("."):
                    continue
                results.extend(self._scan_docs(path, root, depth=depth + 1))
            elif entry.is_file() and entry.name.lower().endswith(DOCUMENTATION_SUFFIXES):
                results.append(
                    DiscoveredFile(
                        absolute_path=path,
                        relative_path=path.relative_to(root).as_posix(),
                        priority_tier=DOCUMENTATION_TIER,
                        source_category=DOCUMENTATION_CATEGORY,
                    )
                )
        return results


def discover_files(
    root: str | Path,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    docs_dir: str = DEFAULT_DOCS_DIR,
) -> List[DiscoveredFile]:
    """Convenience wrapper around :class:`FileDiscoverer`."""
    return FileDiscoverer(max_depth=max_depth, docs_dir=docs_dir).discover(root)


__all__ = ["FileDiscoverer", "KNOWLEDGE_FILES", "discover_files"]

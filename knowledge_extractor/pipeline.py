"""Per-repository and batch extraction pipelines."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Sequence

from .classification import FragmentClassifier
from .config import ExtractorConfig
from .discovery import FileDiscoverer
from .extraction import BlockExtractor
from .git.clone import RepoAcquirer
from .logging import get_logger
from .models import KnowledgeFragment, RawBlock, RepoIdentity, StackItem
from .stack import StackDetector


class Pipeline:
    """Runs acquire, stack detection, discovery, extraction and classification."""

    def __init__(
        self,
        config: ExtractorConfig | None = None,
        *,
        acquirer: RepoAcquirer | None = None,
        stack_detector: StackDetector | None = None,
        discoverer: FileDiscoverer | None = None,
        extractor: BlockExtractor | None = None,
        classifier: FragmentClassifier | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or ExtractorConfig()
        self.logger = logger or get_logger("pipeline")

        def component_logger(name: str) -> logging.Logger:
            # An injected logger becomes the parent of every stage logger.
            return logger.getChild(name) if logger is not None else get_logger(name)

        self.acquirer = acquirer or RepoAcquirer(
            clone_dir=self.config.clone_dir, logger=component_logger("git")
        )
        self.stack_detector = stack_detector or StackDetector(logger=component_logger("stack"))
        self.discoverer = discoverer or FileDiscoverer(
            max_depth=self.config.max_docs_depth,
            docs_dir=self.config.docs_dir,
            logger=component_logger("discovery"),
        )
        self.extractor = extractor or BlockExtractor(
            workers=self.config.workers, logger=component_logger("extraction")
        )
        self.classifier = classifier or FragmentClassifier(logger=component_logger("classification"))

    def extract(self, root: str | Path) -> List[RawBlock]:
        """Discover knowledge files under ``root`` and return their filtered blocks."""
        files = self.discoverer.discover(root)
        self.logger.info("Found %d knowledge sources", len(files))
        if not files:
            self.logger.warning("No knowledge-bearing files found in %s", root)
            return []
        blocks = self.extractor.extract(files, root)
        self.logger.info("Extracted %d raw knowledge blocks", len(blocks))
        return blocks

    def classify(
        self,
        blocks: Sequence[RawBlock],
        stack: Sequence[StackItem],
        identity: RepoIdentity,
    ) -> List[KnowledgeFragment]:
        fragments = self.classifier.classify(blocks, stack, identity)
        self.logger.info("Produced %d knowledge fragments", len(fragments))
        return fragments

    def process(self, identifier: str) -> List[KnowledgeFragment]:
        """Run the full pipeline for one repository; failures yield no fragments."""
        self.logger.info("Processing %s", identifier)
        try:
            repo = self.acquirer.acquire(identifier)
            stack = self.stack_detector.detect(repo.root)
            self.logger.info(
                "Stack detected: %s", ", ".join(item.name for item in stack) or "unknown"
            )
            blocks = self.extract(repo.root)
            return self.classify(blocks, stack, repo.identity)
        except Exception as exc:
            self.logger.error("Failed to process %s: %s", identifier, exc)
            self.logger.debug("Failure details for %s", identifier, exc_info=True)
            return []

    def run_batch(self, identifiers: Iterable[str]) -> List[KnowledgeFragment]:
        """Process repositories in order and concatenate their fragments."""
        fragments: List[KnowledgeFragment] = []
        for identifier in identifiers:
            produced = self.process(identifier)
            self.logger.info("%d fragments extracted from %s", len(produced), identifier)
            fragments.extend(produced)
        return fragments


def read_batch_file(path: str | Path) -> List[str]:
    """One identifier per line; blank lines and ``#`` comments are skipped."""
    identifiers: List[str] = []
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            identifiers.append(stripped)
    return identifiers


def extract(
    root: str | Path,
    *,
    config: ExtractorConfig | None = None,
    logger: logging.Logger | None = None,
) -> List[RawBlock]:
    """Return the filtered raw blocks for a materialised repository."""
    return Pipeline(config, logger=logger).extract(root)


def classify(
    blocks: Sequence[RawBlock],
    stack: Sequence[StackItem],
    identity: RepoIdentity,
) -> List[KnowledgeFragment]:
    return FragmentClassifier().classify(blocks, stack, identity)


__all__ = ["Pipeline", "classify", "extract", "read_batch_file"]

"""Splitting discovered files into knowledge blocks."""

from __future__ import annotations

import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import yaml

from ..logging import get_logger
from ..models import PREAMBLE, DiscoveredFile, RawBlock
from .signals import SignalFilter

STRUCTURED_CATEGORIES = frozenset({"linting", "typescript", "formatting"})

_HEADING = re.compile(r"^#{1,3}[ \t]+(\S.*?)\s*$")
_CLOSING_HASHES = re.compile(r"\s+#+$")
_FENCE = re.compile(r"^\s*(```|~~~)")
# Strings are matched first so that "//" inside a URL value survives.
_JSON_COMMENT = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


class MalformedConfigError(ValueError):
    """Raised when a structured config file cannot be parsed."""


@dataclass
class _Section:
    title: str
    start: int
    lines: List[str]


class BlockExtractor:
    """Reads discovered files and yields filtered, located text blocks."""

    def __init__(
        self,
        signal_filter: SignalFilter | None = None,
        *,
        workers: int = 1,
        logger: logging.Logger | None = None,
    ) -> None:
        self.signal_filter = signal_filter or SignalFilter()
        self.workers = max(1, workers)
        self.logger = logger or get_logger("extraction")

    def extract(self, files: Sequence[DiscoveredFile], root: str | Path | None = None) -> List[RawBlock]:
        """Return blocks in discovery order, then in-file order."""
        texts = self._read_all(files, Path(root) if root is not None else None)

        blocks: List[RawBlock] = []
        for file, text in zip(files, texts):
            if text is None:
                continue
            if file.source_category in STRUCTURED_CATEGORIES:
                block = self._structured_block(file, text)
                if block is not None:
                    blocks.append(block)
            else:
                blocks.extend(self._section_blocks(file, text))

        self.logger.debug("Extracted %d blocks from %d files", len(blocks), len(files))
        return blocks

    def _read_all(self, files: Sequence[DiscoveredFile], root: Optional[Path]) -> List[Optional[str]]:
        if self.workers == 1 or len(files) < 2:
            return [self._read(file, root) for file in files]
        # Executor.map yields results in submission order.
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            return list(executor.map(lambda file: self._read(file, root), files))

    def _read(self, file: DiscoveredFile, root: Optional[Path]) -> Optional[str]:
        path = file.absolute_path
        if not path.is_absolute() and root is not None:
            path = root / file.relative_path
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.warning("Could not read %s: %s", file.relative_path, exc)
            return None

    def _structured_block(self, file: DiscoveredFile, text: str) -> Optional[RawBlock]:
        try:
            validate_structured_config(file.relative_path, text)
        except MalformedConfigError as exc:
            self.logger.warning("Skipping malformed config %s: %s", file.relative_path, exc)
            return None

        lines = text.splitlines()
        span = _trim_span(lines)
        if span is None:
            return None
        first, last = span
        content = "\n".join(lines[first : last + 1])
        reason = self.signal_filter.rejection_reason(content, file.relative_path, structured=True)
        if reason is not None:
            self.logger.debug("Dropped %s (%s)", file.relative_path, reason)
            return None
        return RawBlock(
            content=content,
            source_file=file.relative_path,
            source_category=file.source_category,
            priority_tier=file.priority_tier,
            section_title=file.relative_path,
            line_start=first + 1,
            line_end=last + 1,
        )

    def _section_blocks(self, file: DiscoveredFile, text: str) -> Iterator[RawBlock]:
        lines = text.splitlines()
        for section in split_sections(lines):
            span = _trim_span(section.lines)
            if span is None:
                continue
            first, last = span
            content = "\n".join(section.lines[first : last + 1])
            reason = self.signal_filter.rejection_reason(content, section.title)
            if reason is not None:
                self.logger.debug(
                    "Dropped section %r of %s (%s)", section.title, file.relative_path, reason
                )
                continue
            yield RawBlock(
                content=content,
                source_file=file.relative_path,
                source_category=file.source_category,
                priority_tier=file.priority_tier,
                section_title=section.title,
                line_start=section.start + first + 1,
                line_end=section.start + last + 1,
            )


def split_sections(lines: Sequence[str]) -> List[_Section]:
    """Split markdown lines on level 1-3 headings outside fenced code."""
    sections: List[_Section] = [_Section(title=PREAMBLE, start=0, lines=[])]
    fence: Optional[str] = None
    for index, line in enumerate(lines):
        marker = _FENCE.match(line)
        if marker:
            # A fence only closes on the marker that opened it.
            if fence is None:
                fence = marker.group(1)
            elif marker.group(1) == fence:
                fence = None
        elif fence is None:
            match = _HEADING.match(line)
            if match:
                title = _CLOSING_HASHES.sub("", match.group(1)).strip() or match.group(1)
                sections.append(_Section(title=title, start=index, lines=[line]))
                continue
        sections[-1].lines.append(line)
    return sections


def validate_structured_config(relative_path: str, text: str) -> None:
    """Raise :class:`MalformedConfigError` when a JSON/YAML config does not parse.

    JSON configs may carry comments and trailing commas (tsconfig, eslintrc).
    Script-based configs (``.js``, ``.cjs``, ``.mjs``) are not validated.
    """
    name = relative_path.rsplit("/", 1)[-1].lower()
    if not text.strip():
        return
    if name.endswith(".json"):
        try:
            _load_jsonc(text)
        except json.JSONDecodeError as exc:
            raise MalformedConfigError(f"invalid JSON: {exc}") from exc
    elif name.endswith((".yml", ".yaml")):
        _load_yaml(text)
    elif "." not in name.lstrip("."):
        # Extension-less rc files hold either JSON or YAML.
        try:
            _load_jsonc(text)
        except json.JSONDecodeError:
            _load_yaml(text)


def _load_jsonc(text: str) -> object:
    stripped = _JSON_COMMENT.sub(lambda match: match.group(1) or "", text)
    return json.loads(_TRAILING_COMMA.sub(r"\1", stripped))


def _load_yaml(text: str) -> object:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise MalformedConfigError(f"invalid YAML: {exc}") from exc


def _trim_span(lines: Sequence[str]) -> Optional[tuple[int, int]]:
    non_blank = [index for index, line in enumerate(lines) if line.strip()]
    if not non_blank:
        return None
    return non_blank[0], non_blank[-1]


__all__ = [
    "BlockExtractor",
    "MalformedConfigError",
    "STRUCTURED_CATEGORIES",
    "split_sections",
    "validate_structured_config",
]

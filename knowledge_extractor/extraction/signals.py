"""Heuristics deciding whether a text block carries reusable knowledge."""

from __future__ import annotations

import re
from typing import Optional, Pattern, Sequence, Tuple

from ..models import PREAMBLE

MIN_CONTENT_LENGTH = 50
MIN_STRUCTURED_LENGTH = 30
MIN_PREAMBLE_LINES = 3

_LEGAL_MARKERS: Tuple[str, ...] = ("mit license", "apache license")

_NOISE_TITLE = re.compile(
    r"^\s*(?:"
    r"session|seneste session|tidligere session|changelog|change log|version history"
    r"|\[?(?:v\d+(?:\.\d+)*|\d+(?:\.\d+){1,3})\]?(?:\s*[-–(].*)?$"
    r")",
    re.IGNORECASE,
)

POSITIVE_SIGNALS: Tuple[Tuple[str, Pattern[str]], ...] = (
    (
        "normative",
        re.compile(
            r"must|should|always|never|avoid|prefer|require"
            r"|skal|altid|aldrig|undgå|foretrækker|påkrævet|obligatorisk",
            re.IGNORECASE,
        ),
    ),
    (
        "vocabulary",
        re.compile(
            r"pattern|convention|rule|standard|best practice"
            r"|mønster|konvention|regel|regler|bedste praksis",
            re.IGNORECASE,
        ),
    ),
    ("code-fence", re.compile(r"```")),
    ("bold", re.compile(r"\*\*[^*\n]+\*\*")),
    ("checklist", re.compile(r"^\s*[-*] \[[ xX]\]", re.MULTILINE)),
    ("bullet", re.compile(r"^\s*[-*+]\s", re.MULTILINE)),
    ("emoji", re.compile("[⚠✅❌✓✔✗✘\U0001f6ab]")),
)


class SignalFilter:
    """Keeps blocks with knowledge signals and drops boilerplate and noise.

    The cheap rejections run first (length, thin preamble, legal text,
    change-log sections); after that any single positive signal keeps the
    block. Structured config files are accepted on length and boilerplate
    alone, since the whole file is the unit of knowledge.
    """

    def __init__(
        self,
        *,
        min_length: int = MIN_CONTENT_LENGTH,
        min_structured_length: int = MIN_STRUCTURED_LENGTH,
        min_preamble_lines: int = MIN_PREAMBLE_LINES,
        signals: Sequence[Tuple[str, Pattern[str]]] = POSITIVE_SIGNALS,
    ) -> None:
        self.min_length = min_length
        self.min_structured_length = min_structured_length
        self.min_preamble_lines = min_preamble_lines
        self.signals = tuple(signals)

    def accepts(self, content: str, section_title: str, *, structured: bool = False) -> bool:
        return self.rejection_reason(content, section_title, structured=structured) is None

    def rejection_reason(
        self, content: str, section_title: str, *, structured: bool = False
    ) -> Optional[str]:
        """Return why a block is dropped, or ``None`` when it is kept."""
        text = content.strip()
        threshold = self.min_structured_length if structured else self.min_length
        if len(text) < threshold:
            return "too-short"

        if not structured and section_title == PREAMBLE:
            non_blank = sum(1 for line in text.splitlines() if line.strip())
            if non_blank < self.min_preamble_lines:
                return "thin-preamble"

        lower = text.lower()
        if any(marker in lower for marker in _LEGAL_MARKERS) or lower.startswith("copyright"):
            return "legal"

        if not structured and _NOISE_TITLE.match(section_title):
            return "changelog"

        if structured:
            return None
        if self.matched_signal(text) is None:
            return "no-signal"
        return None

    def matched_signal(self, content: str) -> Optional[str]:
        """Name of the first positive signal found in ``content``."""
        for name, pattern in self.signals:
            if pattern.search(content):
                return name
        return None


__all__ = ["POSITIVE_SIGNALS", "SignalFilter"]

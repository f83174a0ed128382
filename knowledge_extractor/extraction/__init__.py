"""Block extraction and knowledge-signal filtering."""

from __future__ import annotations

from .blocks import (
    STRUCTURED_CATEGORIES,
    BlockExtractor,
    MalformedConfigError,
    split_sections,
    validate_structured_config,
)
from .signals import POSITIVE_SIGNALS, SignalFilter

__all__ = [
    "BlockExtractor",
    "MalformedConfigError",
    "POSITIVE_SIGNALS",
    "STRUCTURED_CATEGORIES",
    "SignalFilter",
    "split_sections",
    "validate_structured_config",
]

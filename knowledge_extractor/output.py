"""Serialisation of knowledge fragments to JSON or YAML documents."""

from __future__ import annotations

import json
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence

import yaml

from . import __version__
from .config import OUTPUT_FORMATS
from .models import KnowledgeFragment

_RULE = "═" * 60


def build_document(
    fragments: Sequence[KnowledgeFragment],
    *,
    now: Callable[[], datetime] | None = None,
) -> Dict[str, Any]:
    """Wrap fragments with run metadata."""
    timestamp = (now or (lambda: datetime.now(UTC)))()
    sources: List[str] = []
    for fragment in fragments:
        if fragment.source.repo not in sources:
            sources.append(fragment.source.repo)
    return {
        "metadata": {
            "extractedAt": timestamp.isoformat().replace("+00:00", "Z"),
            "version": __version__,
            "totalFragments": len(fragments),
            "sources": sources,
            "stackDetected": list(fragments[0].stack) if fragments else [],
        },
        "fragments": [fragment.to_dict() for fragment in fragments],
    }


def render_document(document: Dict[str, Any], fmt: str = "json") -> str:
    if fmt == "json":
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(
            document,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=100,
        )
    raise ValueError(f"Unsupported output format: {fmt}")


def format_summary(document: Dict[str, Any]) -> str:
    """Human-readable breakdown of an output document."""
    metadata = document["metadata"]
    fragments = document["fragments"]
    lines = [
        _RULE,
        "  EXTRACTION SUMMARY",
        _RULE,
        f"  Sources:    {', '.join(metadata['sources'])}",
        f"  Stack:      {', '.join(metadata['stackDetected'])}",
        f"  Fragments:  {metadata['totalFragments']}",
        "",
        "  By category:",
    ]
    categories = Counter(fragment["category"] for fragment in fragments)
    # most_common keeps first-seen order for equal counts.
    for category, count in categories.most_common():
        lines.append(f"    {category}: {count}")
    lines.extend(["", "  By confidence:"])
    for level, count in Counter(fragment["confidence"] for fragment in fragments).items():
        lines.append(f"    {level}: {count}")
    lines.append(_RULE)
    return "\n".join(lines)


class FragmentWriter:
    """Writes fragment documents under an output directory."""

    def __init__(self, output_dir: Path | str = "output") -> None:
        self.output_dir = Path(output_dir)

    def default_path(self, fragments: Sequence[KnowledgeFragment], fmt: str) -> Path:
        repo = fragments[0].source.repo.replace("/", "--") if fragments else "unknown"
        return self.output_dir / f"{repo}.{fmt}"

    def write(
        self,
        fragments: Sequence[KnowledgeFragment],
        *,
        path: Path | str | None = None,
        fmt: str = "json",
    ) -> Path:
        """Serialise ``fragments`` and return the written path."""
        if fmt not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {fmt}")
        target = Path(path) if path else self.default_path(fragments, fmt)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(render_document(build_document(fragments), fmt), encoding="utf-8")
        return target


__all__ = ["FragmentWriter", "build_document", "format_summary", "render_document"]

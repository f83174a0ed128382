"""Ordered rule tables for fragment classification.

Every table is a tuple of ``(label, patterns)`` pairs. Iteration order is
the tie-break order: when two labels score the same, the one listed first
wins. Keyword entries are plain substrings unless written as ``\\b``
anchored regular expressions, which is done for short tokens that would
otherwise match inside unrelated words.
"""

from __future__ import annotations

import re
from typing import Iterable, Pattern, Sequence, Tuple

LabelTable = Tuple[Tuple[str, Tuple[Pattern[str], ...]], ...]

DEFAULT_CATEGORY = "conventions"
DEFAULT_TYPE = "convention"


def _compile(entries: Sequence[Tuple[str, Iterable[str]]]) -> LabelTable:
    return tuple(
        (label, tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns))
        for label, patterns in entries
    )


def _words(*words: str) -> Tuple[str, ...]:
    return tuple(re.escape(word) for word in words)


CATEGORY_KEYWORDS: LabelTable = _compile(
    (
        (
            "error-handling",
            _words("error", "catch", "throw", "exception", "failure", "retry", "fallback", "fejlhåndtering")
            + (r"\btry\b",),
        ),
        (
            "auth-pattern",
            _words(
                "auth",
                "login",
                "session",
                "jwt",
                "token",
                "middleware",
                "clerk",
                "biometric",
                "face id",
            ),
        ),
        (
            "testing",
            _words("test", "assert", "expect", "mock", "stub", "fixture", "vitest", "jest", "playwright", "coverage", "e2e")
            + (r"\bspecs?\b",),
        ),
        (
            "file-structure",
            _words("directory", "folder", "structure", "layout", "organize", "colocation", "barrel", "monorepo")
            + (r"\bindex\b",),
        ),
        (
            "naming",
            _words("naming", "convention", "camelcase", "kebab", "pascal", "prefix", "suffix", "nomenclature"),
        ),
        (
            "security",
            _words("security", "xss", "csrf", "injection", "sanitize", "escape", "cors", "owasp", "vulnerability", "row-level")
            + (r"\bcsp\b", r"\brls\b"),
        ),
        (
            "performance",
            _words("performance", "cache", "lazy", "optimize", "bundle", "chunk", "prefetch", "preload")
            + (r"\bmemo",),
        ),
        (
            "conventions",
            _words(
                "convention",
                "standard",
                "rule",
                "guideline",
                "style",
                "format",
                "lint",
                "prettier",
                "regler",
                "vigtigt",
                "workflow",
                "aldrig",
                "altid",
            ),
        ),
        (
            "architecture",
            _words("architecture", "pattern", "design", "layer", "module", "separation", "concern", "dependency", "arkitektur"),
        ),
        (
            "api-design",
            _words("endpoint", "route", "handler", "request", "response", "graphql", "trpc")
            + (r"\bapi\b", r"\brest\b"),
        ),
        (
            "database",
            _words("database", "migration", "schema", "query", "relation", "foreign key", "drizzle", "prisma", "supabase")
            + (r"\bindex\b",),
        ),
        (
            "deployment",
            _words("deploy", "docker", "kubernetes", "vercel", "github actions", "pipeline", "hosting", "pm2")
            + (r"\bci\b", r"\bcd\b", r"\bfly\b"),
        ),
        (
            "imports",
            _words("import", "export", "module", "require", "barrel", "path alias", "absolute import"),
        ),
        (
            "ui-patterns",
            _words("component", "button", "input", "modal", "dialog", "toast", "badge", "ui pattern", "søgefelt")
            + (r"\bforms?\b", r"\bclear\b"),
        ),
        (
            "git-workflow",
            _words("commit", "branch", "merge", "rebase", "workflow")
            + (r"\bgit\b", r"\bpull\b", r"\bpush\b"),
        ),
    )
)

CATEGORIES: Tuple[str, ...] = tuple(label for label, _ in CATEGORY_KEYWORDS)

# Section titles checked before keyword scoring; the first matching label wins.
TITLE_OVERRIDES: LabelTable = _compile(
    (
        (
            "conventions",
            (r"regler", r"rules", r"conventions", r"standards", r"vigtigt", r"important", r"\bhårde?\b", r"\bhard\b"),
        ),
        ("ui-patterns", (r"ui pattern", r"component", r"\bknap", r"button", r"\bsøge", r"search")),
        ("git-workflow", (r"\bgit\b", r"commit", r"workflow")),
        ("deployment", (r"deploy", r"hosting", r"\benv\b", r"environment", r"\bsync\b")),
        ("testing", (r"test", r"e2e", r"\bspecs?\b")),
        ("auth-pattern", (r"auth", r"login", r"\broles?\b", r"rbac", r"\brolle")),
    )
)

TYPE_SIGNALS: LabelTable = _compile(
    (
        (
            "anti-pattern",
            _words(
                "never",
                "don't",
                "don’t",
                "avoid",
                "do not",
                "wrong",
                "anti-pattern",
                "deprecated",
                "instead of",
                "aldrig",
                "undgå",
                "brug ikke",
                "forkert",
                "❌",
            )
            + (r"\bbad\b",),
        ),
        (
            "rule",
            _words(
                "must",
                "always",
                "required",
                "shall",
                "enforce",
                "mandatory",
                "skal",
                "altid",
                "påkrævet",
                "obligatorisk",
                "vigtigt",
                "non-negotiable",
                "hårde regler",
            ),
        ),
        (
            "pattern",
            _words(
                "pattern",
                "approach",
                "technique",
                "strategy",
                "example",
                "how to",
                "implementation",
                "mønster",
                "tilgang",
                "eksempel",
                "sådan",
                "✅",
            ),
        ),
        (
            "convention",
            _words(
                "convention",
                "standard",
                "style",
                "format",
                "naming",
                "prefer",
                "recommendation",
                "konvention",
                "foretrækker",
                "anbefaling",
            ),
        ),
    )
)

FRAGMENT_TYPES: Tuple[str, ...] = tuple(label for label, _ in TYPE_SIGNALS)

# Technology terms added to fragment tags in this order; hyphenated terms
# also match their space-separated spelling.
TECH_TERMS: Tuple[str, ...] = (
    "app-router",
    "pages-router",
    "server-component",
    "client-component",
    "middleware",
    "api-route",
    "server-action",
    "ssr",
    "ssg",
    "isr",
    "monorepo",
    "workspace",
    "turbo",
    "pnpm",
    "migration",
    "schema",
    "seed",
    "dark-mode",
    "responsive",
    "a11y",
    "accessibility",
)

def _term_pattern(term: str) -> Pattern[str]:
    body = r"[-\s]".join(re.escape(part) for part in term.split("-"))
    # Three-letter acronyms (ssr, isr) must stand alone.
    suffix = r"\b" if len(term) <= 3 else ""
    return re.compile(r"\b" + body + suffix, re.IGNORECASE)


TECH_TERM_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = tuple(
    (term, _term_pattern(term)) for term in TECH_TERMS
)

CONFIDENCE_LEVELS: Tuple[str, ...] = ("high", "medium", "low")
HIGH_CONFIDENCE_CATEGORIES = frozenset({"ai-instructions", "conventions", "architecture"})


__all__ = [
    "CATEGORIES",
    "CATEGORY_KEYWORDS",
    "CONFIDENCE_LEVELS",
    "DEFAULT_CATEGORY",
    "DEFAULT_TYPE",
    "FRAGMENT_TYPES",
    "HIGH_CONFIDENCE_CATEGORIES",
    "LabelTable",
    "TECH_TERMS",
    "TECH_TERM_PATTERNS",
    "TITLE_OVERRIDES",
    "TYPE_SIGNALS",
]

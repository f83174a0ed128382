"""Tech stack detection from package manifests."""

from __future__ import annotations

import json
import logging
import re
import tomllib
from pathlib import Path
from typing import Dict, List, Mapping, Tuple

from .logging import get_logger
from .models import StackItem

# dependency name -> (stack name, stack category)
STACK_RULES: Dict[str, Tuple[str, str]] = {
    "next": ("next.js", "framework"),
    "nuxt": ("nuxt", "framework"),
    "react": ("react", "framework"),
    "vue": ("vue", "framework"),
    "svelte": ("svelte", "framework"),
    "astro": ("astro", "framework"),
    "remix": ("remix", "framework"),
    "express": ("express", "framework"),
    "fastify": ("fastify", "framework"),
    "hono": ("hono", "framework"),
    "tailwindcss": ("tailwind", "ui"),
    "@tailwindcss/postcss": ("tailwind", "ui"),
    "shadcn-ui": ("shadcn/ui", "ui"),
    "drizzle-orm": ("drizzle", "orm"),
    "prisma": ("prisma", "orm"),
    "@prisma/client": ("prisma", "orm"),
    "mongoose": ("mongoose", "orm"),
    "typeorm": ("typeorm", "orm"),
    "@supabase/supabase-js": ("supabase", "auth"),
    "@supabase/ssr": ("supabase-ssr", "auth"),
    "next-auth": ("next-auth", "auth"),
    "@clerk/nextjs": ("clerk", "auth"),
    "@auth/core": ("auth.js", "auth"),
    "vitest": ("vitest", "testing"),
    "jest": ("jest", "testing"),
    "@playwright/test": ("playwright", "testing"),
    "cypress": ("cypress", "testing"),
    "turbo": ("turbo", "build"),
    "turborepo": ("turbo", "build"),
    "vite": ("vite", "build"),
    "webpack": ("webpack", "build"),
    "esbuild": ("esbuild", "build"),
    "zod": ("zod", "validation"),
    "stripe": ("stripe", "payments"),
}

PYTHON_FRAMEWORKS: Tuple[str, ...] = ("fastapi", "django", "flask")

_VERSION_PREFIX = re.compile(r"^[^~\d]*")
_REQUIREMENT_NAME = re.compile(r"[<>=!~;\[\s]")


class StackDetector:
    """Builds the stack list passed through into every fragment."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("stack")

    def detect(self, root: str | Path) -> List[StackItem]:
        root_path = Path(root)
        stack: Dict[str, StackItem] = {}

        package = self._load_json(root_path / "package.json")
        if package:
            self._detect_node(root_path, package, stack)

        if (root_path / "components.json").is_file() and "shadcn/ui" not in stack:
            stack["shadcn/ui"] = StackItem(name="shadcn/ui", category="ui")

        python_deps = self._python_dependencies(root_path)
        if python_deps is not None:
            stack["python"] = StackItem(name="python", category="framework")
            for framework in PYTHON_FRAMEWORKS:
                if framework in python_deps:
                    stack[framework] = StackItem(name=framework, category="framework")

        self.logger.debug("Detected stack: %s", ", ".join(stack) or "unknown")
        return list(stack.values())

    def _detect_node(self, root: Path, package: Mapping[str, object], stack: Dict[str, StackItem]) -> None:
        for key in ("dependencies", "devDependencies"):
            deps = package.get(key)
            if not isinstance(deps, dict):
                continue
            for dep, version in deps.items():
                rule = STACK_RULES.get(dep)
                if rule is None or rule[0] in stack:
                    continue
                name, category = rule
                stack[name] = StackItem(
                    name=name,
                    version=(clean_version(version) or None) if isinstance(version, str) else None,
                    category=category,
                )

        if package.get("workspaces") or (root / "pnpm-workspace.yaml").is_file():
            stack["monorepo"] = StackItem(name="monorepo", category="build")

        manager = package.get("packageManager")
        if isinstance(manager, str) and manager:
            pm_name, _, pm_version = manager.partition("@")
            stack[pm_name] = StackItem(name=pm_name, version=pm_version or None, category="build")

    def _load_json(self, path: Path) -> Dict[str, object]:
        if not path.is_file():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self.logger.warning("Could not parse %s: %s", path.name, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _python_dependencies(self, root: Path) -> set[str] | None:
        """Lower-cased dependency names, or ``None`` when no Python manifest exists."""
        pyproject = root / "pyproject.toml"
        requirements = root / "requirements.txt"
        if not pyproject.is_file() and not requirements.is_file():
            return None

        names: set[str] = set()
        if pyproject.is_file():
            names.update(self._pyproject_dependencies(pyproject))
        if requirements.is_file():
            try:
                lines = requirements.read_text(encoding="utf-8").splitlines()
            except OSError as exc:
                self.logger.warning("Could not read %s: %s", requirements.name, exc)
                lines = []
            for line in lines:
                stripped = line.strip()
                if not stripped or stripped.startswith(("#", "-")):
                    continue
                names.add(_REQUIREMENT_NAME.split(stripped, 1)[0].lower())
        return names

    def _pyproject_dependencies(self, path: Path) -> set[str]:
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            self.logger.warning("Could not parse %s: %s", path.name, exc)
            return set()

        dependencies: List[object] = []
        project = data.get("project")
        if isinstance(project, dict):
            dependencies.extend(project.get("dependencies", []) or [])
            optional = project.get("optional-dependencies", {}) or {}
            if isinstance(optional, dict):
                for values in optional.values():
                    dependencies.extend(values or [])

        tool = data.get("tool")
        poetry = tool.get("poetry", {}) if isinstance(tool, dict) else {}
        if isinstance(poetry, dict):
            dependencies.extend((poetry.get("dependencies", {}) or {}).keys())

        names: set[str] = set()
        for dep in dependencies:
            if isinstance(dep, str):
                name = _REQUIREMENT_NAME.split(dep.strip(), 1)[0].lower()
                if name and name != "python":
                    names.add(name)
        return names


def clean_version(version: str) -> str:
    """Strip range operators such as ``^`` or ``>=`` from a version spec."""
    return _VERSION_PREFIX.sub("", version)


def detect_stack(root: str | Path) -> List[StackItem]:
    return StackDetector().detect(root)


__all__ = ["STACK_RULES", "StackDetector", "clean_version", "detect_stack"]

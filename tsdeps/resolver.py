"""Import resolver: maps relative module specifiers to files on disk.

Only ``./`` and ``../`` specifiers are resolved; bare package names, scoped
packages and built-ins are external and always resolve to ``None``. The
resolver keeps no state between calls, so the same ``(from_path, specifier)``
pair always yields the same answer for an unchanged filesystem.

Resolution order for a specifier ``./x`` relative to the importing file:

1. the exact path, if it is a file
2. if the path has any extension, nothing else is tried except the
   ``.js -> .ts/.tsx`` and ``.jsx -> .tsx/.ts`` fallbacks
3. ``x.ts``, ``x.tsx``, ``x.js``, ``x.jsx``
4. ``x/index.ts``, ``x/index.tsx``, ``x/index.js``, ``x/index.jsx``
"""

from __future__ import annotations

import os
import posixpath
from pathlib import Path

from tsdeps.language_map import JS_TO_TS_FALLBACKS, SOURCE_EXTENSIONS
from tsdeps.models import FileAnalysis, Import


def is_relative_import(specifier: str | None) -> bool:
    if not specifier:
        return False
    return specifier.startswith("./") or specifier.startswith("../")


def normalize_specifier(specifier: str) -> str:
    """Convert backslashes and collapse ``.``/``..`` segments."""
    posix = specifier.replace("\\", "/")
    normalized = posixpath.normpath(posix)
    if posix.startswith("./") and not normalized.startswith("."):
        normalized = "./" + normalized
    return normalized


class ImportResolver:
    """Resolve relative import specifiers against the filesystem."""

    def __init__(self, extensions: tuple[str, ...] | list[str] | None = None):
        self._extensions = tuple(extensions or SOURCE_EXTENSIONS)

    @property
    def extensions(self) -> list[str]:
        return list(self._extensions)

    def resolve(self, from_path: str | Path, specifier: str | None) -> str | None:
        """Return the absolute path ``specifier`` refers to, or None.

        None means "external or not found"; an unresolved local import is not
        an error.
        """
        if not specifier or not specifier.strip():
            return None
        if not is_relative_import(specifier):
            return None

        from_dir = os.path.dirname(os.path.abspath(os.fspath(from_path)))
        target = os.path.normpath(os.path.join(from_dir, normalize_specifier(specifier)))
        return self._find_actual_path(target)

    def unresolved_imports(self, analysis: FileAnalysis) -> list[Import]:
        """Relative imports of ``analysis`` that did not become dependencies."""
        resolved = set(analysis.dependencies)
        return [
            imp for imp in analysis.imports
            if is_relative_import(imp.source)
            and self.resolve(analysis.path, imp.source) not in resolved
        ]

    def _find_actual_path(self, target: str) -> str | None:
        if _is_file(target):
            return target

        ext = os.path.splitext(target)[1]
        if ext:
            stem = target[: -len(ext)]
            # .js and .jsx specifiers may name their TypeScript source
            for fallback in JS_TO_TS_FALLBACKS.get(ext, ()):
                candidate = stem + fallback
                if _is_file(candidate):
                    return candidate
            return None

        for extension in self._extensions:
            candidate = target + extension
            if _is_file(candidate):
                return candidate

        for extension in self._extensions:
            candidate = os.path.join(target, f"index{extension}")
            if _is_file(candidate):
                return candidate

        return None


def _is_file(path: str) -> bool:
    return Path(path).is_file()


_default_resolver = ImportResolver()


def resolve(from_path: str | Path, specifier: str | None) -> str | None:
    """Resolve with the default extension list."""
    return _default_resolver.resolve(from_path, specifier)

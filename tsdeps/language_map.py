"""Shared extension tables for the resolver, parser and scanner."""

from __future__ import annotations

# Resolution priority order matters: ./x resolves to x.ts before x.js.
SOURCE_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx")

# Maps file extension -> tree-sitter grammar name
EXT_TO_GRAMMAR: dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

DEFAULT_GRAMMAR = "tsx"

# A .js/.jsx specifier may point at a typed source compiled to that name
JS_TO_TS_FALLBACKS: dict[str, tuple[str, ...]] = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx", ".ts"),
}


def grammar_for(suffix: str) -> str:
    return EXT_TO_GRAMMAR.get(suffix.lower(), DEFAULT_GRAMMAR)


def strip_source_extension(path: str) -> str:
    for ext in SOURCE_EXTENSIONS:
        if path.endswith(ext):
            return path[: -len(ext)]
    return path

"""Tree-sitter based extraction of imports and exports from one source file."""

from __future__ import annotations

import logging
import os
import re
import threading
from pathlib import Path

from tsdeps.errors import FileParseError, SourceEncodingError
from tsdeps.language_map import grammar_for
from tsdeps.models import (
    AnalysisError,
    ErrorType,
    Export,
    ExportType,
    FileAnalysis,
    Import,
    ImportType,
    SourceLocation,
)
from tsdeps.resolver import ImportResolver

try:
    from tree_sitter_language_pack import get_parser
except ImportError as _err:
    raise ImportError(
        "tree-sitter-language-pack is required. Install with: "
        "pip install tree-sitter-language-pack"
    ) from _err

logger = logging.getLogger(__name__)

_BINARY_RE = re.compile(rb"[\x00-\x08\x0b\x0c\x0e-\x1f]")

# Declaration node types that export one name through their 'name' field
_NAMED_DECLARATIONS = {
    "function_declaration",
    "generator_function_declaration",
    "function_signature",
    "class_declaration",
    "abstract_class_declaration",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
}

_VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}


class SourceParser:
    """Parse TypeScript/JavaScript files into ``FileAnalysis`` records."""

    def __init__(self, resolver: ImportResolver | None = None):
        self.resolver = resolver or ImportResolver()
        self._local = threading.local()

    def parse(self, path: str | Path) -> FileAnalysis:
        """Analyze one file.

        Raises FileNotFoundError if the file is missing and SourceEncodingError
        if it looks binary. Syntax problems are returned on ``errors``; any
        other failure is raised as FileParseError.
        """
        file_path = os.path.abspath(os.fspath(path))
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            source_bytes = Path(file_path).read_bytes()
            if _BINARY_RE.search(source_bytes):
                raise SourceEncodingError(file_path)
            return self._analyze(file_path, source_bytes)
        except (FileNotFoundError, SourceEncodingError):
            raise
        except Exception as e:
            raise FileParseError(file_path, e) from e

    def _analyze(self, file_path: str, source_bytes: bytes) -> FileAnalysis:
        parser = self._get_parser(grammar_for(Path(file_path).suffix))
        tree = parser.parse(source_bytes)

        imports: list[Import] = []
        exports: list[Export] = []
        errors: list[AnalysisError] = []

        syntax_errors = _collect_syntax_errors(tree.root_node, source_bytes)
        if syntax_errors:
            logger.debug("%s: %d syntax error(s), skipping traversal",
                          file_path, len(syntax_errors))
            errors.extend(syntax_errors)
        else:
            self._walk_tree(tree.root_node, source_bytes, imports, exports, errors)

        dependencies: dict[str, None] = {}
        for imp in imports:
            resolved = self.resolver.resolve(file_path, imp.source)
            if resolved:
                dependencies.setdefault(resolved, None)

        logger.debug("Parsed %s: %d imports, %d exports, %d dependencies",
                     file_path, len(imports), len(exports), len(dependencies))

        return FileAnalysis(
            path=file_path,
            imports=tuple(imports),
            exports=tuple(exports),
            dependencies=tuple(dependencies),
            errors=tuple(errors),
        )

    def _walk_tree(self, root, source_bytes: bytes, imports: list[Import],
                   exports: list[Export], errors: list[AnalysisError]) -> None:
        """Visit every node once, pre-order."""
        stack = [root]
        while stack:
            node = stack.pop()
            try:
                if node.type == "import_statement":
                    imp = self._extract_import(node, source_bytes)
                    if imp is not None:
                        imports.append(imp)
                elif node.type == "call_expression":
                    imp = self._extract_require(node, source_bytes)
                    if imp is not None:
                        imports.append(imp)
                elif node.type == "export_statement":
                    self._extract_export(node, source_bytes, imports, exports)
            except Exception as e:
                # One bad node must not cost the rest of the file
                errors.append(AnalysisError(
                    type=ErrorType.PARSE,
                    message=str(e) or type(e).__name__,
                    location=_location(node),
                ))
            stack.extend(reversed(node.children))

    def _extract_import(self, node, source_bytes: bytes) -> Import | None:
        type_only = any(c.type in ("type", "typeof") for c in node.children)

        require_clause = _first_child(node, "import_require_clause")
        if require_clause is not None:
            # import x = require('./y')
            source_node = require_clause.child_by_field_name("source")
            if source_node is None or source_node.type != "string":
                return None
            name = _first_child(require_clause, "identifier")
            specifiers = (_text(name, source_bytes),) if name is not None else ()
            return Import(_string_value(source_node, source_bytes), ImportType.COMMONJS, specifiers)

        source_node = node.child_by_field_name("source")
        if source_node is None or source_node.type != "string":
            return None
        source = _string_value(source_node, source_bytes)

        clause = _first_child(node, "import_clause")
        if clause is None:
            # import './side-effect'
            return Import(source, ImportType.NAMED, ())

        specifiers: list[str] = []
        import_type = ImportType.TYPE if type_only else ImportType.NAMED
        has_default = False

        for child in clause.named_children:
            if child.type == "identifier":
                has_default = True
                specifiers.append(_text(child, source_bytes))
                if not type_only:
                    import_type = ImportType.DEFAULT
            elif child.type == "namespace_import":
                name = _first_child(child, "identifier")
                if name is not None:
                    specifiers.append(_text(name, source_bytes))
                if not type_only:
                    import_type = ImportType.NAMESPACE
            elif child.type == "named_imports":
                for spec in child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    local = _field(spec, "alias", "name")
                    if local is not None:
                        specifiers.append(_text(local, source_bytes))
                if not has_default and not type_only:
                    import_type = ImportType.NAMED

        return Import(source, import_type, tuple(specifiers))

    def _extract_require(self, node, source_bytes: bytes) -> Import | None:
        function = node.child_by_field_name("function")
        if function is None or function.type != "identifier":
            return None
        if _text(function, source_bytes) != "require":
            return None

        arguments = node.child_by_field_name("arguments")
        if arguments is None or not arguments.named_children:
            return None
        first = arguments.named_children[0]
        if first.type != "string":
            return None

        specifiers: list[str] = []
        parent = node.parent
        if parent is not None and parent.type == "variable_declarator":
            name = parent.child_by_field_name("name")
            if name is not None and name.type == "identifier":
                specifiers = [_text(name, source_bytes)]
            elif name is not None and name.type == "object_pattern":
                specifiers = _pattern_names(name, source_bytes)

        return Import(_string_value(first, source_bytes), ImportType.COMMONJS, tuple(specifiers))

    def _extract_export(self, node, source_bytes: bytes,
                        imports: list[Import], exports: list[Export]) -> None:
        source_node = node.child_by_field_name("source")
        source = None
        if source_node is not None and source_node.type == "string":
            source = _string_value(source_node, source_bytes)

        clause = _first_child(node, "export_clause")
        if clause is not None:
            names: list[str] = []
            for spec in clause.named_children:
                if spec.type != "export_specifier":
                    continue
                exported = _field(spec, "alias", "name")
                if exported is not None:
                    names.append(_text(exported, source_bytes))
            export_type = ExportType.RE_EXPORT if source_node is not None else ExportType.NAMED
            exports.extend(Export(name, export_type) for name in names)
            if source is not None:
                # Re-exports are dependencies too
                imports.append(Import(source, ImportType.NAMED, tuple(names)))
            return

        if source_node is not None:
            # export * from '...' / export * as ns from '...'
            exports.append(Export("*", ExportType.RE_EXPORT))
            if source is not None:
                imports.append(Import(source, ImportType.NAMESPACE, ("*",)))
            return

        child_types = {c.type for c in node.children}
        if "default" in child_types or "=" in child_types:
            exports.append(Export("default", ExportType.DEFAULT))
            return

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            for name in _declared_names(declaration, source_bytes):
                exports.append(Export(name, ExportType.NAMED))

    def _get_parser(self, grammar_name: str):
        # tree-sitter parsers are not shared across threads
        cache = getattr(self._local, "parsers", None)
        if cache is None:
            cache = self._local.parsers = {}
        if grammar_name not in cache:
            cache[grammar_name] = get_parser(grammar_name)
        return cache[grammar_name]


def parse_file(path: str | Path, resolver: ImportResolver | None = None) -> FileAnalysis:
    return SourceParser(resolver).parse(path)


def _collect_syntax_errors(root, source_bytes: bytes) -> list[AnalysisError]:
    """ERROR and MISSING nodes mean the core grammar failed to parse."""
    if not root.has_error:
        return []

    found: list[AnalysisError] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_missing:
            found.append(AnalysisError(
                type=ErrorType.PARSE,
                message=f"Missing '{node.type}'",
                location=_location(node),
            ))
            continue
        if node.is_error:
            snippet = _text(node, source_bytes).strip().splitlines()
            near = snippet[0][:40] if snippet else ""
            found.append(AnalysisError(
                type=ErrorType.PARSE,
                message=f"Unexpected syntax near '{near}'" if near else "Unexpected syntax",
                location=_location(node),
            ))
            continue
        stack.extend(reversed([c for c in node.children if c.has_error or c.is_missing]))

    found.sort(key=lambda e: (e.location.line, e.location.column))
    return found


def _declared_names(declaration, source_bytes: bytes) -> list[str]:
    if declaration.type == "ambient_declaration":
        # export declare const x: number;
        for child in declaration.named_children:
            names = _declared_names(child, source_bytes)
            if names:
                return names
        return []

    if declaration.type in _NAMED_DECLARATIONS:
        name = declaration.child_by_field_name("name")
        return [_text(name, source_bytes)] if name is not None else []

    if declaration.type in _VARIABLE_DECLARATIONS:
        names = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is not None and name.type == "identifier":
                names.append(_text(name, source_bytes))
        return names

    return []


def _pattern_names(pattern, source_bytes: bytes) -> list[str]:
    """Local names bound by an object destructuring pattern."""
    names: list[str] = []
    for child in pattern.named_children:
        target = None
        if child.type == "shorthand_property_identifier_pattern":
            target = child
        elif child.type == "pair_pattern":
            target = child.child_by_field_name("value")
        elif child.type == "object_assignment_pattern":
            target = child.child_by_field_name("left")
        elif child.type == "rest_pattern":
            target = _first_child(child, "identifier")
        if target is not None and target.type in ("identifier", "shorthand_property_identifier_pattern"):
            names.append(_text(target, source_bytes))
    return names


def _first_child(node, node_type: str):
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _field(node, *names: str):
    """First of the named fields present on ``node``."""
    for name in names:
        child = node.child_by_field_name(name)
        if child is not None:
            return child
    return None


def _text(node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def _string_value(node, source_bytes: bytes) -> str:
    """Contents of a string literal without its quotes."""
    raw = _text(node, source_bytes)
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "'\"":
        return raw[1:-1]
    return raw


def _location(node) -> SourceLocation:
    return SourceLocation(line=node.start_point[0] + 1, column=node.start_point[1] + 1)

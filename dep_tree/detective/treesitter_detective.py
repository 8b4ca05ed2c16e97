"""Tree-sitter detective for JavaScript and TypeScript sources."""

from __future__ import annotations

from pathlib import Path

from tree_sitter_language_pack import get_parser

from dep_tree.models import DetectiveOptions
from dep_tree.detective.base import BaseDetective
from dep_tree.detective.language_map import EXT_TO_LANGUAGE, TREESITTER_EXTENSIONS

NODE_BUILTINS: frozenset[str] = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
    "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
    "events", "fs", "http", "http2", "https", "inspector", "module", "net",
    "os", "path", "perf_hooks", "process", "punycode", "querystring",
    "readline", "repl", "stream", "string_decoder", "sys", "timers", "tls",
    "trace_events", "tty", "url", "util", "v8", "vm", "wasi", "worker_threads",
    "zlib",
})

# Node types whose ``source`` field names a module
_SOURCE_NODES = {"import_statement", "export_statement", "import_require_clause"}


def is_node_builtin(specifier: str) -> bool:
    if specifier.startswith("node:"):
        return True
    return specifier.split("/")[0] in NODE_BUILTINS


def _string_value(node) -> str | None:
    """Return the contents of a plain string literal node."""
    if node is None or node.type != "string" or not node.text:
        return None
    raw = node.text.decode("utf-8", errors="replace")
    if len(raw) >= 2 and raw[0] in "'\"" and raw[-1] == raw[0]:
        return raw[1:-1] or None
    return None


def _is_type_only(node) -> bool:
    return any(child.type == "type" for child in node.children)


class TreeSitterDetective(BaseDetective):
    """Finds imports, re-exports, ``require()`` and ``import()`` calls."""

    extensions = tuple(sorted(TREESITTER_EXTENSIONS))

    def __init__(self):
        self._parser_cache: dict[str, object] = {}

    def dependencies(self, file_path: Path, options: DetectiveOptions) -> list[str]:
        grammar_name = EXT_TO_LANGUAGE[file_path.suffix][1]
        source_bytes = file_path.read_bytes()
        return list(dict.fromkeys(self._collect(source_bytes, grammar_name, options)))

    def detect(self, source: str, options: DetectiveOptions, grammar_name: str = "javascript") -> list[str]:
        return list(dict.fromkeys(self._collect(source.encode("utf-8"), grammar_name, options)))

    def _collect(self, source_bytes: bytes, grammar_name: str, options: DetectiveOptions) -> list[str]:
        tree = self._get_parser(grammar_name).parse(source_bytes)
        specifiers: list[str] = []
        self._walk_tree(tree.root_node, options, specifiers)
        if not options.include_core:
            specifiers = [s for s in specifiers if not is_node_builtin(s)]
        return specifiers

    def _walk_tree(self, node, options: DetectiveOptions, specifiers: list[str]) -> None:
        # Explicit stack keeps document order without deep recursion
        stack = [node]
        while stack:
            current = stack.pop()
            specifier = self._specifier_for(current, options)
            if specifier:
                specifiers.append(specifier)
            stack.extend(reversed(current.children))

    def _specifier_for(self, node, options: DetectiveOptions) -> str | None:
        if node.type in _SOURCE_NODES:
            if options.skip_type_imports and node.type != "import_require_clause" and _is_type_only(node):
                return None
            source = node.child_by_field_name("source")
            if source is None and node.type == "import_require_clause":
                source = next((c for c in node.children if c.type == "string"), None)
            return _string_value(source)

        if node.type == "call_expression":
            function = node.child_by_field_name("function")
            arguments = node.child_by_field_name("arguments")
            if function is None or arguments is None:
                return None
            is_require = function.type == "identifier" and function.text == b"require"
            is_dynamic_import = function.type == "import"
            if is_dynamic_import and options.skip_async_imports:
                return None
            if is_require or is_dynamic_import:
                args = arguments.named_children
                if len(args) == 1:
                    return _string_value(args[0])
        return None

    def _get_parser(self, grammar_name: str):
        if grammar_name not in self._parser_cache:
            self._parser_cache[grammar_name] = get_parser(grammar_name)
        return self._parser_cache[grammar_name]

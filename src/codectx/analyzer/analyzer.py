"""
Language & pattern analyzer.

Pattern-based static analysis: symbols, imports/exports, function and class
spans, comments, complexity and heuristic metadata. There is no parser:
extraction is regex driven and best effort, and AST-level correctness is not
promised.
"""

import re
from pathlib import Path

from codectx.analyzer.complexity import compute_metrics, cyclomatic_complexity
from codectx.analyzer.heuristics import (
    compute_line_starts,
    detect_design_patterns,
    detect_diagnostic_patterns,
    detect_framework,
    detect_performance_patterns,
    detect_security_patterns,
    extract_api_endpoints,
    extract_database_queries,
    line_of,
)
from codectx.analyzer.models import (
    AnalysisResult,
    ClassInfo,
    Comment,
    Dependency,
    DependencyType,
    FileMetadata,
    FunctionInfo,
    ImportRef,
    Symbol,
    SymbolKind,
    Todo,
)
from codectx.analyzer.patterns import CONTROL_KEYWORDS, BlockStyle, PatternSet, pattern_set_for
from codectx.shared.domain.exceptions import AnalysisError
from codectx.shared.infrastructure.config import AnalyzerConfig
from codectx.shared.infrastructure.logging import get_logger
from codectx.shared.languages import Language, LanguageRegistry

logger = get_logger(__name__)

_TODO_PATTERN = re.compile(r"\b(?P<marker>TODO|FIXME|HACK|NOTE|BUG)(?:\([^)\n]*\))?:\s*(?P<description>[^\n]+)")
_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")
_QUOTED = re.compile(r"\"([^\"]+)\"")

MAX_COMMENT_CHARS = 500

_SYMBOL_ORDER = {
    SymbolKind.IMPORT: 0,
    SymbolKind.EXPORT: 1,
    SymbolKind.INTERFACE: 2,
    SymbolKind.CLASS: 3,
    SymbolKind.FUNCTION: 4,
}


class CodeAnalyzer:
    """
    Analyzes one file's content.

    Stateless apart from its configuration, so one instance can serve
    concurrent indexing tasks.

    Examples:
        >>> analyzer = CodeAnalyzer(AnalyzerConfig())
        >>> result = analyzer.analyze("src/a.js", "export function add(a, b) { return a + b }")
        >>> result.exports
        ['add']
    """

    def __init__(self, config: AnalyzerConfig | None = None) -> None:
        self.config = config or AnalyzerConfig()

    def analyze(self, path: str | Path, content: str) -> AnalysisResult:
        """
        Analyze *content* as the file at *path*.

        Never raises: internal failures are logged as AnalysisError and an
        empty-but-valid result is returned.
        """
        file_path = str(path)
        language = LanguageRegistry.detect(file_path)

        try:
            return self._analyze(file_path, content, language)
        except Exception as e:
            error = AnalysisError(f"Analysis failed for {file_path}: {e}", {"path": file_path})
            logger.warning(
                "analysis_failed_downgraded",
                file=file_path,
                language=language.value,
                error=str(error),
                error_type=type(e).__name__,
            )
            return AnalysisResult.empty(file_path, language, content)

    def _analyze(self, file_path: str, content: str, language: Language) -> AnalysisResult:
        result = AnalysisResult.empty(file_path, language, content)
        line_starts = compute_line_starts(content)
        todos = extract_todos(content, line_starts)

        patterns = pattern_set_for(language)
        if patterns.is_empty:
            result.metadata = FileMetadata(todos=todos)
            logger.debug("analysis_language_unsupported", file=file_path, language=language.value)
            return result

        lines = content.split("\n")
        comments, comment_line_count = extract_comments(lines, patterns)

        functions = self._extract_functions(content, lines, line_starts, patterns)
        classes = self._extract_classes(content, lines, line_starts, patterns, functions)
        interfaces = _extract_named(content, line_starts, patterns.interfaces)
        imports = extract_imports(content, line_starts, patterns)
        exports = extract_exports(content, line_starts, patterns)

        symbols = [Symbol(name=f.name, kind=SymbolKind.FUNCTION, line=f.start_line) for f in functions]
        symbols += [Symbol(name=c.name, kind=SymbolKind.CLASS, line=c.start_line) for c in classes]
        symbols += [Symbol(name=name, kind=SymbolKind.INTERFACE, line=line) for name, line in interfaces]
        symbols += [Symbol(name=ref.module, kind=SymbolKind.IMPORT, line=ref.line) for ref in imports]
        symbols += [Symbol(name=name, kind=SymbolKind.EXPORT, line=line) for name, line in exports]
        symbols.sort(key=lambda s: (s.line, _SYMBOL_ORDER[s.kind]))

        result.symbols = symbols
        result.imports = imports
        result.exports = list(dict.fromkeys(name for name, _ in exports))
        result.dependencies = [
            Dependency(
                module=ref.module,
                type=DependencyType.LOCAL if patterns.is_local(ref.module) else DependencyType.EXTERNAL,
                line=ref.line,
            )
            for ref in imports
        ]
        result.functions = functions
        result.classes = classes
        result.comments = comments
        result.complexity = compute_metrics(content, comment_line_count)
        result.metadata = self._build_metadata(content, language, line_starts, todos)
        return result

    def _build_metadata(self, content: str, language: Language, line_starts: list[int], todos: list[Todo]) -> FileMetadata:
        cfg = self.config
        return FileMetadata(
            framework=detect_framework(content, language),
            design_patterns=detect_design_patterns(content, cfg.design_pattern_min_hits),
            security_patterns=detect_security_patterns(content, cfg.security_min_occurrences),
            performance_patterns=detect_performance_patterns(content, cfg.performance_min_occurrences),
            diagnostic_patterns=detect_diagnostic_patterns(content, cfg.diagnostic_min_occurrences),
            api_endpoints=extract_api_endpoints(content, language, line_starts),
            database_queries=extract_database_queries(content, language, line_starts),
            todos=todos,
        )

    def _extract_functions(
        self, content: str, lines: list[str], line_starts: list[int], patterns: PatternSet
    ) -> list[FunctionInfo]:
        functions: dict[tuple[str, int], FunctionInfo] = {}
        for regex in patterns.functions:
            for match in regex.finditer(content):
                name = match.group("name")
                if name in CONTROL_KEYWORDS:
                    continue
                start_line = line_of(line_starts, match.start("name"))
                if (name, start_line) in functions:
                    continue
                end_line = _span_end(content, lines, line_starts, match, patterns)
                body = "\n".join(lines[start_line - 1 : end_line])
                functions[(name, start_line)] = FunctionInfo(
                    name=name,
                    start_line=start_line,
                    end_line=end_line,
                    complexity=cyclomatic_complexity(body),
                )
        return sorted(functions.values(), key=lambda f: f.start_line)

    def _extract_classes(
        self,
        content: str,
        lines: list[str],
        line_starts: list[int],
        patterns: PatternSet,
        functions: list[FunctionInfo],
    ) -> list[ClassInfo]:
        classes: dict[tuple[str, int], ClassInfo] = {}
        for regex in patterns.classes:
            for match in regex.finditer(content):
                name = match.group("name")
                start_line = line_of(line_starts, match.start("name"))
                if (name, start_line) in classes:
                    continue
                end_line = _span_end(content, lines, line_starts, match, patterns)
                methods = [f.name for f in functions if start_line < f.start_line <= end_line]
                classes[(name, start_line)] = ClassInfo(
                    name=name, start_line=start_line, end_line=end_line, methods=methods
                )
        return sorted(classes.values(), key=lambda c: c.start_line)


# =============================================================================
# EXTRACTION HELPERS
# =============================================================================


def extract_todos(content: str, line_starts: list[int]) -> list[Todo]:
    return [
        Todo(
            marker=m.group("marker"),
            description=m.group("description").strip(),
            line=line_of(line_starts, m.start()),
        )
        for m in _TODO_PATTERN.finditer(content)
    ]


def extract_comments(lines: list[str], patterns: PatternSet) -> tuple[list[Comment], int]:
    """
    Collect whole-line comments and count the lines they occupy.

    Trailing comments after code are not counted as comment lines.
    """
    block_pairs: list[tuple[str, str]] = []
    if patterns.block_comment:
        block_pairs.append(patterns.block_comment)
    block_pairs.extend((d, d) for d in patterns.docstring_delimiters)

    comments: list[Comment] = []
    count = 0
    closing: str | None = None
    buffer: list[str] = []
    buffer_start = 0

    for idx, raw in enumerate(lines):
        stripped = raw.strip()
        if closing is not None:
            count += 1
            buffer.append(stripped)
            if closing in stripped:
                comments.append(Comment(content="\n".join(buffer)[:MAX_COMMENT_CHARS], line=buffer_start))
                closing, buffer = None, []
            continue

        if not stripped:
            continue

        if patterns.line_comments and stripped.startswith(patterns.line_comments):
            count += 1
            comments.append(Comment(content=stripped[:MAX_COMMENT_CHARS], line=idx + 1))
            continue

        for opener, closer in block_pairs:
            if stripped.startswith(opener):
                count += 1
                if closer in stripped[len(opener):]:
                    comments.append(Comment(content=stripped[:MAX_COMMENT_CHARS], line=idx + 1))
                else:
                    closing, buffer, buffer_start = closer, [stripped], idx + 1
                break

    if buffer:
        comments.append(Comment(content="\n".join(buffer)[:MAX_COMMENT_CHARS], line=buffer_start))

    return comments, count


def extract_imports(content: str, line_starts: list[int], patterns: PatternSet) -> list[ImportRef]:
    imports: list[ImportRef] = []
    for regex in patterns.imports:
        for match in regex.finditer(content):
            groups = match.groupdict()
            line = line_of(line_starts, match.start())

            if groups.get("modules"):
                for part in groups["modules"].split(","):
                    module = part.strip().split()[0] if part.strip() else ""
                    if module:
                        imports.append(ImportRef(module=module, line=line))
                continue

            if groups.get("block") is not None:
                block_offset = match.start("block")
                for quoted in _QUOTED.finditer(groups["block"]):
                    imports.append(
                        ImportRef(module=quoted.group(1), line=line_of(line_starts, block_offset + quoted.start()))
                    )
                continue

            module = groups["module"]
            if groups.get("names"):
                names = split_names(groups["names"])
            elif patterns.import_binds_last_segment:
                names = [re.split(r"[.\\]", module.strip("\\"))[-1]]
            else:
                names = []
            imports.append(ImportRef(module=module, names=names, line=line))

    imports.sort(key=lambda ref: ref.line)
    return imports


def extract_exports(content: str, line_starts: list[int], patterns: PatternSet) -> list[tuple[str, int]]:
    """Exported names with their lines, in file order, first occurrence only."""
    seen: dict[str, int] = {}
    for regex in patterns.exports:
        for match in regex.finditer(content):
            groups = match.groupdict()
            line = line_of(line_starts, match.start())
            names = [groups["name"]] if groups.get("name") else split_names(groups.get("names") or "", keep_alias=True)
            for name in names:
                if name not in seen or line < seen[name]:
                    seen[name] = line
    return sorted(seen.items(), key=lambda item: item[1])


def split_names(raw: str, keep_alias: bool = False) -> list[str]:
    """
    Parse an import/export name list.

    Handles ``a, b``, ``(a, b)``, ``{ a as b }``, ``Default, { c }`` and
    ``type X``. Namespace imports (``* as ns``) bind no symbol and are
    dropped. For aliases the original name is kept unless *keep_alias*.
    """
    text = re.sub(r"(?:#|//)[^\n]*", "", raw)
    for ch in "{}()":
        text = text.replace(ch, ",")

    names: list[str] = []
    for part in text.split(","):
        part = " ".join(part.split())
        if not part or part.startswith("*"):
            continue
        if part.startswith("type "):
            part = part[5:]
        if " as " in part:
            original, alias = part.split(" as ", 1)
            part = alias if keep_alias else original
        part = part.strip()
        if _IDENTIFIER.fullmatch(part) and part not in names:
            names.append(part)
    return names


def _extract_named(content: str, line_starts: list[int], regexes: tuple[re.Pattern, ...]) -> list[tuple[str, int]]:
    found: dict[tuple[str, int], None] = {}
    for regex in regexes:
        for match in regex.finditer(content):
            found.setdefault((match.group("name"), line_of(line_starts, match.start("name"))), None)
    return sorted(found, key=lambda item: item[1])


# =============================================================================
# SPAN DETECTION
# =============================================================================


def _span_end(content: str, lines: list[str], line_starts: list[int], match: re.Match, patterns: PatternSet) -> int:
    """1-based last line of the declaration that *match* starts."""
    start_line = line_of(line_starts, match.start("name"))
    if patterns.block_style == BlockStyle.INDENT:
        return _indent_block_end(content, lines, line_starts, match, start_line)
    return _brace_block_end(content, line_starts, match.end("name"), start_line)


def _indent_width(line: str) -> int:
    expanded = line.expandtabs(4)
    return len(expanded) - len(expanded.lstrip())


def _indent_block_end(content: str, lines: list[str], line_starts: list[int], match: re.Match, start_line: int) -> int:
    base = _indent_width(lines[start_line - 1])

    # The header ends at the first ':' outside brackets (signatures may wrap)
    depth = 0
    header_end = len(content) - 1
    for i in range(match.end("name"), len(content)):
        ch = content[i]
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(0, depth - 1)
        elif ch == ":" and depth == 0:
            header_end = i
            break
    header_line = line_of(line_starts, header_end)

    end = header_line
    for idx in range(header_line, len(lines)):
        line = lines[idx]
        if not line.strip():
            continue
        if _indent_width(line) <= base:
            break
        end = idx + 1
    return end


def _brace_block_end(content: str, line_starts: list[int], offset: int, start_line: int) -> int:
    # Skip the parameter list so default values like `= {}` are not taken as the body
    paren = content.find("(", offset)
    if paren != -1 and not content[offset:paren].strip():
        offset = _skip_balanced(content, paren, "(", ")") + 1

    brace = content.find("{", offset)
    semicolon = content.find(";", offset)
    if brace == -1 or (semicolon != -1 and semicolon < brace):
        return line_of(line_starts, semicolon) if semicolon != -1 else start_line

    close = _skip_balanced(content, brace, "{", "}")
    return line_of(line_starts, close)


def _skip_balanced(content: str, open_index: int, opener: str, closer: str) -> int:
    """
    Index of the bracket closing the one at *open_index*.

    String literals and // and /* */ comments are skipped. Returns the last
    index of *content* when the bracket is never closed.
    """
    depth = 0
    i = open_index
    n = len(content)
    while i < n:
        ch = content[i]
        if ch in "\"'`":
            i = _skip_string(content, i)
        elif ch == "/" and i + 1 < n and content[i + 1] == "/":
            newline = content.find("\n", i)
            i = n if newline == -1 else newline
            continue
        elif ch == "/" and i + 1 < n and content[i + 1] == "*":
            end = content.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return n - 1


def _skip_string(content: str, start: int) -> int:
    """Index of the closing quote of the literal starting at *start*."""
    quote = content[start]
    i = start + 1
    n = len(content)
    while i < n:
        ch = content[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i
        if ch == "\n" and quote != "`":
            # Unterminated single-line literal (or a stray apostrophe)
            return i
        i += 1
    return n - 1

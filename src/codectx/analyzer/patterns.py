"""
Per-language pattern sets.

Each supported language carries one immutable PatternSet of pre-compiled
regexes. The analyzer picks the set once per file via pattern_set_for();
languages without a dedicated set get EMPTY_PATTERN_SET, so every Language
value is handled.

Regex group conventions:
- symbol patterns (functions, classes, interfaces): ``name``, optionally
  ``indent`` for indentation-scoped languages
- import patterns: ``module`` plus optional ``names`` (bound symbols) or
  ``modules`` (comma-separated whole-module imports) or ``block`` (a
  parenthesized list of quoted module paths)
- export patterns: ``name`` or ``names``
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from codectx.shared.languages import Language


class BlockStyle(str, Enum):
    """How the extent of a function or class body is found."""

    BRACE = "brace"
    INDENT = "indent"


def is_path_like(module: str) -> bool:
    """Relative or path-like module reference."""
    return module.startswith((".", "/", "\\"))


def _is_local_php(module: str) -> bool:
    # Namespaces (App\Models\User) are project code; paths with '/' are includes
    return is_path_like(module) or "/" not in module


@dataclass(frozen=True)
class PatternSet:
    """Compiled extraction patterns for one language."""

    language: Language
    functions: tuple[re.Pattern, ...] = ()
    classes: tuple[re.Pattern, ...] = ()
    interfaces: tuple[re.Pattern, ...] = ()
    imports: tuple[re.Pattern, ...] = ()
    exports: tuple[re.Pattern, ...] = ()
    line_comments: tuple[str, ...] = ()
    block_comment: tuple[str, str] | None = None
    docstring_delimiters: tuple[str, ...] = ()
    block_style: BlockStyle = BlockStyle.BRACE
    # Java-style imports bind the last dotted segment (java.util.List -> List)
    import_binds_last_segment: bool = False
    is_local: Callable[[str], bool] = field(default=is_path_like)

    @property
    def is_empty(self) -> bool:
        return not (self.functions or self.classes or self.interfaces or self.imports or self.exports)


# =============================================================================
# PRE-COMPILED PATTERNS
# =============================================================================

_M = re.MULTILINE

# Identifiers that brace-language method patterns must never report as names
CONTROL_KEYWORDS = frozenset(
    {
        "if", "else", "for", "foreach", "while", "do", "switch", "case", "catch",
        "try", "finally", "return", "function", "new", "throw", "typeof", "await",
        "yield", "super", "this", "constructor", "elseif", "match", "with",
    }
)

_JS_FUNCTIONS = (
    re.compile(r"\bfunction\s*\*?\s*(?P<name>[A-Za-z_$][\w$]*)\s*\("),
    re.compile(
        r"\b(?:const|let|var)\s+(?P<name>[A-Za-z_$][\w$]*)\s*(?::[^=\n]+)?=\s*(?:async\s+)?"
        r"(?:function\b|\([^()\n]*\)\s*(?::[^=\n]+)?=>|[A-Za-z_$][\w$]*\s*=>)"
    ),
    # Class and object methods: `name(args) {` at the start of a line
    re.compile(
        r"^[ \t]*(?:(?:public|private|protected|static|async|readonly|override|get|set)\s+)*"
        r"(?P<name>[A-Za-z_$][\w$]*)\s*\([^()\n]*\)\s*(?::\s*[^{\n]+)?\{",
        _M,
    ),
)

_JS_IMPORTS = (
    re.compile(r"\bimport\s+(?!type\s+\{)(?P<names>[^'\";]+?)\s+from\s+['\"](?P<module>[^'\"]+)['\"]"),
    re.compile(r"\bimport\s+type\s+(?P<names>\{[^}]*\})\s+from\s+['\"](?P<module>[^'\"]+)['\"]"),
    re.compile(r"^[ \t]*import\s+['\"](?P<module>[^'\"]+)['\"]", _M),
    re.compile(
        r"\b(?:const|let|var)\s+(?P<names>\{[^}]*\}|[A-Za-z_$][\w$]*)\s*=\s*"
        r"require\s*\(\s*['\"](?P<module>[^'\"]+)['\"]\s*\)"
    ),
)

_JS_EXPORTS = (
    re.compile(
        r"\bexport\s+(?:default\s+)?(?:async\s+)?(?:function\s*\*?|class|const|let|var)\s*"
        r"(?P<name>[A-Za-z_$][\w$]*)"
    ),
    re.compile(r"\bexport\s*(?P<names>\{[^}]*\})"),
    re.compile(r"\bmodule\.exports\s*=\s*(?P<names>\{[^}]*\})"),
    re.compile(r"\b(?:module\.)?exports\.(?P<name>[A-Za-z_$][\w$]*)\s*="),
)

_TS_EXPORTS = _JS_EXPORTS + (
    re.compile(
        r"\bexport\s+(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?"
        r"(?:interface|type|enum|namespace)\s+(?P<name>[A-Za-z_$][\w$]*)"
    ),
)

_CLASS_JS = re.compile(r"\bclass\s+(?P<name>[A-Za-z_$][\w$]*)")


PYTHON_PATTERNS = PatternSet(
    language=Language.PYTHON,
    functions=(re.compile(r"^(?P<indent>[ \t]*)(?:async[ \t]+)?def[ \t]+(?P<name>\w+)[ \t]*\(", _M),),
    classes=(re.compile(r"^(?P<indent>[ \t]*)class[ \t]+(?P<name>\w+)", _M),),
    imports=(
        re.compile(
            r"^[ \t]*from[ \t]+(?P<module>\.+[\w.]*|[\w.]+)[ \t]+import[ \t]+(?P<names>\([^)]*\)|[^\n#;]+)",
            _M,
        ),
        re.compile(
            r"^[ \t]*import[ \t]+(?P<modules>[\w.]+(?:[ \t]+as[ \t]+\w+)?(?:[ \t]*,[ \t]*[\w.]+(?:[ \t]+as[ \t]+\w+)?)*)",
            _M,
        ),
    ),
    exports=(
        re.compile(r"^(?:async[ \t]+)?def[ \t]+(?P<name>(?!_)\w+)", _M),
        re.compile(r"^class[ \t]+(?P<name>(?!_)\w+)", _M),
    ),
    line_comments=("#",),
    docstring_delimiters=('"""', "'''"),
    block_style=BlockStyle.INDENT,
)

JAVASCRIPT_PATTERNS = PatternSet(
    language=Language.JAVASCRIPT,
    functions=_JS_FUNCTIONS,
    classes=(_CLASS_JS,),
    imports=_JS_IMPORTS,
    exports=_JS_EXPORTS,
    line_comments=("//",),
    block_comment=("/*", "*/"),
)

TYPESCRIPT_PATTERNS = PatternSet(
    language=Language.TYPESCRIPT,
    functions=_JS_FUNCTIONS,
    classes=(re.compile(r"\b(?:abstract\s+)?class\s+(?P<name>[A-Za-z_$][\w$]*)"),),
    interfaces=(re.compile(r"\binterface\s+(?P<name>[A-Za-z_$][\w$]*)"),),
    imports=_JS_IMPORTS,
    exports=_TS_EXPORTS,
    line_comments=("//",),
    block_comment=("/*", "*/"),
)

PHP_PATTERNS = PatternSet(
    language=Language.PHP,
    functions=(re.compile(r"\bfunction\s+&?\s*(?P<name>\w+)\s*\("),),
    classes=(re.compile(r"^[ \t]*(?:(?:abstract|final|readonly)\s+)*(?:class|trait|enum)\s+(?P<name>\w+)", _M),),
    interfaces=(re.compile(r"^[ \t]*interface\s+(?P<name>\w+)", _M),),
    imports=(
        re.compile(r"^[ \t]*use\s+(?:function\s+|const\s+)?(?P<module>\\?[\w\\]+)(?:\s+as\s+(?P<alias>\w+))?\s*;", _M),
        re.compile(r"\b(?:require|include)(?:_once)?\s*\(?\s*['\"](?P<module>[^'\"]+)['\"]"),
    ),
    exports=(
        re.compile(r"^(?:(?:abstract|final|readonly)\s+)*(?:class|interface|trait|enum)\s+(?P<name>\w+)", _M),
        re.compile(r"^function\s+&?\s*(?P<name>\w+)", _M),
    ),
    line_comments=("//", "#"),
    block_comment=("/*", "*/"),
    import_binds_last_segment=True,
    is_local=_is_local_php,
)

JAVA_PATTERNS = PatternSet(
    language=Language.JAVA,
    functions=(
        re.compile(
            r"^[ \t]*(?:(?:public|private|protected|static|final|abstract|synchronized|native|default)\s+)*"
            r"(?:<[^>\n]+>\s+)?(?!return\b|new\b|else\b|throw\b)[\w.$]+(?:<[^>{};\n]*>)?(?:\[\])*\s+"
            r"(?P<name>\w+)\s*\([^;{]*?\)\s*(?:throws\s+[\w.,\s]+)?\{",
            _M,
        ),
    ),
    classes=(re.compile(r"\b(?:class|enum|record)\s+(?P<name>\w+)"),),
    interfaces=(re.compile(r"\binterface\s+(?P<name>\w+)"),),
    imports=(re.compile(r"^[ \t]*import\s+(?:static\s+)?(?P<module>[\w.]+?)(?:\.\*)?\s*;", _M),),
    exports=(
        re.compile(
            r"^public\s+(?:(?:abstract|final|sealed|static)\s+)*(?:class|interface|enum|record)\s+(?P<name>\w+)",
            _M,
        ),
    ),
    line_comments=("//",),
    block_comment=("/*", "*/"),
    import_binds_last_segment=True,
)

GO_PATTERNS = PatternSet(
    language=Language.GO,
    functions=(re.compile(r"^func\s+(?:\([^)]*\)\s*)?(?P<name>\w+)\s*[\[(]", _M),),
    classes=(re.compile(r"^type\s+(?P<name>\w+)\s+struct\b", _M),),
    interfaces=(re.compile(r"^type\s+(?P<name>\w+)\s+interface\b", _M),),
    imports=(
        re.compile(r"^import\s+(?:[\w.]+\s+)?\"(?P<module>[^\"]+)\"", _M),
        re.compile(r"^import\s*\((?P<block>[^)]*)\)", _M),
    ),
    exports=(
        re.compile(r"^func\s+(?:\([^)]*\)\s*)?(?P<name>[A-Z]\w*)", _M),
        re.compile(r"^type\s+(?P<name>[A-Z]\w*)", _M),
    ),
    line_comments=("//",),
    block_comment=("/*", "*/"),
)

_PATTERN_SETS: dict[Language, PatternSet] = {
    ps.language: ps
    for ps in (
        PYTHON_PATTERNS,
        JAVASCRIPT_PATTERNS,
        TYPESCRIPT_PATTERNS,
        PHP_PATTERNS,
        JAVA_PATTERNS,
        GO_PATTERNS,
    )
}

# Vue single-file components carry JavaScript in their <script> block
_PATTERN_SETS[Language.VUE] = JAVASCRIPT_PATTERNS

EMPTY_PATTERN_SET = PatternSet(language=Language.TEXT)


def pattern_set_for(language: Language) -> PatternSet:
    """Return the compiled pattern set for *language* (empty when unsupported)."""
    return _PATTERN_SETS.get(language, EMPTY_PATTERN_SET)


def supported_languages() -> frozenset[Language]:
    return frozenset(_PATTERN_SETS)

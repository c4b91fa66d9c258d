"""
Tests for CodeAnalyzer symbol, import/export and span extraction.
"""

from codectx.analyzer import CodeAnalyzer, DependencyType, SymbolKind
from codectx.shared.languages import Language

PYTHON_SOURCE = '''"""Billing helpers."""
from .a import add
import os, json as j

# running totals
def total(items):
    result = 0
    for item in items:
        result = add(result, item)
    return result


class Calculator:
    def add(self, a, b):
        return a + b

    def _reset(self):
        pass


def _private():
    return None
'''

JS_SOURCE = """import { add } from './a';
import React, { useState as useLocal } from 'react';
const fs = require('fs');

export function total(items) {
  let sum = 0;
  for (const item of items) {
    sum = add(sum, item);
  }
  return sum;
}

export default class Cart {
  checkout(user) {
    return total(user.items);
  }
}
"""


class TestPythonAnalysis:
    """Test Python extraction."""

    def test_imports_bind_original_names(self):
        result = CodeAnalyzer().analyze("pkg/billing.py", PYTHON_SOURCE)

        modules = [(ref.module, ref.names) for ref in result.imports]
        assert modules == [(".a", ["add"]), ("os", []), ("json", [])]
        assert result.imported_names == ["add"]

    def test_dependency_types(self):
        result = CodeAnalyzer().analyze("pkg/billing.py", PYTHON_SOURCE)

        types = {d.module: d.type for d in result.dependencies}
        assert types[".a"] == DependencyType.LOCAL
        assert types["os"] == DependencyType.EXTERNAL
        assert [d.module for d in result.local_dependencies] == [".a"]

    def test_exports_are_public_top_level_names(self):
        result = CodeAnalyzer().analyze("pkg/billing.py", PYTHON_SOURCE)
        assert result.exports == ["total", "Calculator"]

    def test_function_and_class_spans(self):
        result = CodeAnalyzer().analyze("pkg/billing.py", PYTHON_SOURCE)

        spans = {(f.name, f.start_line, f.end_line) for f in result.functions}
        assert ("total", 6, 10) in spans
        assert ("add", 14, 15) in spans

        calculator = next(c for c in result.classes if c.name == "Calculator")
        assert (calculator.start_line, calculator.end_line) == (13, 18)
        assert calculator.methods == ["add", "_reset"]

    def test_function_complexity(self):
        result = CodeAnalyzer().analyze("pkg/billing.py", PYTHON_SOURCE)
        total = next(f for f in result.functions if f.name == "total")
        assert total.complexity == 2

    def test_comments_counted(self):
        result = CodeAnalyzer().analyze("pkg/billing.py", PYTHON_SOURCE)

        assert result.complexity.comment_lines == 2
        assert [c.line for c in result.comments] == [1, 5]

    def test_symbols_sorted_by_line(self):
        result = CodeAnalyzer().analyze("pkg/billing.py", PYTHON_SOURCE)
        lines = [s.line for s in result.symbols]
        assert lines == sorted(lines)
        assert any(s.kind == SymbolKind.EXPORT and s.name == "Calculator" for s in result.symbols)


class TestJavaScriptAnalysis:
    """Test JavaScript extraction."""

    def test_imports(self):
        result = CodeAnalyzer().analyze("src/cart.js", JS_SOURCE)

        refs = {ref.module: ref.names for ref in result.imports}
        assert refs["./a"] == ["add"]
        assert refs["react"] == ["React", "useState"]
        assert refs["fs"] == ["fs"]

    def test_exports(self):
        result = CodeAnalyzer().analyze("src/cart.js", JS_SOURCE)
        assert result.exports == ["total", "Cart"]

    def test_functions_skip_control_keywords(self):
        result = CodeAnalyzer().analyze("src/cart.js", JS_SOURCE)

        names = [f.name for f in result.functions]
        assert "for" not in names
        assert names == ["total", "checkout"]

        total = result.functions[0]
        assert (total.start_line, total.end_line) == (5, 11)

    def test_class_methods(self):
        result = CodeAnalyzer().analyze("src/cart.js", JS_SOURCE)
        cart = result.classes[0]
        assert cart.name == "Cart"
        assert (cart.start_line, cart.end_line) == (13, 17)
        assert cart.methods == ["checkout"]


class TestOtherLanguages:
    """Test PHP, Java, Go and unsupported languages."""

    def test_php_use_binds_last_segment(self):
        source = "<?php\nnamespace App;\nuse App\\Models\\User;\nuse App\\Services\\Billing as Bills;\n\nclass Invoice {}\n"
        result = CodeAnalyzer().analyze("app/Invoice.php", source)

        assert [ref.names for ref in result.imports] == [["User"], ["Billing"]]
        assert result.exports == ["Invoice"]

    def test_java_imports(self):
        source = "package app;\n\nimport java.util.List;\nimport app.model.Order;\n\npublic class OrderService {\n}\n"
        result = CodeAnalyzer().analyze("src/OrderService.java", source)

        assert [ref.names for ref in result.imports] == [["List"], ["Order"]]
        assert result.classes[0].name == "OrderService"

    def test_go_import_block(self):
        source = 'package main\n\nimport (\n    "fmt"\n    "net/http"\n)\n\nfunc Serve() {\n}\n'
        result = CodeAnalyzer().analyze("main.go", source)

        assert [ref.module for ref in result.imports] == ["fmt", "net/http"]
        assert all(ref.names == [] for ref in result.imports)
        assert result.exports == ["Serve"]

    def test_unsupported_language_only_todos(self):
        result = CodeAnalyzer().analyze("docs/notes.md", "# Notes\n\nTODO: write the install guide\n")

        assert result.language == Language.MARKDOWN
        assert result.functions == []
        assert [t.description for t in result.metadata.todos] == ["write the install guide"]
        assert result.line_count == 4

    def test_internal_failure_downgrades_to_empty_result(self, monkeypatch):
        """Test analyze never raises; it returns an empty-but-valid result."""
        analyzer = CodeAnalyzer()

        def explode(*args, **kwargs):
            raise RuntimeError("regex engine exploded")

        monkeypatch.setattr(analyzer, "_analyze", explode)
        result = analyzer.analyze("src/a.py", "def a():\n    pass\n")

        assert result.language == Language.PYTHON
        assert result.functions == []
        assert result.line_count == 3

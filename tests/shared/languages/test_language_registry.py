"""
Tests for language detection.
"""

from codectx.shared.languages import Language, LanguageRegistry


class TestLanguageRegistry:
    """Test extension-based detection."""

    def test_detects_common_languages(self):
        assert LanguageRegistry.detect("src/app.py") == Language.PYTHON
        assert LanguageRegistry.detect("src/App.tsx") == Language.TYPESCRIPT
        assert LanguageRegistry.detect("src/view.jsx") == Language.JAVASCRIPT
        assert LanguageRegistry.detect("Main.java") == Language.JAVA
        assert LanguageRegistry.detect("main.go") == Language.GO
        assert LanguageRegistry.detect("index.php") == Language.PHP

    def test_extension_case_insensitive(self):
        assert LanguageRegistry.detect("LEGACY.PHP") == Language.PHP

    def test_unknown_is_text(self):
        assert LanguageRegistry.detect("notes.unknownext") == Language.TEXT
        assert LanguageRegistry.detect("") == Language.TEXT

    def test_is_code(self):
        assert LanguageRegistry.is_code(Language.PYTHON)
        assert not LanguageRegistry.is_code(Language.MARKDOWN)

"""
Central Language Registry.

Provides unified access to language metadata and extension-based detection.
"""

from pathlib import Path
from typing import Dict, Optional, Set

from codectx.shared.languages.definitions import LANGUAGE_DEFINITIONS, Language, LanguageDefinition


class LanguageRegistry:
    """
    Central registry for language-related operations.
    Unifies extension mapping, aliasing, and metadata.
    """

    _definitions: Dict[Language, LanguageDefinition] = {d.id: d for d in LANGUAGE_DEFINITIONS}
    _extension_map: Dict[str, Language] = {}

    @classmethod
    def _initialize_maps(cls):
        if not cls._extension_map:
            for defn in cls._definitions.values():
                for ext in defn.extensions:
                    cls._extension_map[ext.lower()] = defn.id

    @classmethod
    def detect(cls, path: Path | str) -> Language:
        """Detect language from file path extension. Unknown → Language.TEXT."""
        cls._initialize_maps()
        if not path:
            return Language.TEXT

        ext = Path(path).suffix.lower()
        return cls._extension_map.get(ext, Language.TEXT)

    @classmethod
    def get_definition(cls, lang: Language) -> Optional[LanguageDefinition]:
        """Get rich metadata for a language."""
        return cls._definitions.get(lang)

    @classmethod
    def get_all_supported_extensions(cls) -> Set[str]:
        """Get all extensions with a known language."""
        cls._initialize_maps()
        return set(cls._extension_map.keys())

    @classmethod
    def is_code(cls, lang: Language) -> bool:
        defn = cls.get_definition(lang)
        return defn.is_code if defn else False

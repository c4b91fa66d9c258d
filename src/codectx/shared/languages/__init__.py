from codectx.shared.languages.definitions import LANGUAGE_DEFINITIONS, Language, LanguageDefinition
from codectx.shared.languages.registry import LanguageRegistry

__all__ = ["Language", "LanguageDefinition", "LANGUAGE_DEFINITIONS", "LanguageRegistry"]

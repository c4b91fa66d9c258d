"""
Language definitions and metadata.
"""

from enum import Enum

from pydantic import BaseModel, Field


class Language(str, Enum):
    """Languages the analyzer can detect from a file extension."""

    PYTHON = "python"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PHP = "php"
    JAVA = "java"
    KOTLIN = "kotlin"
    SWIFT = "swift"
    GO = "go"
    RUST = "rust"
    C = "c"
    CPP = "cpp"
    CSHARP = "csharp"
    RUBY = "ruby"
    SCALA = "scala"
    VUE = "vue"
    HTML = "html"
    CSS = "css"
    SCSS = "scss"
    JSON = "json"
    XML = "xml"
    YAML = "yaml"
    MARKDOWN = "markdown"
    SQL = "sql"
    TEXT = "text"


class LanguageDefinition(BaseModel):
    """Rich metadata for a programming language."""

    name: str
    id: Language
    extensions: set[str]
    primary_extension: str
    aliases: list[str] = Field(default_factory=list)
    is_code: bool = True
    comment_prefixes: list[str] = Field(default_factory=list)


# Central Registry of Language Metadata
LANGUAGE_DEFINITIONS: list[LanguageDefinition] = [
    LanguageDefinition(
        name="Python",
        id=Language.PYTHON,
        extensions={".py", ".pyw", ".pyi"},
        primary_extension=".py",
        aliases=["python3", "py"],
        comment_prefixes=["#"],
    ),
    LanguageDefinition(
        name="JavaScript",
        id=Language.JAVASCRIPT,
        extensions={".js", ".jsx", ".mjs", ".cjs"},
        primary_extension=".js",
        aliases=["js", "jsx", "node"],
        comment_prefixes=["//"],
    ),
    LanguageDefinition(
        name="TypeScript",
        id=Language.TYPESCRIPT,
        extensions={".ts", ".tsx"},
        primary_extension=".ts",
        aliases=["ts", "tsx"],
        comment_prefixes=["//"],
    ),
    LanguageDefinition(
        name="PHP",
        id=Language.PHP,
        extensions={".php"},
        primary_extension=".php",
        comment_prefixes=["//", "#"],
    ),
    LanguageDefinition(
        name="Java",
        id=Language.JAVA,
        extensions={".java"},
        primary_extension=".java",
        comment_prefixes=["//"],
    ),
    LanguageDefinition(
        name="Kotlin",
        id=Language.KOTLIN,
        extensions={".kt", ".kts"},
        primary_extension=".kt",
        comment_prefixes=["//"],
    ),
    LanguageDefinition(
        name="Swift",
        id=Language.SWIFT,
        extensions={".swift"},
        primary_extension=".swift",
        comment_prefixes=["//"],
    ),
    LanguageDefinition(
        name="Go",
        id=Language.GO,
        extensions={".go"},
        primary_extension=".go",
        comment_prefixes=["//"],
    ),
    LanguageDefinition(
        name="Rust",
        id=Language.RUST,
        extensions={".rs"},
        primary_extension=".rs",
        comment_prefixes=["//"],
    ),
    LanguageDefinition(
        name="C",
        id=Language.C,
        extensions={".c", ".h"},
        primary_extension=".c",
        comment_prefixes=["//"],
    ),
    LanguageDefinition(
        name="C++",
        id=Language.CPP,
        extensions={".cpp", ".hpp", ".cc", ".hh"},
        primary_extension=".cpp",
        comment_prefixes=["//"],
    ),
    LanguageDefinition(
        name="C#",
        id=Language.CSHARP,
        extensions={".cs"},
        primary_extension=".cs",
        comment_prefixes=["//"],
    ),
    LanguageDefinition(
        name="Ruby",
        id=Language.RUBY,
        extensions={".rb"},
        primary_extension=".rb",
        comment_prefixes=["#"],
    ),
    LanguageDefinition(
        name="Scala",
        id=Language.SCALA,
        extensions={".scala", ".sc"},
        primary_extension=".scala",
        comment_prefixes=["//"],
    ),
    LanguageDefinition(
        name="Vue",
        id=Language.VUE,
        extensions={".vue"},
        primary_extension=".vue",
        comment_prefixes=["//"],
    ),
    LanguageDefinition(name="HTML", id=Language.HTML, extensions={".html", ".htm"}, primary_extension=".html", is_code=False),
    LanguageDefinition(name="CSS", id=Language.CSS, extensions={".css", ".less", ".sass"}, primary_extension=".css", is_code=False),
    LanguageDefinition(name="SCSS", id=Language.SCSS, extensions={".scss"}, primary_extension=".scss", is_code=False),
    LanguageDefinition(name="JSON", id=Language.JSON, extensions={".json"}, primary_extension=".json", is_code=False),
    LanguageDefinition(name="XML", id=Language.XML, extensions={".xml"}, primary_extension=".xml", is_code=False),
    LanguageDefinition(name="YAML", id=Language.YAML, extensions={".yaml", ".yml"}, primary_extension=".yaml", is_code=False),
    LanguageDefinition(name="Markdown", id=Language.MARKDOWN, extensions={".md", ".markdown"}, primary_extension=".md", is_code=False),
    LanguageDefinition(
        name="SQL",
        id=Language.SQL,
        extensions={".sql"},
        primary_extension=".sql",
        is_code=False,
        comment_prefixes=["--"],
    ),
]

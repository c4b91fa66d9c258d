"""
Project structure detection from marker files.
"""

from pathlib import Path

from codectx.scanner.models import ProjectStructure
from codectx.shared.domain.exceptions import WorkspaceRootError
from codectx.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

# marker file -> (project type, package manager)
PROJECT_MARKERS: dict[str, tuple[str, str]] = {
    "package.json": ("javascript", "npm"),
    "composer.json": ("php", "composer"),
    "requirements.txt": ("python", "pip"),
    "Pipfile": ("python", "pipenv"),
    "pyproject.toml": ("python", "poetry"),
    "Cargo.toml": ("rust", "cargo"),
    "go.mod": ("go", "go"),
    "pom.xml": ("java", "maven"),
    "build.gradle": ("java", "gradle"),
    "Gemfile": ("ruby", "bundler"),
}

# project type -> ordered (marker file, framework); first existing marker wins
FRAMEWORK_MARKERS: dict[str, list[tuple[str, str]]] = {
    "javascript": [
        ("next.config.js", "Next.js"),
        ("nuxt.config.js", "Nuxt.js"),
        ("vue.config.js", "Vue.js"),
        ("angular.json", "Angular"),
        ("gatsby-config.js", "Gatsby"),
        ("svelte.config.js", "Svelte"),
    ],
    "php": [
        ("artisan", "Laravel"),
        ("app/Console/Kernel.php", "Laravel"),
        ("bin/console", "Symfony"),
        ("wp-config.php", "WordPress"),
        ("index.php", "Custom PHP"),
    ],
    "python": [
        ("manage.py", "Django"),
        ("app.py", "Flask"),
        ("main.py", "FastAPI"),
        ("setup.py", "Python Package"),
    ],
}

ENTRY_POINT_CANDIDATES = [
    "main.py",
    "app.py",
    "manage.py",
    "index.js",
    "server.js",
    "src/index.js",
    "src/index.ts",
    "src/main.ts",
    "index.php",
    "public/index.php",
    "main.go",
    "src/main.rs",
]


def analyze_project_structure(root: str | Path) -> ProjectStructure:
    """
    Detect project type, package managers, config files and framework.

    When several ecosystems are present the last matching marker in
    PROJECT_MARKERS order determines ``type``; every marker found is listed in
    ``config_files``.

    Raises:
        WorkspaceRootError: If root is not an existing directory
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise WorkspaceRootError(f"Workspace root is not a directory: {root_path}", {"root": str(root_path)})

    structure = ProjectStructure()

    for marker, (project_type, manager) in PROJECT_MARKERS.items():
        if (root_path / marker).exists():
            structure.type = project_type
            if manager not in structure.package_managers:
                structure.package_managers.append(manager)
            structure.config_files.append(marker)

    for marker, framework in FRAMEWORK_MARKERS.get(structure.type, []):
        if (root_path / marker).exists():
            structure.framework = framework
            break

    structure.entry_points = [c for c in ENTRY_POINT_CANDIDATES if (root_path / c).is_file()]

    logger.debug(
        "project_structure_detected",
        root=str(root_path),
        type=structure.type,
        framework=structure.framework,
    )
    return structure

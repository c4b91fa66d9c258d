"""
Ignore Matcher - Pattern Matching for File Exclusions.

Loads ignore patterns from .codectxignore (gitignore syntax) and from the
scanner's exclude_globs. Supports directory names, file globs and deep path
patterns with **.
"""

import fnmatch
from pathlib import Path

from codectx.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class IgnoreMatcher:
    """
    Matcher for workspace-relative ignore patterns.

    Pattern kinds:
    - Directory names (e.g. 'build/', 'generated'): prune the subtree
    - File patterns (e.g. '*.min.js'): matched against the file name
    - Path patterns (e.g. 'docs/**', '**/fixtures/*.json'): matched against
      the path relative to the root, using forward slashes
    """

    def __init__(self, root: Path, ignore_file: str | None = None, patterns: list[str] | None = None):
        self.root = root
        self.ignore_file = root / ignore_file if ignore_file else None

        self._directories: set[str] = set()
        self._file_patterns: list[str] = []
        self._path_patterns: list[str] = []

        for pattern in patterns or []:
            self._add_pattern(pattern)
        self._load_ignore_file()

    def _load_ignore_file(self) -> None:
        if self.ignore_file is None or not self.ignore_file.is_file():
            return

        try:
            with open(self.ignore_file, encoding="utf-8") as f:
                lines = f.readlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("ignore_file_load_failed", path=str(self.ignore_file), error=str(e))
            return

        for line in lines:
            self._add_pattern(line)

        logger.debug(
            "ignore_file_loaded",
            path=str(self.ignore_file),
            directories=len(self._directories),
            file_patterns=len(self._file_patterns),
            path_patterns=len(self._path_patterns),
        )

    def _add_pattern(self, raw: str) -> None:
        line = raw.strip()
        if not line or line.startswith("#"):
            return

        line = line.replace("\\", "/")
        if line.startswith("/"):
            # Anchored to the root
            self._path_patterns.append(line.lstrip("/"))
            self._path_patterns.append(line.lstrip("/").rstrip("/") + "/**")
            return

        if line.endswith("/"):
            self._directories.add(line.rstrip("/"))
            return

        if "**" in line or "/" in line:
            self._path_patterns.append(line)
            return

        if any(ch in line for ch in "*?["):
            self._file_patterns.append(line)
            return

        # Bare name matches either a directory or a file of that name
        self._directories.add(line)
        self._file_patterns.append(line)

    @property
    def is_empty(self) -> bool:
        return not (self._directories or self._file_patterns or self._path_patterns)

    def should_ignore_directory(self, relative_dir: str) -> bool:
        """
        Check whether a directory (relative to the root) should be pruned.
        """
        relative_dir = relative_dir.replace("\\", "/").strip("/")
        name = relative_dir.rsplit("/", 1)[-1]

        if name in self._directories:
            return True
        if any(fnmatch.fnmatch(name, pattern) for pattern in self._directories if "*" in pattern):
            return True

        return any(self._match_path_pattern(relative_dir + "/", pattern) for pattern in self._path_patterns)

    def should_ignore_file(self, relative_path: str) -> bool:
        """
        Check whether a file (relative to the root) should be skipped.
        """
        relative_path = relative_path.replace("\\", "/")
        name = relative_path.rsplit("/", 1)[-1]

        for pattern in self._file_patterns:
            if fnmatch.fnmatch(name, pattern):
                return True

        return any(self._match_path_pattern(relative_path, pattern) for pattern in self._path_patterns)

    @staticmethod
    def _match_path_pattern(path: str, pattern: str) -> bool:
        """
        Match a relative path against a glob pattern with ** support.

        fnmatch's * already crosses '/', so ** only needs special handling
        where it may match zero leading directories.
        """
        if fnmatch.fnmatch(path, pattern):
            return True
        if pattern.startswith("**/") and fnmatch.fnmatch(path, pattern[3:]):
            return True
        if pattern.endswith("/**") and path.rstrip("/") == pattern[:-3]:
            return True
        return False

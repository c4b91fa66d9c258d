"""
Workspace scanner.

Walks a workspace root and yields candidate source files, pruning excluded
directories before descending into them.
"""

import os
from pathlib import Path
from typing import Iterator

from codectx.scanner.ignore import IgnoreMatcher
from codectx.scanner.models import ScanErrorEntry
from codectx.shared.domain.exceptions import ScanError, WorkspaceRootError
from codectx.shared.infrastructure.config import ScannerConfig
from codectx.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class WorkspaceScanner:
    """
    Lazy workspace walker.

    Every call to scan() starts a fresh walk, so the returned iterator is
    finite and the scan is restartable. Unreadable entries are collected in
    ``errors`` (reset per scan) and never abort the walk.

    Examples:
        >>> scanner = WorkspaceScanner(ScannerConfig())
        >>> files = list(scanner.scan("/path/to/project"))
        >>> scanner.errors
        []
    """

    def __init__(self, config: ScannerConfig | None = None) -> None:
        self.config = config or ScannerConfig()
        self._exclude_dirs = set(self.config.exclude_dirs)
        self._extensions = set(self.config.include_extensions)
        self.errors: list[ScanErrorEntry] = []

    def scan(self, root: str | Path) -> Iterator[Path]:
        """
        Start a scan of *root*.

        Raises:
            WorkspaceRootError: If root does not exist or is not a directory.
                Raised immediately, before iteration starts.
        """
        root_path = Path(root).expanduser()
        if not root_path.exists():
            raise WorkspaceRootError(f"Workspace root does not exist: {root_path}", {"root": str(root_path)})
        if not root_path.is_dir():
            raise WorkspaceRootError(f"Workspace root is not a directory: {root_path}", {"root": str(root_path)})

        root_path = root_path.resolve()
        self.errors = []
        matcher = IgnoreMatcher(root_path, self.config.ignore_file, self.config.exclude_globs)
        return self._walk(root_path, matcher)

    def _walk(self, root: Path, matcher: IgnoreMatcher) -> Iterator[Path]:
        found = 0
        pending = [root]

        while pending:
            directory = pending.pop()
            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                self._record_error(ScanError(str(directory), e.strerror or str(e)))
                continue

            subdirs: list[Path] = []
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        if self._should_descend(entry, root, matcher):
                            subdirs.append(Path(entry.path))
                        continue

                    if not entry.is_file():
                        continue

                    if not self._should_include(entry, root, matcher):
                        continue
                except OSError as e:
                    self._record_error(ScanError(entry.path, e.strerror or str(e)))
                    continue

                found += 1
                yield Path(entry.path)

            # Reverse so that the stack pops subdirectories in name order
            pending.extend(reversed(subdirs))

        logger.debug("workspace_scan_complete", root=str(root), files=found, errors=len(self.errors))

    def _should_descend(self, entry: os.DirEntry, root: Path, matcher: IgnoreMatcher) -> bool:
        if entry.name in self._exclude_dirs:
            return False
        if matcher.is_empty:
            return True
        return not matcher.should_ignore_directory(_relative(entry.path, root))

    def _should_include(self, entry: os.DirEntry, root: Path, matcher: IgnoreMatcher) -> bool:
        extension = os.path.splitext(entry.name)[1].lower().lstrip(".")
        if not extension or extension not in self._extensions:
            return False

        if not matcher.is_empty and matcher.should_ignore_file(_relative(entry.path, root)):
            return False

        size = entry.stat(follow_symlinks=True).st_size
        if size > self.config.max_file_size_bytes:
            logger.debug("file_too_large_skipped", file=entry.path, size_bytes=size)
            return False

        return True

    def _record_error(self, error: ScanError) -> None:
        self.errors.append(ScanErrorEntry(path=error.path, error=error.reason))
        logger.warning("scan_path_unreadable", path=error.path, reason=error.reason)


def _relative(path: str, root: Path) -> str:
    return Path(path).relative_to(root).as_posix()

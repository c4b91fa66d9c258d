"""
Workspace scanning: file discovery and project structure detection.
"""

from codectx.scanner.ignore import IgnoreMatcher
from codectx.scanner.models import ProjectStructure, ScanErrorEntry
from codectx.scanner.scanner import WorkspaceScanner
from codectx.scanner.structure import analyze_project_structure

__all__ = [
    "WorkspaceScanner",
    "IgnoreMatcher",
    "ScanErrorEntry",
    "ProjectStructure",
    "analyze_project_structure",
]

"""
Scanner domain models.
"""

from pydantic import Field

from codectx.shared.domain.base_model import BaseDomainModel


class ScanErrorEntry(BaseDomainModel):
    """A path the scanner could not read. The walk continued past it."""

    path: str
    error: str


class ProjectStructure(BaseDomainModel):
    """
    Project shape detected from marker files at the workspace root.

    type is the primary ecosystem ("python", "javascript", ...) or "unknown".
    """

    type: str = "unknown"
    framework: str | None = None
    package_managers: list[str] = Field(default_factory=list)
    config_files: list[str] = Field(default_factory=list)
    entry_points: list[str] = Field(default_factory=list)

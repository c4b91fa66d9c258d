"""Format a ContextBundle as prompt text for a language model.

Each non-empty section becomes a labeled block. The output of this function
is also what the retriever measures against the token budget.
"""

from __future__ import annotations

from codectx.retrieval.models import ContextBundle, CurrentFileContext, ProjectContext

MAX_LISTED_SYMBOLS = 10


def format_context(bundle: ContextBundle) -> str:
    """Render *bundle* as labeled segments. Returns "" for an empty bundle."""
    blocks: list[str] = []

    if bundle.current_file:
        blocks.append(_format_current_file(bundle.current_file))
        summary = _format_symbol_summary(bundle.current_file)
        if summary:
            blocks.append(summary)

    if bundle.related_files:
        lines = ["[Related Files]:"]
        for related in bundle.related_files:
            symbols = ", ".join(related.symbols[:MAX_LISTED_SYMBOLS])
            lines.append(f"  - {related.relative_path} ({related.relationship.value}: {symbols})")
        blocks.append("\n".join(lines))

    if bundle.dependencies:
        lines = ["[Dependencies]:"]
        for dep in bundle.dependencies:
            line = f"  - {dep.module} -> {dep.relative_path}"
            if dep.exports:
                line += f" | exports: {', '.join(dep.exports[:MAX_LISTED_SYMBOLS])}"
            if dep.key_functions:
                line += f" | key functions: {', '.join(dep.key_functions)}"
            lines.append(line)
        blocks.append("\n".join(lines))

    if bundle.similar_code:
        lines = ["[Similar Code]:"]
        for entry in bundle.similar_code:
            lines.append(
                f"--- {entry.relative_path}:{entry.start_line}-{entry.end_line} "
                f"({entry.chunk_type.value} {entry.name}, similarity {entry.similarity_score:.2f})"
            )
            lines.append(entry.content)
        blocks.append("\n".join(lines))

    if bundle.project_context:
        project = _format_project(bundle.project_context)
        if project:
            blocks.append(project)

    return "\n\n".join(blocks)


def _format_current_file(current: CurrentFileContext) -> str:
    header = f"[Current File]: {current.relative_path} ({current.language.value})"
    if not current.content_preview:
        return header
    return f"{header}\n{current.content_preview}"


def _format_symbol_summary(current: CurrentFileContext) -> str:
    parts = []
    if current.classes:
        parts.append("classes: " + ", ".join(c.name for c in current.classes[:MAX_LISTED_SYMBOLS]))
    if current.functions:
        parts.append("functions: " + ", ".join(f.name for f in current.functions[:MAX_LISTED_SYMBOLS]))
    if current.exports:
        parts.append("exports: " + ", ".join(current.exports[:MAX_LISTED_SYMBOLS]))
    if current.imports:
        parts.append("imports: " + ", ".join(ref.module for ref in current.imports[:MAX_LISTED_SYMBOLS]))
    if not parts:
        return ""
    return "[Symbols]:\n" + "\n".join(f"  - {part}" for part in parts)


def _format_project(project: ProjectContext) -> str:
    if not project.total_files:
        return ""
    lines = ["[Project Summary]:", f"  - {project.total_files} files, {project.total_lines} lines"]
    if project.languages:
        languages = ", ".join(
            f"{stat.language} ({stat.file_count} files, avg {stat.average_lines:g} lines)" for stat in project.languages
        )
        lines.append(f"  - languages: {languages}")
    if project.frameworks:
        lines.append(f"  - frameworks: {', '.join(project.frameworks)}")
    for workspace in project.workspaces:
        structure = workspace.structure
        detail = structure.type if not structure.framework else f"{structure.type}, {structure.framework}"
        lines.append(f"  - workspace {workspace.workspace_path} ({detail})")
    return "\n".join(lines)
